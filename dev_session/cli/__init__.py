"""Command line interface for dev-session."""
