"""Exceptions shared by the session driver and its collaborators."""

from __future__ import annotations

__all__ = ["PreconditionError", "SessionAborted"]


class PreconditionError(RuntimeError):
    """Raised when a required file, tool or value cannot be resolved."""


class SessionAborted(RuntimeError):
    """Raised after a fatal failure has been logged; maps to exit status 1."""

    exit_code = 1
