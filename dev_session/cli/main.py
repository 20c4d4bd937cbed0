"""Click-based CLI for launching a local development session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import click

from dev_session.config import SessionConfig, load_session_config, save_session_config
from dev_session.console import configure_logging
from dev_session.errors import PreconditionError, SessionAborted
from dev_session.session import SessionOptions, run_session

logger = logging.getLogger("dev_session.cli")


@dataclass
class CLIState:
    settings: SessionConfig


@click.group()
@click.option(
    "--path",
    "project_path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Backend project checkout; searched for under $HOME when omitted.",
)
@click.option("--server-url", help="Override the local server URL for this invocation.")
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Also write the output of every npm script to this directory.",
)
@click.pass_context
def app(
    ctx: click.Context,
    project_path: Path | None,
    server_url: str | None,
    log_dir: Path | None,
) -> None:
    """Bootstrap a local backend development session."""

    config = load_session_config()
    ctx.obj = CLIState(
        settings=config.merged(project_path=project_path, server_url=server_url, log_dir=log_dir)
    )


@app.command()
@click.option(
    "--aws-profile",
    "--profile",
    "aws_profile",
    help="AWS SSO profile; defaults to the first profile in ~/.aws/config.",
)
@click.option(
    "--skip-setup",
    "--fast",
    "skip_setup",
    is_flag=True,
    help="Only authenticate (ca:login) instead of running the full setup script.",
)
@click.option(
    "--no-sync",
    "--nosync",
    "no_sync",
    is_flag=True,
    help="Skip the content sync call after the server has started.",
)
@click.option("--update", is_flag=True, help="Run git pull in the project before starting.")
@click.option("--verbose", is_flag=True, help="Show script output right away instead of after start-up.")
@click.option(
    "--delay",
    type=float,
    help="Seconds to wait after starting the server before calling the event endpoints.",
)
@click.option(
    "--path",
    "project_path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Backend project checkout; overrides the group-level --path.",
)
@click.pass_obj
def start(
    state: CLIState,
    project_path: Path | None,
    aws_profile: str | None,
    skip_setup: bool,
    no_sync: bool,
    update: bool,
    verbose: bool,
    delay: float | None,
) -> None:
    """Authenticate with AWS SSO and start the backend server."""

    configure_logging(verbose=verbose)
    settings = state.settings.merged(
        project_path=project_path, aws_profile=aws_profile, startup_delay=delay
    )
    options = SessionOptions(
        skip_setup=skip_setup,
        no_sync=no_sync,
        update=update,
        verbose=verbose,
    )
    try:
        run_session(settings, options)
    except SessionAborted:
        raise SystemExit(SessionAborted.exit_code) from None
    except PreconditionError as exc:
        logger.error(str(exc))
        raise SystemExit(1) from None
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as exc:
        logger.error(
            "An error occurred whilst attempting to debug the application: %s", exc, exc_info=verbose
        )
        raise SystemExit(1) from None


@app.command()
@click.option(
    "--aws-profile",
    "--profile",
    "aws_profile",
    help="Default AWS SSO profile.",
)
@click.option("--npm-path", help="Explicit npm executable instead of `whereis npm`.")
@click.option("--delay", type=float, help="Default start-up delay in seconds.")
@click.pass_obj
def configure(
    state: CLIState,
    aws_profile: str | None,
    npm_path: str | None,
    delay: float | None,
) -> None:
    """Persist defaults under ~/.dev-session/config.toml."""

    config = state.settings.merged(aws_profile=aws_profile, npm_path=npm_path, startup_delay=delay)
    path = save_session_config(config)
    click.echo(f"Saved configuration to {path}.")


def main() -> None:
    """Entry point for console_scripts."""

    app(standalone_mode=True)
