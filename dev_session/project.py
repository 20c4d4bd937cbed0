"""Discovery of the npm executable and the backend project checkout."""

from __future__ import annotations

import logging
import shlex
from pathlib import Path

from dev_session.errors import PreconditionError
from dev_session.runner.commands import CommandOutcome, run_command

__all__ = ["locate_project", "parse_whereis", "resolve_npm", "update_repository"]

logger = logging.getLogger("dev_session.project")


def parse_whereis(output: str | None) -> str | None:
    """Return the first path from ``whereis`` output (``npm: /usr/bin/npm ...``)."""

    tokens = (output or "").split()
    if len(tokens) < 2:
        return None
    return tokens[1]


async def resolve_npm(explicit: str | None = None) -> str:
    if explicit:
        return explicit
    outcome = await run_command("whereis npm")
    if outcome.error is not None:
        raise PreconditionError(f"Failed to resolve npm path: {outcome.error}")
    npm_path = parse_whereis(outcome.output)
    if npm_path is None:
        raise PreconditionError("Failed to resolve npm path")
    return npm_path


async def locate_project(name: str, *, search_root: Path | None = None) -> Path:
    """Find the first directory called ``name`` below ``search_root`` (default: home)."""

    logger.info("Project path not declared, attempting to find...")
    root = shlex.quote(str(search_root)) if search_root is not None else "~"
    command = (
        f"find {root} -type d -name {shlex.quote(name)}"
        " -not -path '*/.*' -not -path '*/Library/*' -not -path '*/System/*'"
        " -prune -print -quit"
    )
    outcome = await run_command(command)
    # find exits non-zero on unreadable directories even when it printed a match.
    found = (outcome.output or "").strip()
    if not found:
        raise PreconditionError("Failed to locate project path.")
    return Path(found.splitlines()[0])


async def update_repository(path: Path) -> CommandOutcome:
    logger.info("Updating git repository...")
    outcome = await run_command("git pull", cwd=path)
    if outcome.error is not None:
        logger.warning("git pull failed: %s", outcome.error)
    return outcome
