"""One-shot shell command execution that reports failures as data."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

__all__ = ["CommandError", "CommandOutcome", "run_command"]

logger = logging.getLogger("dev_session.runner.commands")


class CommandError(RuntimeError):
    """Describes a command that could not be run or exited unsuccessfully."""

    def __init__(
        self,
        message: str,
        *,
        command: str,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


@dataclass(slots=True, frozen=True)
class CommandOutcome:
    """Captured stdout of a command, or the error that prevented it."""

    output: str | None
    error: CommandError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self) -> Iterator[str | CommandError | None]:
        yield self.output
        yield self.error


async def run_command(
    command_line: str,
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> CommandOutcome:
    """Run ``command_line`` through the shell and capture its stdout.

    Never raises for spawn failures, non-zero exits or timeouts; those are
    returned in :attr:`CommandOutcome.error`. ``output`` is the raw stdout text,
    untrimmed, and may be empty on success.
    """

    logger.debug("Running command: %s", command_line)
    try:
        process = await asyncio.create_subprocess_shell(
            command_line,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        return CommandOutcome(
            output=None,
            error=CommandError(f"Failed to start command: {exc}", command=command_line),
        )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        process.kill()
        await process.wait()
        return CommandOutcome(
            output=None,
            error=CommandError(
                f"Command exceeded timeout of {timeout}s; process killed",
                command=command_line,
            ),
        )

    output = stdout.decode("utf-8", errors="replace")
    if process.returncode != 0:
        error_text = stderr.decode("utf-8", errors="replace")
        return CommandOutcome(
            output=output,
            error=CommandError(
                f"Command failed with exit code {process.returncode}: {command_line}",
                command=command_line,
                returncode=process.returncode,
                stderr=error_text,
            ),
        )
    return CommandOutcome(output=output)
