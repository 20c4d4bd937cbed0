"""Supervisor for long-running npm scripts whose output is streamed to the console."""

from __future__ import annotations

import asyncio
import codecs
import logging
from collections.abc import Mapping
from pathlib import Path

from dev_session.console import highlight, log_line
from dev_session.runner.log_stream import LogStream
from dev_session.runner.silencing import Silence, should_silence

__all__ = ["CommandExecutionError", "ProcessSupervisor", "spawn_and_stream"]

logger = logging.getLogger("dev_session.runner.supervisor")

_CHUNK_SIZE = 64 * 1024
# Longest piece of output forwarded as a single line.
_LINE_LIMIT = 2**20


class CommandExecutionError(RuntimeError):
    """Raised when a command cannot be spawned."""


async def _pump(
    reader: asyncio.StreamReader,
    *,
    label: str,
    level: int,
    script: str,
    pid: int,
    silence: Silence,
    stream: LogStream,
    log: logging.Logger,
) -> None:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    pending = ""

    def _emit(text: str) -> None:
        stream.write(text, source=script, pid=pid, stream=label)
        if not should_silence(silence, text):
            log_line(log, text, source=script, pid=pid, level=level)

    while True:
        raw = await reader.read(_CHUNK_SIZE)
        if not raw:
            break
        pending += decoder.decode(raw)
        start = 0
        while (end := pending.find("\n", start)) != -1:
            _emit(pending[start : end + 1])
            start = end + 1
        pending = pending[start:]
        # Output without newlines is forwarded in bounded pieces.
        if len(pending) >= _LINE_LIMIT:
            _emit(pending)
            pending = ""
    pending += decoder.decode(b"", final=True)
    if pending:
        _emit(pending)


async def spawn_and_stream(
    script: str,
    env: Mapping[str, str],
    executable: str | Path,
    cwd: str | Path,
    silence: Silence = False,
    *,
    log_stream: LogStream | None = None,
    log: logging.Logger | None = None,
) -> int:
    """Run ``<executable> run <script>`` in ``cwd`` and stream its output.

    ``env`` is the complete child environment. Each stdout/stderr line is
    forwarded to the logger unless ``silence`` (a flag, or a predicate asked
    again for every line) mutes it. Resolves with the child's exit code once
    both pipes are drained and the process has terminated. There is no restart
    and no cancellation; stop the child out-of-band if needed.
    """

    log = log or logger
    stream = log_stream if log_stream is not None else LogStream()
    log.info("Executing script %s", highlight(script))
    try:
        process = await asyncio.create_subprocess_exec(
            str(executable),
            "run",
            script,
            cwd=str(cwd),
            env=dict(env),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        stream.write(f"Failed to start command: {exc}\n", source=script, stream="stderr")
        raise CommandExecutionError(str(exc)) from exc

    pid = process.pid
    pumps = []
    if process.stdout is not None:
        pumps.append(
            _pump(
                process.stdout,
                label="stdout",
                level=logging.INFO,
                script=script,
                pid=pid,
                silence=silence,
                stream=stream,
                log=log,
            )
        )
    if process.stderr is not None:
        pumps.append(
            _pump(
                process.stderr,
                label="stderr",
                level=logging.ERROR,
                script=script,
                pid=pid,
                silence=silence,
                stream=stream,
                log=log,
            )
        )
    try:
        await asyncio.gather(*pumps)
    finally:
        exit_code = await process.wait()

    exit_message = f"Process exited with code {exit_code}"
    stream.write(exit_message + "\n", source=script, pid=pid, stream="status")
    if not should_silence(silence, exit_message):
        log_line(log, exit_message, source=script, pid=pid)
    return exit_code


class ProcessSupervisor:
    """Launch npm scripts of one project with a fixed executable and environment."""

    def __init__(
        self,
        *,
        executable: str | Path,
        cwd: str | Path,
        env: Mapping[str, str],
        log_dir: Path | None = None,
    ) -> None:
        self.executable = str(executable)
        self.cwd = Path(cwd)
        self.env = env
        self.log_dir = Path(log_dir) if log_dir is not None else None

    def log_path(self, script: str) -> Path | None:
        if self.log_dir is None:
            return None
        safe_name = script.replace(":", "-").replace("/", "-")
        return self.log_dir / f"{safe_name}.log"

    async def run(self, script: str, silence: Silence = False) -> int:
        with LogStream(self.log_path(script)) as stream:
            return await spawn_and_stream(
                script,
                self.env,
                self.executable,
                self.cwd,
                silence,
                log_stream=stream,
            )
