"""Capture of supervised process output with listener fan-out."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TextIO

__all__ = ["LogChunk", "LogStream"]


@dataclass(slots=True)
class LogChunk:
    """A single piece of output read from a supervised process."""

    stream: str
    text: str
    timestamp: datetime
    source: str
    pid: int | None = None


class LogStream:
    """Optionally tee output to disk while notifying listeners.

    Everything written is persisted when ``path`` is set, muted or not.
    """

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else None
        self._handle: TextIO | None = None
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self.path.open("a", encoding="utf-8")
        self._listeners: list[Callable[[LogChunk], None]] = []

    def __enter__(self) -> LogStream:  # noqa: D401 - context manager
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._handle is None or self._handle.closed

    def close(self) -> None:
        if self._handle is not None and not self._handle.closed:
            self._handle.flush()
            self._handle.close()
        self._listeners.clear()

    def write(
        self,
        text: str,
        *,
        source: str,
        pid: int | None = None,
        stream: str = "stdout",
    ) -> LogChunk:
        chunk = LogChunk(
            stream=stream,
            text=text,
            timestamp=datetime.now(UTC),
            source=source,
            pid=pid,
        )
        if self._handle is not None and not self._handle.closed:
            self._handle.write(text)
            self._handle.flush()
        for listener in list(self._listeners):
            listener(chunk)
        return chunk

    def add_listener(self, callback: Callable[[LogChunk], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def _remove() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:  # pragma: no cover - already removed
                pass

        return _remove
