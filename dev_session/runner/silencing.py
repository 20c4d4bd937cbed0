"""Output muting decisions for supervised processes."""

from __future__ import annotations

from collections.abc import Callable

__all__ = ["MuteLatch", "Silence", "should_silence"]

Silence = bool | Callable[[str], bool]


def should_silence(silence: Silence, chunk: str) -> bool:
    """Decide whether ``chunk`` is muted; predicates are asked on every call."""

    if callable(silence):
        return bool(silence(chunk))
    return bool(silence)


class MuteLatch:
    """One-way mute flag usable as a silencing predicate.

    Stream handlers call the latch for every chunk, so releasing it takes
    effect for output that is already being streamed.
    """

    __slots__ = ("_muted",)

    def __init__(self, muted: bool = True) -> None:
        self._muted = muted

    def __call__(self, chunk: str) -> bool:
        return self._muted

    @property
    def released(self) -> bool:
        return not self._muted

    def release(self, *_: object) -> None:
        self._muted = False
