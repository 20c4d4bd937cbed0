"""Turn ``aws configure export-credentials --format env`` output into an environment."""

from __future__ import annotations

import enum
import os
import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field

__all__ = [
    "DEFAULT_CREDENTIAL_KEYS",
    "CredentialExtraction",
    "CredentialLine",
    "EnvironmentOverlay",
    "LineKind",
    "extract_credentials",
    "parse_credential_lines",
]

DEFAULT_CREDENTIAL_KEYS: tuple[str, ...] = (
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
)

_EXPORT_LINE = re.compile(r"^\s*export\s+(?P<key>[A-Za-z_][A-Za-z0-9_]*)=(?P<value>.*)$")
_QUOTES = "\"'"


class LineKind(enum.StrEnum):
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    MALFORMED = "malformed"


@dataclass(slots=True, frozen=True)
class CredentialLine:
    """Classification of a single line of the credential blob."""

    number: int
    kind: LineKind
    raw: str
    key: str | None = None
    value: str | None = None


class EnvironmentOverlay(Mapping[str, str]):
    """Immutable environment derived from the ambient one plus credential values."""

    __slots__ = ("_values", "_applied")

    def __init__(
        self, base: Mapping[str, str], applied: Iterable[str] = ()
    ) -> None:
        self._values: dict[str, str] = {str(k): str(v) for k, v in base.items()}
        self._applied = frozenset(applied)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"EnvironmentOverlay({len(self._values)} vars, applied={sorted(self._applied)})"

    @property
    def applied_keys(self) -> frozenset[str]:
        """Keys whose value came from the credential blob."""

        return self._applied

    def with_values(self, values: Mapping[str, str]) -> EnvironmentOverlay:
        merged = dict(self._values)
        merged.update(values)
        return EnvironmentOverlay(merged, self._applied | set(values))

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)


@dataclass(slots=True, frozen=True)
class CredentialExtraction:
    overlay: EnvironmentOverlay
    lines: list[CredentialLine] = field(default_factory=list)
    keys: tuple[str, ...] = DEFAULT_CREDENTIAL_KEYS

    @property
    def missing_keys(self) -> list[str]:
        return [key for key in self.keys if key not in self.overlay.applied_keys]

    @property
    def malformed_lines(self) -> list[CredentialLine]:
        return [line for line in self.lines if line.kind is LineKind.MALFORMED]


def _strip_value(raw: str) -> str:
    value = raw.strip()
    if value[:1] in _QUOTES:
        value = value[1:]
    # A value ends at the first quote character, which also drops a closing quote.
    for quote in _QUOTES:
        index = value.find(quote)
        if index != -1:
            value = value[:index]
    return value.strip()


def parse_credential_lines(
    blob: str, keys: Sequence[str] = DEFAULT_CREDENTIAL_KEYS
) -> list[CredentialLine]:
    """Classify each non-blank line of ``blob`` against the allow-listed ``keys``."""

    allowed = set(keys)
    parsed: list[CredentialLine] = []
    for number, raw in enumerate(blob.splitlines(), start=1):
        if not raw.strip():
            continue
        match = _EXPORT_LINE.match(raw)
        if match is None or match.group("key") not in allowed:
            parsed.append(CredentialLine(number=number, kind=LineKind.UNMATCHED, raw=raw))
            continue
        key = match.group("key")
        value = _strip_value(match.group("value"))
        if not value:
            parsed.append(
                CredentialLine(number=number, kind=LineKind.MALFORMED, raw=raw, key=key)
            )
            continue
        parsed.append(
            CredentialLine(number=number, kind=LineKind.MATCHED, raw=raw, key=key, value=value)
        )
    return parsed


def extract_credentials(
    blob: str | None,
    *,
    ambient: Mapping[str, str] | None = None,
    keys: Sequence[str] = DEFAULT_CREDENTIAL_KEYS,
) -> CredentialExtraction:
    """Build an overlay of ``ambient`` (default ``os.environ``) with credentials applied.

    Later lines overwrite earlier ones for the same key. Keys absent from the
    blob keep their ambient value; nothing is removed.
    """

    base = os.environ if ambient is None else ambient
    lines = parse_credential_lines(blob or "", keys)
    values: dict[str, str] = {}
    for line in lines:
        if line.kind is LineKind.MATCHED and line.key is not None and line.value is not None:
            values[line.key] = line.value
    overlay = EnvironmentOverlay(base).with_values(values)
    return CredentialExtraction(overlay=overlay, lines=lines, keys=tuple(keys))
