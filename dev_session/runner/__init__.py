"""Command runner, credential extraction, process supervision and task scheduling."""

from .commands import CommandError, CommandOutcome, run_command
from .credentials import (
    DEFAULT_CREDENTIAL_KEYS,
    CredentialExtraction,
    CredentialLine,
    EnvironmentOverlay,
    LineKind,
    extract_credentials,
    parse_credential_lines,
)
from .log_stream import LogChunk, LogStream
from .scheduler import TaskFailedError, TaskOutcome, run_after, schedule_after, values
from .silencing import MuteLatch, Silence, should_silence
from .supervisor import CommandExecutionError, ProcessSupervisor, spawn_and_stream

__all__ = [
    "DEFAULT_CREDENTIAL_KEYS",
    "CommandError",
    "CommandExecutionError",
    "CommandOutcome",
    "CredentialExtraction",
    "CredentialLine",
    "EnvironmentOverlay",
    "LineKind",
    "LogChunk",
    "LogStream",
    "MuteLatch",
    "ProcessSupervisor",
    "Silence",
    "TaskFailedError",
    "TaskOutcome",
    "extract_credentials",
    "parse_credential_lines",
    "run_after",
    "run_command",
    "schedule_after",
    "should_silence",
    "spawn_and_stream",
    "values",
]
