"""Shared pytest fixtures."""

from __future__ import annotations

import logging
import stat
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

FAKE_NPM_SOURCE = """#!{python}
import os
import sys
import time

script = sys.argv[2]
record = os.environ.get("FAKE_NPM_RECORD")
if record:
    with open(record, "a", encoding="utf-8") as handle:
        handle.write(f"{{script}} {{os.environ.get('AWS_ACCESS_KEY_ID', '-')}}\\n")

if script == "echo":
    print("out-1", flush=True)
    sys.stderr.write("err-1\\n")
    sys.stderr.flush()
    print("secret-2", flush=True)
    print("out-3", flush=True)
elif script == "cwd":
    print(os.getcwd())
elif script == "env":
    print(os.environ.get("AWS_SESSION_TOKEN", ""))
elif script == "big":
    sys.stdout.write("x" * (2 * 1024 * 1024))
    sys.stdout.flush()
    sys.stderr.write("done\\r\\n")
    sys.exit(3)
elif script == "wait-marker":
    print("before-release", flush=True)
    marker = os.environ["FAKE_NPM_MARKER"]
    while not os.path.exists(marker):
        time.sleep(0.01)
    print("after-release", flush=True)
elif script.startswith("exit-"):
    print("exiting", flush=True)
    sys.exit(int(script.split("-", 1)[1]))
else:
    print(f"running {{script}}", flush=True)
"""


class RecordingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> list[str]:
        return [record.getMessage() for record in self.records]


@pytest.fixture()
def fake_npm(tmp_path: Path) -> Path:
    """An executable that behaves like ``npm run <script>`` for a few test scripts."""

    path = tmp_path / "bin" / "npm"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(FAKE_NPM_SOURCE.format(python=sys.executable), encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture()
def recording_logger(request: pytest.FixtureRequest) -> Iterator[tuple[logging.Logger, RecordingHandler]]:
    logger = logging.getLogger(f"tests.{request.node.name}")
    handler = RecordingHandler()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger, handler
    logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def _reset_dev_session_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("dev_session")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
