"""Configuration helpers shared by the CLI and the session driver."""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

__all__ = [
    "SessionConfig",
    "config_path",
    "load_session_config",
    "save_session_config",
]

_CONFIG_FILENAME = "config.toml"
_DEFAULT_PROJECT_NAME = "experience-customerapp-backend"
_DEFAULT_SERVER_URL = "http://localhost:3000"
_DEFAULT_STARTUP_DELAY = 7.0
_ENV_HOME = "DEV_SESSION_HOME"
_ENV_PROJECT_PATH = "DEV_SESSION_PROJECT_PATH"
_ENV_SERVER_URL = "DEV_SESSION_SERVER_URL"
_ENV_PROFILE = "DEV_SESSION_AWS_PROFILE"


def _default_aws_config() -> Path:
    return Path.home() / ".aws" / "config"


@dataclass(slots=True)
class SessionConfig:
    """Persisted defaults for a development session."""

    project_path: Path | None = None
    project_name: str = _DEFAULT_PROJECT_NAME
    server_url: str = _DEFAULT_SERVER_URL
    aws_profile: str | None = None
    aws_config_path: Path | None = None
    npm_path: str | None = None
    startup_delay: float = _DEFAULT_STARTUP_DELAY
    log_dir: Path | None = None

    @property
    def resolved_aws_config_path(self) -> Path:
        return self.aws_config_path or _default_aws_config()

    def merged(
        self,
        *,
        project_path: Path | None = None,
        server_url: str | None = None,
        aws_profile: str | None = None,
        npm_path: str | None = None,
        startup_delay: float | None = None,
        log_dir: Path | None = None,
    ) -> SessionConfig:
        """Return a copy that applies CLI/env overrides."""

        return replace(
            self,
            project_path=project_path or self.project_path,
            server_url=server_url or self.server_url,
            aws_profile=aws_profile or self.aws_profile,
            npm_path=npm_path or self.npm_path,
            startup_delay=self.startup_delay if startup_delay is None else startup_delay,
            log_dir=log_dir or self.log_dir,
        )


def _config_dir(create: bool = False) -> Path:
    custom = os.environ.get(_ENV_HOME)
    base = Path(custom) if custom else Path.home() / ".dev-session"
    if create:
        base.mkdir(parents=True, exist_ok=True)
    return base


def config_path() -> Path:
    """Return the path to the persisted configuration."""

    return _config_dir(create=False) / _CONFIG_FILENAME


def _optional_path(value: Any) -> Path | None:
    if not value:
        return None
    return Path(str(value)).expanduser()


def load_session_config() -> SessionConfig:
    """Load configuration from disk + environment overrides."""

    data: dict[str, Any] = {}
    path = config_path()
    if path.exists():
        data = tomllib.loads(path.read_text(encoding="utf-8"))

    project = data.get("project", {})
    aws = data.get("aws", {})
    server = data.get("server", {})
    config = SessionConfig(
        project_path=_optional_path(project.get("path")),
        project_name=str(project.get("name") or _DEFAULT_PROJECT_NAME),
        server_url=str(server.get("url") or _DEFAULT_SERVER_URL),
        aws_profile=aws.get("profile") or None,
        aws_config_path=_optional_path(aws.get("config_path")),
        npm_path=project.get("npm_path") or None,
        startup_delay=float(server.get("startup_delay", _DEFAULT_STARTUP_DELAY)),
        log_dir=_optional_path(project.get("log_dir")),
    )

    return config.merged(
        project_path=_optional_path(os.environ.get(_ENV_PROJECT_PATH)),
        server_url=os.environ.get(_ENV_SERVER_URL),
        aws_profile=os.environ.get(_ENV_PROFILE),
    )


def save_session_config(config: SessionConfig) -> Path:
    """Persist configuration to ~/.dev-session/config.toml."""

    base = _config_dir(create=True)
    path = base / _CONFIG_FILENAME
    lines = [
        "[project]",
        f"name = {json.dumps(config.project_name)}",
    ]
    if config.project_path is not None:
        lines.append(f"path = {json.dumps(str(config.project_path))}")
    if config.npm_path:
        lines.append(f"npm_path = {json.dumps(config.npm_path)}")
    if config.log_dir is not None:
        lines.append(f"log_dir = {json.dumps(str(config.log_dir))}")
    lines += [
        "",
        "[server]",
        f"url = {json.dumps(config.server_url)}",
        f"startup_delay = {float(config.startup_delay)}",
        "",
        "[aws]",
    ]
    if config.aws_profile:
        lines.append(f"profile = {json.dumps(config.aws_profile)}")
    if config.aws_config_path is not None:
        lines.append(f"config_path = {json.dumps(str(config.aws_config_path))}")
    lines.append("")
    path.write_text("\n".join(lines), encoding="utf-8")
    return path
