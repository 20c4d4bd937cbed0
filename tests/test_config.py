from __future__ import annotations

from pathlib import Path

import pytest

from dev_session.config import SessionConfig, config_path, load_session_config, save_session_config


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "dev-session-home"
    monkeypatch.setenv("DEV_SESSION_HOME", str(home))
    for name in ("DEV_SESSION_PROJECT_PATH", "DEV_SESSION_SERVER_URL", "DEV_SESSION_AWS_PROFILE"):
        monkeypatch.delenv(name, raising=False)
    return home


def test_defaults_without_file() -> None:
    config = load_session_config()
    assert config.project_path is None
    assert config.project_name == "experience-customerapp-backend"
    assert config.server_url == "http://localhost:3000"
    assert config.startup_delay == 7.0
    assert config.resolved_aws_config_path == Path.home() / ".aws" / "config"


def test_file_then_environment_overrides(
    _isolated_home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _isolated_home.mkdir(parents=True)
    config_path().write_text(
        '[project]\npath = "/work/backend"\nnpm_path = "/opt/npm"\n'
        '[server]\nurl = "http://localhost:4000"\nstartup_delay = 2.5\n'
        '[aws]\nprofile = "dev"\n'
    )
    config = load_session_config()
    assert config.project_path == Path("/work/backend")
    assert config.npm_path == "/opt/npm"
    assert config.server_url == "http://localhost:4000"
    assert config.startup_delay == 2.5
    assert config.aws_profile == "dev"

    monkeypatch.setenv("DEV_SESSION_AWS_PROFILE", "prod")
    monkeypatch.setenv("DEV_SESSION_PROJECT_PATH", str(tmp_path))
    overridden = load_session_config()
    assert overridden.aws_profile == "prod"
    assert overridden.project_path == tmp_path


def test_merged_keeps_values_when_override_missing() -> None:
    config = SessionConfig(aws_profile="dev", startup_delay=3.0)
    merged = config.merged(aws_profile=None, startup_delay=0.0, server_url="http://x")
    assert merged.aws_profile == "dev"
    assert merged.startup_delay == 0.0
    assert merged.server_url == "http://x"
    assert config.server_url == "http://localhost:3000"


def test_save_and_reload(tmp_path: Path) -> None:
    config = SessionConfig(
        project_path=tmp_path / "backend",
        aws_profile="dev",
        npm_path="/usr/local/bin/npm",
        startup_delay=5.0,
        log_dir=tmp_path / "logs",
    )
    path = save_session_config(config)
    assert path == config_path()
    assert load_session_config() == config
