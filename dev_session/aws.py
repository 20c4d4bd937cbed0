"""AWS SSO helpers: profile discovery, login and credential export."""

from __future__ import annotations

import logging
import re
import shlex
from pathlib import Path

from dev_session.console import highlight
from dev_session.errors import PreconditionError
from dev_session.runner.commands import CommandOutcome, run_command

__all__ = [
    "SSO_SETUP_INSTRUCTIONS",
    "export_credentials",
    "login",
    "resolve_profile",
]

logger = logging.getLogger("dev_session.aws")

_PROFILE_SECTION = re.compile(r"^\s*\[profile (.+)]", re.MULTILINE)

SSO_SETUP_INSTRUCTIONS = (
    "No AWS SSO session found. Create one by executing the following command:\n"
    "aws configure sso --use-device-code\n"
    "start url = https://hema-digital.awsapps.com/start/#\n"
    "region = eu-central-1\n"
    "output = json\n"
    "registration scopes = sso:account:access"
)


def resolve_profile(config_path: Path, explicit: str | None = None) -> str:
    """Return ``explicit`` or the first ``[profile ...]`` section of the AWS config."""

    config_path = Path(config_path)
    if not config_path.exists():
        raise PreconditionError(
            "Unable to locate aws config file. Configure AWS SSO before launching the debugger."
        )
    if explicit:
        return explicit
    match = _PROFILE_SECTION.search(config_path.read_text(encoding="utf-8"))
    if match is None:
        raise PreconditionError(SSO_SETUP_INSTRUCTIONS)
    return match.group(1).strip()


async def login(profile: str) -> CommandOutcome:
    """Run ``aws sso login``; the outcome is informational only."""

    logger.info("Authorizing with SSO profile %s", highlight(profile))
    outcome = await run_command(f"aws sso login --profile {shlex.quote(profile)}")
    if outcome.error is not None:
        logger.warning("SSO login reported a failure: %s", outcome.error)
    else:
        logger.info("Authenticated with SSO.")
    return outcome


async def export_credentials(profile: str) -> CommandOutcome:
    return await run_command(
        f"aws configure export-credentials --profile {shlex.quote(profile)} --format env"
    )
