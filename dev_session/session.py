"""End-to-end orchestration of a local development session."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from dev_session import aws, project
from dev_session.config import SessionConfig
from dev_session.console import highlight
from dev_session.errors import SessionAborted
from dev_session.events import EventsClient
from dev_session.runner.credentials import extract_credentials
from dev_session.runner.scheduler import TaskOutcome, schedule_after
from dev_session.runner.silencing import MuteLatch
from dev_session.runner.supervisor import ProcessSupervisor

__all__ = ["DevSession", "SessionOptions", "exit_upon_error", "run_session"]

logger = logging.getLogger("dev_session.session")

SETUP_SCRIPT = "setup"
LOGIN_SCRIPT = "ca:login"
SERVER_SCRIPT = "dev:express"


@dataclass(slots=True)
class SessionOptions:
    """Flags given on the command line for a single run."""

    skip_setup: bool = False
    no_sync: bool = False
    update: bool = False
    verbose: bool = False


def exit_upon_error(error: object, message: str) -> None:
    """Log ``message`` and abort the session when ``error`` is truthy."""

    if not error:
        return
    logger.error(message)
    raise SessionAborted(message)


class DevSession:
    """Authenticate, launch the backend scripts and trigger the start-up events."""

    def __init__(
        self,
        config: SessionConfig,
        options: SessionOptions,
        *,
        events: EventsClient | None = None,
        ambient: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self.options = options
        self.events = events or EventsClient(base_url=config.server_url)
        self.ambient = dict(os.environ) if ambient is None else dict(ambient)
        self.latch = MuteLatch(muted=not options.verbose)

    async def run(self) -> int:
        """Run the session and return the exit code of the server script."""

        npm_path = await project.resolve_npm(self.config.npm_path)
        profile = aws.resolve_profile(
            self.config.resolved_aws_config_path, self.config.aws_profile
        )
        await aws.login(profile)

        credentials, error = await aws.export_credentials(profile)
        exit_upon_error(error, "Failed to acquire environment variables from AWS.")
        extraction = extract_credentials(credentials, ambient=self.ambient)
        if extraction.missing_keys:
            logger.warning(
                "AWS credentials incomplete, missing %s", ", ".join(extraction.missing_keys)
            )
        for line in extraction.malformed_lines:
            logger.warning("Ignoring malformed credential line %d for %s", line.number, line.key)

        project_path = self.config.project_path
        if project_path is None:
            project_path = await project.locate_project(self.config.project_name)
        if self.options.update:
            await project.update_repository(project_path)

        supervisor = ProcessSupervisor(
            executable=npm_path,
            cwd=project_path,
            env=extraction.overlay,
            log_dir=self.config.log_dir,
        )
        return await self._launch(supervisor, project_path)

    async def _launch(self, supervisor: ProcessSupervisor, project_path: Path) -> int:
        fast = self.options.skip_setup
        logger.info("Authorizing with AWS credentials..." if fast else "Setting up environment...")
        setup_code = await supervisor.run(LOGIN_SCRIPT if fast else SETUP_SCRIPT, self.latch)
        if setup_code != 0:
            logger.warning("Script exited with code %s, continuing", setup_code)
        logger.info(
            "Finished %s, starting server script in %s...",
            "authorizing" if fast else "setup",
            highlight(project_path),
        )

        server = asyncio.create_task(supervisor.run(SERVER_SCRIPT, self.latch))
        follow_up = schedule_after(
            self.config.startup_delay,
            self.follow_up_tasks(),
            on_settled=self._on_follow_up_settled,
        )
        exit_code, _ = await asyncio.gather(server, follow_up)
        logger.info("Server script exited with code %s", exit_code)
        return exit_code

    def follow_up_tasks(self) -> list[Callable[[], Awaitable[int]]]:
        tasks: list[Callable[[], Awaitable[int]]] = [self.events.store_system_token_async]
        if not self.options.no_sync:
            tasks.append(self.events.content_sync_async)
        return tasks

    def _on_follow_up_settled(self, outcomes: list[TaskOutcome[int]]) -> None:
        self.latch.release()
        for outcome in outcomes:
            if not outcome.ok:
                logger.warning("Start-up event #%d failed: %s", outcome.index, outcome.error)
        logger.info("Done.")


def run_session(config: SessionConfig, options: SessionOptions) -> int:
    return asyncio.run(DevSession(config, options).run())
