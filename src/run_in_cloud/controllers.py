"""Controllers for the login and run CLI commands."""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from run_in_cloud.cloud.gateway import CloudGateway, OpenCloudGateway
from run_in_cloud.cloud.models import JobError
from run_in_cloud.config import ApiSettings, Settings
from run_in_cloud.credentials import Credentials, CredentialStore
from run_in_cloud.lifecycle import (
    ConsoleProgressReporter,
    PollPolicy,
    ProgressReporter,
    TaskLifecycleController,
)
from run_in_cloud.lifecycle.controller import GatewayFactory


@dataclass(slots=True)
class LoginCommand:
    """CLI input for storing credentials."""

    api_key: str
    universe_id: int
    place_id: int


@dataclass(slots=True)
class RunCommand:
    """CLI input for one publish-and-execute run."""

    place_path: Path
    script_path: Path
    request_timeout_seconds: float | None = None
    print_results: bool = False


@dataclass(slots=True)
class RunReport:
    """Run output to render in CLI."""

    log_lines: list[str]
    job_error: JobError | None

    @property
    def error_line(self) -> str | None:
        if self.job_error is None:
            return None
        return f"task errored with code {self.job_error.code}: {self.job_error.message}"


class RunInCloudCliController:
    """Wires settings, stored credentials and the lifecycle controller for the CLI."""

    def __init__(
        self,
        *,
        gateway_factory: GatewayFactory | None = None,
        reporter: ProgressReporter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._gateway_factory = gateway_factory
        self._reporter = reporter
        self._sleep = sleep

    def login(self, command: LoginCommand) -> list[str]:
        settings = Settings.from_env()
        store = CredentialStore(settings.data_dir)
        store.save(
            Credentials(
                api_key=command.api_key,
                universe_id=command.universe_id,
                place_id=command.place_id,
            ),
        )
        return [
            "Credentials saved: "
            f"universe_id={command.universe_id} place_id={command.place_id} path={store.path}",
        ]

    def run(self, command: RunCommand) -> RunReport:
        settings = Settings.from_env(request_timeout_seconds=command.request_timeout_seconds)
        settings.validate()
        credentials = CredentialStore(settings.data_dir).load()

        lifecycle = TaskLifecycleController(
            gateway_factory=self._gateway_factory or _http_gateway_factory(settings.api),
            reporter=self._reporter or ConsoleProgressReporter(),
            poll_policy=PollPolicy(
                initial_delay_seconds=settings.polling.initial_delay_seconds,
                max_retries=settings.polling.max_retries,
            ),
            log_page_size=settings.polling.log_page_size,
            sleep=self._sleep,
        )
        outcome = lifecycle.run(credentials, command.place_path, command.script_path)

        lines = list(outcome.logs)
        if command.print_results and outcome.results:
            lines.extend(json.dumps(result) for result in outcome.results)
        return RunReport(log_lines=lines, job_error=outcome.job_error)


def _http_gateway_factory(api: ApiSettings) -> GatewayFactory:
    def _build(credentials: Credentials) -> CloudGateway:
        return OpenCloudGateway.from_credentials(
            credentials,
            base_url=api.base_url,
            timeout_seconds=api.request_timeout_seconds,
            user_agent=api.user_agent,
        )

    return _build
