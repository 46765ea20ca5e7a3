"""Publish → submit → poll → fetch logs lifecycle for one Luau execution task."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

from run_in_cloud.cloud.gateway import CloudGateway
from run_in_cloud.cloud.models import ContentKind, Job, JobError, content_kind_for_path
from run_in_cloud.config import MAX_LOG_PAGE_SIZE
from run_in_cloud.credentials import Credentials
from run_in_cloud.errors import GatewayError, InputReadError, RetriesExhaustedError
from run_in_cloud.lifecycle.backoff import BackoffState, PollPolicy
from run_in_cloud.lifecycle.progress import (
    NullProgressReporter,
    ProgressEvent,
    ProgressReporter,
    ProgressStatus,
)

logger = logging.getLogger(__name__)

PHASE_PUBLISH = "publish"
PHASE_EXECUTE = "execute"
PHASE_LOGS = "logs"

GatewayFactory = Callable[[Credentials], CloudGateway]


@dataclass(slots=True)
class TaskOutcome:
    """Everything a finished run hands back to the caller."""

    logs: list[str]
    job_error: JobError | None
    job_path: str
    version: int
    results: list[Any] | None = None
    elapsed: timedelta | None = None


class TaskLifecycleController:
    """Runs one script against a freshly published place version.

    Local read failures and publish/create/log failures are fatal at once.
    Status polling tolerates ``PollPolicy.max_retries`` failures with a
    doubling delay, then raises ``RetriesExhaustedError``.
    """

    def __init__(
        self,
        *,
        gateway_factory: GatewayFactory,
        reporter: ProgressReporter | None = None,
        poll_policy: PollPolicy | None = None,
        log_page_size: int = MAX_LOG_PAGE_SIZE,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.gateway_factory = gateway_factory
        self.reporter = reporter or NullProgressReporter()
        self.poll_policy = poll_policy or PollPolicy()
        self.log_page_size = log_page_size
        self._sleep = sleep

    def run(self, credentials: Credentials, artifact_path: Path, script_path: Path) -> TaskOutcome:
        content_kind = content_kind_for_path(artifact_path)
        script = _read_text(script_path)
        artifact = _read_bytes(artifact_path)

        with self.gateway_factory(credentials) as gateway:
            version = self._publish(gateway, credentials, artifact, content_kind)
            # Pinned to this version; later publishes by other runs do not change the target.
            job = gateway.create_execution_job(
                credentials.universe_id,
                credentials.place_id,
                version,
                script,
            )
            logger.info("Created execution task %s on version %s", job.path, version)

            finished = self._wait_for_terminal(gateway, job.path)
            elapsed = finished.elapsed
            self._report(
                PHASE_EXECUTE,
                ProgressStatus.DONE,
                (
                    f"task finished executing in {format_duration(elapsed)}!"
                    if elapsed is not None
                    else "task finished executing!"
                ),
            )

            logs = self._collect_logs(gateway, finished.path)

        return TaskOutcome(
            logs=logs,
            job_error=finished.error,
            job_path=finished.path,
            version=version,
            results=finished.results,
            elapsed=elapsed,
        )

    def _publish(
        self,
        gateway: CloudGateway,
        credentials: Credentials,
        artifact: bytes,
        content_kind: ContentKind,
    ) -> int:
        self._report(
            PHASE_PUBLISH,
            ProgressStatus.STARTED,
            "waiting for place to get published...",
        )
        try:
            version = gateway.publish_artifact(
                credentials.universe_id,
                credentials.place_id,
                artifact,
                content_kind,
            )
        except GatewayError as error:
            self._report(PHASE_PUBLISH, ProgressStatus.FAILED, f"failed publishing place: {error}")
            raise
        logger.info("Published place %s as version %s", credentials.place_id, version)
        self._report(PHASE_PUBLISH, ProgressStatus.DONE, "successfully published to place!")
        return version

    def _wait_for_terminal(self, gateway: CloudGateway, job_path: str) -> Job:
        self._report(
            PHASE_EXECUTE,
            ProgressStatus.STARTED,
            "waiting for task to finish executing...",
        )
        state = BackoffState.initial(self.poll_policy)
        while True:
            state, job = self._poll_once(gateway, job_path, state)
            if job is not None and job.state.is_terminal:
                return job
            self._sleep(state.delay_seconds)

    def _poll_once(
        self,
        gateway: CloudGateway,
        job_path: str,
        state: BackoffState,
    ) -> tuple[BackoffState, Job | None]:
        try:
            job = gateway.get_job_status(job_path)
        except GatewayError as error:
            state = state.after_failure()
            logger.warning(
                "Failed fetching task %s: %s (%d retries left)",
                job_path,
                error,
                state.retries_remaining,
            )
            self._report(
                PHASE_EXECUTE,
                ProgressStatus.FAILED,
                f"failed fetching task info, {state.retries_remaining} left",
            )
            if state.exhausted:
                raise RetriesExhaustedError(
                    message=f"No retries left while polling task {job_path}: {error}",
                    attempts=self.poll_policy.max_retries,
                ) from error
            return state, None

        logger.debug("Task %s is %s", job_path, job.raw_state)
        return state, job

    def _collect_logs(self, gateway: CloudGateway, job_path: str) -> list[str]:
        self._report(PHASE_LOGS, ProgressStatus.STARTED, "fetching task logs...")
        messages: list[str] = []
        page_token = ""
        pages = 0
        while True:
            page = gateway.get_log_page(job_path, page_token, self.log_page_size)
            pages += 1
            messages.extend(page.messages)
            if page.is_last:
                break
            page_token = page.next_page_token
        logger.info("Fetched %d log messages in %d pages", len(messages), pages)
        self._report(PHASE_LOGS, ProgressStatus.DONE, f"fetched {len(messages)} log messages")
        return messages

    def _report(self, phase: str, status: ProgressStatus, detail: str | None = None) -> None:
        try:
            self.reporter.report(ProgressEvent(phase=phase, status=status, detail=detail))
        except Exception:  # noqa: BLE001
            logger.warning("Progress reporter failed on %s %s", phase, status.value, exc_info=True)


def format_duration(value: timedelta) -> str:
    """Render a duration as ``1h 2m 3s 40ms``, omitting zero units."""

    total_ms = int(value.total_seconds() * 1000)
    if total_ms <= 0:
        return "0s"
    days, remainder = divmod(total_ms, 86_400_000)
    hours, remainder = divmod(remainder, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    seconds, millis = divmod(remainder, 1000)
    parts = [
        f"{amount}{unit}"
        for amount, unit in (
            (days, "d"),
            (hours, "h"),
            (minutes, "m"),
            (seconds, "s"),
            (millis, "ms"),
        )
        if amount
    ]
    return " ".join(parts)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise InputReadError(message=f"Failed reading script {path}: {error}") from error


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as error:
        raise InputReadError(message=f"Failed reading place file {path}: {error}") from error
