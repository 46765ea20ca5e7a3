"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from run_in_cloud.cloud.models import ContentKind, Job, JobError, LogPage, TaskState
from run_in_cloud.credentials import Credentials

JOB_PATH = "universes/1/places/2/versions/42/luau-execution-sessions/abc/tasks/99"


def make_job(
    state: TaskState = TaskState.PROCESSING,
    *,
    path: str = JOB_PATH,
    created_at: str | None = None,
    updated_at: str | None = None,
    error: JobError | None = None,
    results: list[object] | None = None,
) -> Job:
    payload: dict[str, object] = {"path": path, "state": state.value}
    if created_at is not None:
        payload["createTime"] = created_at
    if updated_at is not None:
        payload["updateTime"] = updated_at
    if error is not None:
        payload["error"] = {"code": error.code, "message": error.message}
    if results is not None:
        payload["output"] = {"results": results}
    return Job.from_payload(payload)


class FakeGateway:
    """Scripted in-memory gateway that records every call."""

    def __init__(self) -> None:
        self.version: int | Exception = 42
        self.created: Job | Exception = make_job(TaskState.QUEUED)
        self.statuses: list[Job | Exception] = [make_job(TaskState.COMPLETE)]
        self.log_pages: dict[str, LogPage | Exception] = {"": LogPage(messages=[])}
        self.calls: list[tuple[str, tuple[object, ...]]] = []
        self.closed = False

    def publish_artifact(
        self,
        universe_id: int,
        place_id: int,
        artifact: bytes,
        content_kind: ContentKind | str,
    ) -> int:
        self.calls.append(("publish", (universe_id, place_id, artifact, content_kind)))
        return _resolve(self.version)

    def create_execution_job(
        self,
        universe_id: int,
        place_id: int,
        version: int,
        script: str,
    ) -> Job:
        self.calls.append(("create", (universe_id, place_id, version, script)))
        return _resolve(self.created)

    def get_job_status(self, job_path: str) -> Job:
        self.calls.append(("status", (job_path,)))
        if not self.statuses:
            raise AssertionError("Unexpected extra status request")
        return _resolve(self.statuses.pop(0))

    def get_log_page(self, job_path: str, page_token: str = "", max_page_size: int = 10_000):
        self.calls.append(("logs", (job_path, page_token, max_page_size)))
        return _resolve(self.log_pages[page_token])

    def calls_named(self, name: str) -> list[tuple[object, ...]]:
        return [args for call_name, args in self.calls if call_name == name]

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> FakeGateway:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


def _resolve(value):
    if isinstance(value, Exception):
        raise value
    return value


@pytest.fixture()
def credentials() -> Credentials:
    return Credentials(api_key="test-key", universe_id=1, place_id=2)


@pytest.fixture()
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def run_files(tmp_path: Path) -> tuple[Path, Path]:
    place = tmp_path / "game.rbxl"
    place.write_bytes(b"<roblox!binary>")
    script = tmp_path / "script.luau"
    script.write_text('print("hello")', encoding="utf-8")
    return place, script


@pytest.fixture()
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the data dir at a temp directory and clear other overrides."""

    for name in (
        "RUN_IN_CLOUD_API_BASE_URL",
        "RUN_IN_CLOUD_REQUEST_TIMEOUT_SECONDS",
        "RUN_IN_CLOUD_POLL_INITIAL_DELAY_SECONDS",
        "RUN_IN_CLOUD_POLL_MAX_RETRIES",
        "RUN_IN_CLOUD_LOG_PAGE_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
    data_dir = tmp_path / "data"
    monkeypatch.setenv("RUN_IN_CLOUD_DATA_DIR", str(data_dir))
    return data_dir


@pytest.fixture()
def job_factory():
    return make_job
