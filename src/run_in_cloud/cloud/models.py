"""Typed views of Open Cloud payloads used by the gateway and the lifecycle controller."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any

from run_in_cloud.errors import DecodeError, UnsupportedFormatError


class ContentKind(str, Enum):
    """Place file encodings accepted by the publish endpoint."""

    BINARY = "binary"
    XML = "xml"

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES[self]

    @classmethod
    def coerce(cls, value: ContentKind | str) -> ContentKind:
        """Return the matching kind or raise ``UnsupportedFormatError``."""

        try:
            return cls(value)
        except ValueError as error:
            raise UnsupportedFormatError(
                message=f"Unsupported content kind: {value!r}",
            ) from error


_CONTENT_TYPES = {
    ContentKind.BINARY: "application/octet-stream",
    ContentKind.XML: "application/xml",
}
_EXTENSION_KINDS = {
    "rbxl": ContentKind.BINARY,
    "rbxlx": ContentKind.XML,
}
_FRACTION_RE = re.compile(r"(\.\d+)")


def content_kind_for_path(path: Path) -> ContentKind:
    """Map a place file extension to its content kind."""

    extension = path.suffix.removeprefix(".")
    if not extension:
        raise UnsupportedFormatError(message=f"Place file has no extension: {path}")
    kind = _EXTENSION_KINDS.get(extension)
    if kind is None:
        raise UnsupportedFormatError(
            message=(
                f"Place file extension not supported: {extension!r}. "
                "Expected .rbxl or .rbxlx."
            ),
        )
    return kind


class TaskState(str, Enum):
    """Execution task lifecycle states as reported by Open Cloud."""

    UNSPECIFIED = "STATE_UNSPECIFIED"
    QUEUED = "QUEUED"
    PROCESSING = "PROCESSING"
    CANCELLED = "CANCELLED"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"
    UNRECOGNIZED = "UNRECOGNIZED"

    @property
    def is_terminal(self) -> bool:
        return self in {TaskState.COMPLETE, TaskState.FAILED}

    @classmethod
    def from_wire(cls, value: str) -> TaskState:
        try:
            return cls(value)
        except ValueError:
            return cls.UNRECOGNIZED


@dataclass(frozen=True, slots=True)
class JobError:
    """Error reported by the remote job itself."""

    code: str
    message: str


@dataclass(frozen=True, slots=True)
class Job:
    """Snapshot of one execution task."""

    path: str
    state: TaskState
    raw_state: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    error: JobError | None = None
    results: list[Any] | None = None

    @property
    def elapsed(self) -> timedelta | None:
        if self.created_at is None or self.updated_at is None:
            return None
        elapsed = self.updated_at - self.created_at
        if elapsed < timedelta(0):
            return None
        return elapsed

    @classmethod
    def from_payload(cls, payload: object) -> Job:
        """Decode a task object, raising ``DecodeError`` on shape mismatch."""

        body = _require_mapping(payload, what="task")
        path = body.get("path")
        if not isinstance(path, str) or not path:
            raise DecodeError(message="Task response is missing a string 'path'.")
        raw_state = body.get("state", TaskState.UNSPECIFIED.value)
        if not isinstance(raw_state, str):
            raise DecodeError(message=f"Task state must be a string, got {raw_state!r}.")
        return cls(
            path=path,
            state=TaskState.from_wire(raw_state),
            raw_state=raw_state,
            created_at=_parse_optional_datetime(body.get("createTime")),
            updated_at=_parse_optional_datetime(body.get("updateTime")),
            error=_parse_job_error(body.get("error")),
            results=_parse_results(body.get("output")),
        )


@dataclass(frozen=True, slots=True)
class LogPage:
    """One page of task log messages."""

    messages: list[str]
    next_page_token: str = ""

    @property
    def is_last(self) -> bool:
        return not self.next_page_token

    @classmethod
    def from_payload(cls, payload: object) -> LogPage:
        body = _require_mapping(payload, what="logs")
        entries = body.get("luauExecutionSessionTaskLogs")
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise DecodeError(message="'luauExecutionSessionTaskLogs' must be a list.")
        messages: list[str] = []
        for entry in entries:
            entry_body = _require_mapping(entry, what="log entry")
            entry_messages = entry_body.get("messages")
            if entry_messages is None:
                entry_messages = []
            if not isinstance(entry_messages, list) or not all(
                isinstance(message, str) for message in entry_messages
            ):
                raise DecodeError(message="Log entry 'messages' must be a list of strings.")
            messages.extend(entry_messages)
        token = body.get("nextPageToken")
        if token is None:
            token = ""
        if not isinstance(token, str):
            raise DecodeError(message=f"'nextPageToken' must be a string, got {token!r}.")
        return cls(messages=messages, next_page_token=token)


def parse_version_number(payload: object) -> int:
    """Extract ``versionNumber`` from a publish response."""

    body = _require_mapping(payload, what="publish")
    version = body.get("versionNumber")
    if isinstance(version, bool) or not isinstance(version, int) or version <= 0:
        raise DecodeError(
            message=f"Publish response has no positive 'versionNumber': {version!r}",
        )
    return version


def _require_mapping(payload: object, *, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise DecodeError(message=f"Expected a JSON object for {what} response.")
    return payload


def _parse_job_error(value: object) -> JobError | None:
    if value is None:
        return None
    body = _require_mapping(value, what="task error")
    code = body.get("code", "")
    message = body.get("message", "")
    if not isinstance(code, str) or not isinstance(message, str):
        raise DecodeError(message="Task error 'code' and 'message' must be strings.")
    return JobError(code=code, message=message)


def _parse_results(value: object) -> list[Any] | None:
    if value is None:
        return None
    body = _require_mapping(value, what="task output")
    results = body.get("results", [])
    if not isinstance(results, list):
        raise DecodeError(message="Task output 'results' must be a list.")
    return results


def _parse_optional_datetime(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    # Open Cloud may send nanoseconds; datetime keeps microseconds.
    text = _FRACTION_RE.sub(lambda match: match.group(1)[:7], text)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    # Offset-less values cannot be compared with the zoned ones the API sends.
    if parsed.tzinfo is None:
        return None
    return parsed
