"""Typed Open Cloud client for publishing places and running Luau execution tasks."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from run_in_cloud.cloud.models import ContentKind, Job, LogPage, parse_version_number
from run_in_cloud.config import DEFAULT_API_BASE_URL, DEFAULT_USER_AGENT, MAX_LOG_PAGE_SIZE
from run_in_cloud.credentials import Credentials
from run_in_cloud.errors import DecodeError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
API_KEY_HEADER = "x-api-key"
_ERROR_PREVIEW_CHARS = 300


class CloudGateway(Protocol):
    """Remote operations the lifecycle controller depends on."""

    def publish_artifact(
        self,
        universe_id: int,
        place_id: int,
        artifact: bytes,
        content_kind: ContentKind | str,
    ) -> int: ...

    def create_execution_job(
        self,
        universe_id: int,
        place_id: int,
        version: int,
        script: str,
    ) -> Job: ...

    def get_job_status(self, job_path: str) -> Job: ...

    def get_log_page(
        self,
        job_path: str,
        page_token: str = "",
        max_page_size: int = MAX_LOG_PAGE_SIZE,
    ) -> LogPage: ...

    def close(self) -> None: ...

    def __enter__(self) -> CloudGateway: ...

    def __exit__(self, *_: object) -> None: ...


class OpenCloudGateway:
    """One request per call over a shared ``httpx.Client``; retries are the caller's concern."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds, connect=min(10.0, timeout_seconds)),
            headers={API_KEY_HEADER: api_key, "User-Agent": user_agent},
            transport=transport,
        )

    @classmethod
    def from_credentials(
        cls,
        credentials: Credentials,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ) -> OpenCloudGateway:
        return cls(
            api_key=credentials.api_key,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
            transport=transport,
        )

    def publish_artifact(
        self,
        universe_id: int,
        place_id: int,
        artifact: bytes,
        content_kind: ContentKind | str,
    ) -> int:
        """Publish place bytes and return the new version number."""

        kind = ContentKind.coerce(content_kind)
        payload = self._request_json(
            "POST",
            f"/universes/v1/{universe_id}/places/{place_id}/versions",
            params={"VersionType": "Published"},
            content=artifact,
            headers={"content-type": kind.content_type},
        )
        return parse_version_number(payload)

    def create_execution_job(
        self,
        universe_id: int,
        place_id: int,
        version: int,
        script: str,
    ) -> Job:
        """Create a Luau execution task pinned to ``version`` of the place."""

        payload = self._request_json(
            "POST",
            (
                f"/cloud/v2/universes/{universe_id}/places/{place_id}"
                f"/versions/{version}/luau-execution-session-tasks"
            ),
            json={"script": script},
        )
        return Job.from_payload(payload)

    def get_job_status(self, job_path: str) -> Job:
        return Job.from_payload(self._request_json("GET", f"/cloud/v2/{job_path}"))

    def get_log_page(
        self,
        job_path: str,
        page_token: str = "",
        max_page_size: int = MAX_LOG_PAGE_SIZE,
    ) -> LogPage:
        payload = self._request_json(
            "GET",
            f"/cloud/v2/{job_path}/logs",
            params={"maxPageSize": max_page_size, "pageToken": page_token},
        )
        return LogPage.from_payload(payload)

    def _request_json(self, method: str, url: str, **kwargs: Any) -> object:
        logger.debug("%s %s", method, url)
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(
                message=f"Timeout calling {method} {url}",
                code="timeout",
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(message=f"HTTP error calling {method} {url}: {exc}") from exc

        if not response.is_success:
            raise TransportError(
                message=(
                    f"HTTP {response.status_code} from {method} {url}: "
                    f"{response.text[:_ERROR_PREVIEW_CHARS]}"
                ),
                code="http_status",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(message=f"Response from {method} {url} is not valid JSON.") from exc

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> OpenCloudGateway:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
