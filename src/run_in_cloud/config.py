"""Runtime configuration for the Open Cloud client and the task lifecycle."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from run_in_cloud import __version__

DEFAULT_API_BASE_URL = "https://apis.roblox.com"
DEFAULT_USER_AGENT = f"run-in-cloud/{__version__}"
MAX_LOG_PAGE_SIZE = 10_000


@dataclass(slots=True)
class ApiSettings:
    """Open Cloud endpoint and transport settings."""

    base_url: str = DEFAULT_API_BASE_URL
    request_timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(slots=True)
class PollingSettings:
    """Task polling and log pagination settings."""

    initial_delay_seconds: float = 3.0
    max_retries: int = 3
    log_page_size: int = MAX_LOG_PAGE_SIZE


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    data_dir: Path = field(default_factory=lambda: _default_data_dir())
    api: ApiSettings = field(default_factory=ApiSettings)
    polling: PollingSettings = field(default_factory=PollingSettings)

    @classmethod
    def from_env(cls, request_timeout_seconds: float | None = None) -> Settings:
        """Load settings from environment with defaults matching the Open Cloud service."""

        data_dir_raw = os.getenv("RUN_IN_CLOUD_DATA_DIR", "").strip()
        return cls(
            data_dir=Path(data_dir_raw) if data_dir_raw else _default_data_dir(),
            api=ApiSettings(
                base_url=os.getenv("RUN_IN_CLOUD_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
                request_timeout_seconds=(
                    request_timeout_seconds
                    if request_timeout_seconds is not None
                    else _env_float("RUN_IN_CLOUD_REQUEST_TIMEOUT_SECONDS", 30.0)
                ),
            ),
            polling=PollingSettings(
                initial_delay_seconds=_env_float("RUN_IN_CLOUD_POLL_INITIAL_DELAY_SECONDS", 3.0),
                max_retries=_env_int("RUN_IN_CLOUD_POLL_MAX_RETRIES", 3),
                log_page_size=_env_int("RUN_IN_CLOUD_LOG_PAGE_SIZE", MAX_LOG_PAGE_SIZE),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error if any value cannot drive a run."""

        parsed = urlparse(self.api.base_url)
        if parsed.scheme != "https" or not parsed.netloc:
            raise ValueError(
                "Invalid RUN_IN_CLOUD_API_BASE_URL: "
                f"{self.api.base_url!r}. Expected an absolute https:// URL.",
            )
        if self.api.request_timeout_seconds <= 0:
            raise ValueError("RUN_IN_CLOUD_REQUEST_TIMEOUT_SECONDS must be > 0.")
        if self.polling.initial_delay_seconds < 0:
            raise ValueError("RUN_IN_CLOUD_POLL_INITIAL_DELAY_SECONDS must be >= 0.")
        if self.polling.max_retries < 1:
            raise ValueError("RUN_IN_CLOUD_POLL_MAX_RETRIES must be >= 1.")
        if not 1 <= self.polling.log_page_size <= MAX_LOG_PAGE_SIZE:
            raise ValueError(
                f"RUN_IN_CLOUD_LOG_PAGE_SIZE must be between 1 and {MAX_LOG_PAGE_SIZE}.",
            )


def _default_data_dir() -> Path:
    xdg_data_home = os.getenv("XDG_DATA_HOME", "").strip()
    base = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
    return base / "run-in-cloud"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as error:
        raise ValueError(f"Invalid number value for {name}: {value!r}") from error
