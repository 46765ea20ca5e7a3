"""On-disk storage for the Open Cloud API key and target experience."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from run_in_cloud.errors import ConfigurationError, CredentialsNotFoundError, CredentialsWriteError

CREDENTIALS_FILE_NAME = "key.txt"
logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Credentials:
    """API key plus the universe and place every run targets."""

    api_key: str
    universe_id: int
    place_id: int

    def __repr__(self) -> str:
        return (
            f"Credentials(api_key='***', universe_id={self.universe_id}, "
            f"place_id={self.place_id})"
        )


class CredentialStore:
    """Reads and writes credentials as JSON in the application data directory."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir

    @property
    def path(self) -> Path:
        return self.data_dir / CREDENTIALS_FILE_NAME

    def load(self) -> Credentials:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as error:
            raise CredentialsNotFoundError(
                message=f"No credentials found at {self.path}. Run `run-in-cloud login` first.",
            ) from error
        except OSError as error:
            raise ConfigurationError(
                message=f"Failed reading credentials from {self.path}: {error}",
            ) from error

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as error:
            raise ConfigurationError(
                message=f"Credentials file {self.path} is not valid JSON.",
            ) from error
        return _credentials_from_payload(payload, path=self.path)

    def save(self, credentials: Credentials) -> None:
        payload = {
            "key": credentials.api_key,
            "universe_id": credentials.universe_id,
            "place_id": credentials.place_id,
        }
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as error:
            raise CredentialsWriteError(
                message=f"Failed writing credentials to {self.path}: {error}",
            ) from error
        logger.info("Credentials saved to %s", self.path)


def _credentials_from_payload(payload: object, *, path: Path) -> Credentials:
    if not isinstance(payload, dict):
        raise ConfigurationError(message=f"Credentials file {path} must hold a JSON object.")
    api_key = payload.get("key")
    universe_id = payload.get("universe_id")
    place_id = payload.get("place_id")
    if not isinstance(api_key, str) or not api_key:
        raise ConfigurationError(message=f"Credentials file {path} has no API key.")
    for name, value in (("universe_id", universe_id), ("place_id", place_id)):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigurationError(
                message=f"Credentials file {path} has invalid {name}: {value!r}",
            )
    return Credentials(api_key=api_key, universe_id=universe_id, place_id=place_id)
