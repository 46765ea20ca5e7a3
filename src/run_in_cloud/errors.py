"""Error taxonomy shared by the gateway, the lifecycle controller and the CLI."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RunInCloudError(Exception):
    """Base error for every fatal failure of a run."""

    message: str
    code: str = "run_in_cloud_error"

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class ConfigurationError(RunInCloudError):
    """Bad local input the user must fix before retrying."""

    code: str = "configuration_error"


@dataclass(slots=True)
class UnsupportedFormatError(ConfigurationError):
    """Artifact extension or content kind that cannot be published."""

    code: str = "unsupported_format"


@dataclass(slots=True)
class CredentialsNotFoundError(ConfigurationError):
    """No stored credentials; `login` has not been run yet."""

    code: str = "credentials_not_found"


@dataclass(slots=True)
class CredentialsWriteError(ConfigurationError):
    """Credentials could not be persisted."""

    code: str = "credentials_write_failed"


@dataclass(slots=True)
class InputReadError(ConfigurationError):
    """Artifact or script file could not be read."""

    code: str = "input_unreadable"


@dataclass(slots=True)
class GatewayError(RunInCloudError):
    """One remote request failed."""

    code: str = "gateway_error"


@dataclass(slots=True)
class TransportError(GatewayError):
    """Network, TLS, timeout or non-success HTTP status."""

    code: str = "transport_error"
    status_code: int | None = None


@dataclass(slots=True)
class DecodeError(GatewayError):
    """Response body is not JSON or lacks the expected shape."""

    code: str = "decode_error"


@dataclass(slots=True)
class RetriesExhaustedError(RunInCloudError):
    """Status polling failed more times than the poll policy allows."""

    code: str = "retries_exhausted"
    attempts: int = 0
