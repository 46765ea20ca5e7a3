"""Open Cloud gateway and payload models."""

from run_in_cloud.cloud.gateway import CloudGateway, OpenCloudGateway
from run_in_cloud.cloud.models import (
    ContentKind,
    Job,
    JobError,
    LogPage,
    TaskState,
    content_kind_for_path,
)

__all__ = [
    "CloudGateway",
    "ContentKind",
    "Job",
    "JobError",
    "LogPage",
    "OpenCloudGateway",
    "TaskState",
    "content_kind_for_path",
]
