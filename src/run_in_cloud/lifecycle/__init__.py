"""Task lifecycle: publish a place, run a script on it, wait, and collect its logs."""

from run_in_cloud.lifecycle.backoff import BackoffState, PollPolicy
from run_in_cloud.lifecycle.controller import TaskLifecycleController, TaskOutcome
from run_in_cloud.lifecycle.progress import (
    ConsoleProgressReporter,
    NullProgressReporter,
    ProgressEvent,
    ProgressReporter,
    ProgressStatus,
)

__all__ = [
    "BackoffState",
    "ConsoleProgressReporter",
    "NullProgressReporter",
    "PollPolicy",
    "ProgressEvent",
    "ProgressReporter",
    "ProgressStatus",
    "TaskLifecycleController",
    "TaskOutcome",
]
