"""Lifecycle progress events and their console rendering."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import click

CHECKMARK_SYMBOL = "✔"
CROSS_SYMBOL = "✘"


class ProgressStatus(str, Enum):
    STARTED = "started"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """One observable step of a run."""

    phase: str
    status: ProgressStatus
    detail: str | None = None


class ProgressReporter(Protocol):
    """Receives lifecycle events; must not influence the run."""

    def report(self, event: ProgressEvent) -> None:
        """Render or record one event."""


class NullProgressReporter:
    def report(self, event: ProgressEvent) -> None:
        return None


class ConsoleProgressReporter:
    """Colored one-line status messages on stderr, keeping stdout for task logs."""

    def report(self, event: ProgressEvent) -> None:
        text = event.detail or f"{event.phase} {event.status.value}"
        if event.status is ProgressStatus.STARTED:
            click.secho(text, fg="blue", err=True)
        elif event.status is ProgressStatus.DONE:
            click.secho(f"{CHECKMARK_SYMBOL} {text}", fg="green", err=True)
        else:
            click.secho(f"{CROSS_SYMBOL} {text}", fg="red", err=True)
