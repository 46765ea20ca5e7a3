from __future__ import annotations

import allure
import pytest

from run_in_cloud.lifecycle.progress import (
    CHECKMARK_SYMBOL,
    ConsoleProgressReporter,
    ProgressEvent,
    ProgressStatus,
)

pytestmark = [
    allure.epic("Task Lifecycle"),
    allure.feature("Progress Reporting"),
]


def test_console_reporter_writes_events_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    reporter = ConsoleProgressReporter()

    reporter.report(ProgressEvent("publish", ProgressStatus.STARTED, "waiting..."))
    reporter.report(ProgressEvent("publish", ProgressStatus.DONE, "published!"))
    reporter.report(ProgressEvent("execute", ProgressStatus.FAILED, "failed, 2 left"))

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.splitlines() == [
        "waiting...",
        f"{CHECKMARK_SYMBOL} published!",
        "✘ failed, 2 left",
    ]


def test_console_reporter_falls_back_to_phase_and_status(
    capsys: pytest.CaptureFixture[str],
) -> None:
    ConsoleProgressReporter().report(ProgressEvent("logs", ProgressStatus.DONE))

    assert capsys.readouterr().err.strip() == f"{CHECKMARK_SYMBOL} logs done"
