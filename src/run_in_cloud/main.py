"""CLI entrypoint for run-in-cloud."""

from pathlib import Path

import rich_click as click

from run_in_cloud import __version__
from run_in_cloud.controllers import LoginCommand, RunCommand, RunInCloudCliController
from run_in_cloud.errors import RunInCloudError

click.rich_click.USE_MARKDOWN = True
CONTROLLER = RunInCloudCliController()
JOB_FAILED_EXIT_CODE = 2


@click.group()
@click.version_option(version=__version__, prog_name="run-in-cloud")
def run_in_cloud() -> None:
    """Run Luau scripts against a published place with Roblox Open Cloud."""


@run_in_cloud.command("login")
@click.option("-k", "--key", "api_key", required=True, help="A key to be used in Open Cloud.")
@click.option(
    "-u",
    "--universe-id",
    type=click.IntRange(min=0),
    required=True,
    help="The target universe id to be used in Open Cloud.",
)
@click.option(
    "-p",
    "--place-id",
    type=click.IntRange(min=0),
    required=True,
    help="The target place id to be used in Open Cloud.",
)
def login(api_key: str, universe_id: int, place_id: int) -> None:
    """Login with an Open Cloud API key and a target experience."""

    try:
        lines = CONTROLLER.login(
            LoginCommand(api_key=api_key, universe_id=universe_id, place_id=place_id),
        )
    except (RunInCloudError, ValueError) as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@run_in_cloud.command("run")
@click.option(
    "--place",
    "place_path",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="A path to the place file (.rbxl or .rbxlx) to publish.",
)
@click.option(
    "--script",
    "script_path",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="A path to the Luau script file to run in Open Cloud.",
)
@click.option(
    "--request-timeout",
    "request_timeout_seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-request timeout in seconds. Defaults to RUN_IN_CLOUD_REQUEST_TIMEOUT_SECONDS.",
)
@click.option(
    "--fail-on-job-error/--no-fail-on-job-error",
    default=False,
    show_default=True,
    help=f"Exit with code {JOB_FAILED_EXIT_CODE} when the task itself reports an error.",
)
@click.option(
    "--print-results/--no-print-results",
    default=False,
    show_default=True,
    help="Print task return values as JSON lines after the logs.",
)
def run(
    place_path: Path,
    script_path: Path,
    request_timeout_seconds: float | None,
    fail_on_job_error: bool,
    print_results: bool,
) -> None:
    """Run a task, wait for it to finish, and print its execution logs."""

    try:
        report = CONTROLLER.run(
            RunCommand(
                place_path=place_path,
                script_path=script_path,
                request_timeout_seconds=request_timeout_seconds,
                print_results=print_results,
            ),
        )
    except (RunInCloudError, ValueError) as error:
        raise click.ClickException(str(error)) from error

    _emit_lines(report.log_lines)
    if report.error_line is not None:
        click.secho(report.error_line, fg="red", err=True)
        if fail_on_job_error:
            click.get_current_context().exit(JOB_FAILED_EXIT_CODE)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    run_in_cloud()
