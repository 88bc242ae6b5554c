"""CLI entrypoint for tf-external."""

import logging
from pathlib import Path

import rich_click as click

from tf_external import __version__
from tf_external.controllers import RESOURCE_OPERATIONS, ExternalCliController, OperationCommand

click.rich_click.USE_MARKDOWN = True
CONTROLLER = ExternalCliController()

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@click.group()
@click.version_option(version=__version__, prog_name="tf-external")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level. Defaults to TF_EXTERNAL_LOG_LEVEL or WARNING.",
)
def tf_external(log_level: str | None) -> None:
    """Run external programs as data sources and resources.

    The program receives the `query` as a JSON object on stdin and must print
    a JSON object of string values on stdout.
    """

    try:
        settings = CONTROLLER.reload_settings()
    except ValueError as error:
        raise click.ClickException(f"Invalid configuration: {error}") from error

    level = (log_level or settings.log_level).upper()
    logging.basicConfig(
        level=logging.getLevelName(level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@tf_external.group()
def data() -> None:
    """Data source commands."""


@data.command("read")
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--timeout",
    "timeout_seconds",
    type=click.FloatRange(min=0),
    default=None,
    help="Terminate the program after this many seconds (0 disables).",
)
def data_read(config_path: Path, timeout_seconds: float | None) -> None:
    """Run the program and print the published `result`."""

    _emit(
        OperationCommand(
            entity="data",
            operation="read",
            config_path=config_path,
            timeout_seconds=timeout_seconds,
        ),
    )


@tf_external.command("resource")
@click.argument("operation", type=click.Choice(RESOURCE_OPERATIONS))
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--state",
    "state_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Prior state JSON, used by `read`.",
)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=click.FloatRange(min=0),
    default=None,
    help="Terminate each program after this many seconds (0 disables).",
)
def resource(
    operation: str,
    config_path: Path,
    state_path: Path | None,
    timeout_seconds: float | None,
) -> None:
    """Run a resource lifecycle operation.

    `update` runs `program_destroy` (if set) and then `program`; `delete` runs
    only `program_destroy`.
    """

    _emit(
        OperationCommand(
            entity="resource",
            operation=operation,
            config_path=config_path,
            state_path=state_path,
            timeout_seconds=timeout_seconds,
        ),
    )


def _emit(command: OperationCommand) -> None:
    result = CONTROLLER.run(command)
    for line in result.lines:
        click.echo(line)
    if not result.success:
        raise click.ClickException("External program operation failed.")


if __name__ == "__main__":  # pragma: no cover
    tf_external()
