"""CLI entry point for prtracker.

Commands:
  all-prs          PRs merged into the default branch since the start date
  unmerged-prs     the same, minus PRs already on the release branch
  add-protections  protect the release branch across the organization
  add-label        create or rename a label across the organization
"""

from __future__ import annotations

import importlib.metadata
import logging
import platform

import click
from rich.console import Console
from rich.logging import RichHandler

from prtracker_cli.commands.admin import add_label_cmd, add_protections_cmd
from prtracker_cli.commands.prs import all_prs_cmd, unmerged_prs_cmd

logger = logging.getLogger(__name__)

_PACKAGE_LOGGERS = ("prtracker_core", "prtracker_cli")
_REPORT_LOGGER = "prtracker_core.report"


class LineHandler(logging.Handler):
    """Write each record as a single unwrapped line.

    RichHandler lays records out in a table sized to the terminal, which
    splits long PR lines and pads them with spaces when stderr is not a TTY.
    """

    def __init__(self, console: Console):
        super().__init__()
        self.console = console
        self.setFormatter(logging.Formatter("%(levelname)-8s %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.console.out(self.format(record), highlight=False)
        except Exception:
            self.handleError(record)


def _not_report(record: logging.LogRecord) -> bool:
    return record.name != _REPORT_LOGGER


def configure_logging(debug: bool) -> None:
    """Send prtracker's own loggers to stderr through rich, once per process.

    The PR listing gets a LineHandler instead so every PR stays on one line.
    """
    level = logging.DEBUG if debug else logging.INFO
    for name in _PACKAGE_LOGGERS:
        pkg_logger = logging.getLogger(name)
        pkg_logger.setLevel(level)
        if not any(isinstance(h, RichHandler) for h in pkg_logger.handlers):
            handler = RichHandler(
                console=Console(stderr=True),
                show_time=False,
                show_path=False,
                markup=False,
            )
            handler.addFilter(_not_report)
            pkg_logger.addHandler(handler)

    report_logger = logging.getLogger(_REPORT_LOGGER)
    if not any(isinstance(h, LineHandler) for h in report_logger.handlers):
        report_logger.addHandler(LineHandler(Console(stderr=True)))


def _app_version() -> str:
    return "prtracker version {} (python: {}) (os: {}/{})".format(
        importlib.metadata.version("prtracker"),
        platform.python_version(),
        platform.system().lower(),
        platform.machine(),
    )


def _split_repos(repos: tuple[str, ...]) -> list[str] | None:
    """Accept both `-r a -r b` and `-r a,b`."""
    names = [name.strip() for value in repos for name in value.split(",") if name.strip()]
    return names or None


@click.group()
@click.version_option(
    version=importlib.metadata.version("prtracker"),
    prog_name="prtracker",
)
@click.option(
    "--config",
    "config_path",
    default=".prtracker.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRTRACKER_CONFIG",
)
@click.option(
    "--token",
    "-t",
    default=None,
    help="GitHub token for the API. Defaults to the GITHUB_TOKEN environment variable.",
)
@click.option("--start-date", "-d", default=None, help="Start date to check for PRs and commits, format YYYY-MM-DD.")
@click.option(
    "--organization",
    "--org",
    "-o",
    "organization",
    default=None,
    help="Organization to check for PRs and commits.",
)
@click.option(
    "--release-branch",
    "--branch",
    "-b",
    "release_branch",
    default=None,
    help="Target branch to check against when scanning the default branch.",
)
@click.option("--repos", "-r", multiple=True, help="Specific repos to target. Repeatable or comma separated.")
@click.option(
    "--formatting",
    "-f",
    default=None,
    help="Output formatting: 'terminal' for the command line, or 'discord' for copy-pasting.",
)
@click.option("--debug", is_flag=True, hidden=True)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: str,
    token: str | None,
    start_date: str | None,
    organization: str | None,
    release_branch: str | None,
    repos: tuple[str, ...],
    formatting: str | None,
    debug: bool,
):
    """Track PRs merged to a main/master branch and not a release branch."""
    from prtracker_core.config import load_config
    from prtracker_core.errors import ConfigError

    configure_logging(debug)
    logger.debug(_app_version())

    ctx.ensure_object(dict)

    try:
        config = load_config(
            config_path,
            cli_overrides={
                "start_date": start_date,
                "organization": organization,
                "release_branch": release_branch,
                "repos": _split_repos(repos),
                "formatting": formatting,
            },
        )
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    # Token resolution may shell out to gh, so it waits until a command needs it.
    ctx.obj["token"] = token
    ctx.obj["config"] = config


main.add_command(all_prs_cmd)
main.add_command(unmerged_prs_cmd)
main.add_command(add_protections_cmd)
main.add_command(add_label_cmd)
