"""Rendering of the final PR listing.

``terminal`` goes through logging like every other status line; ``discord``
goes to standard output so it can be piped or copied into a chat message.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from rich.console import Console

from prtracker_core.errors import ConfigError

if TYPE_CHECKING:
    from github.PullRequest import PullRequest

console = Console()
logger = logging.getLogger(__name__)

FORMATS = ("terminal", "discord")


def validate_format(fmt: str) -> str:
    if fmt not in FORMATS:
        raise ConfigError(f"unsupported format option {fmt!r}, allowed: 'terminal', 'discord'")
    return fmt


def format_discord(pr_map: dict[str, list[PullRequest]]) -> list[str]:
    lines: list[str] = []
    for key in sorted(pr_map):
        lines.append(f"**{key}**:")
        for pr in pr_map[key]:
            # Angle brackets stop Discord from unfurling a preview per link.
            lines.append(f"- #{pr.number}: [{pr.title}](<{pr.html_url}>)")
        lines.append("")
    return lines


def format_terminal(pr_map: dict[str, list[PullRequest]]) -> list[str]:
    lines = ["Pull Requests:", ""]
    for key in sorted(pr_map):
        lines.append(f"{key}:")
        for pr in pr_map[key]:
            lines.append(f"#{pr.number}: {pr.title} ({pr.html_url})")
        lines.append("")
    return lines


def _echo(line: str) -> None:
    # out() skips markup, emoji and wrapping so the markdown survives intact.
    console.out(line, highlight=False)


def print_pr_list(
    pr_map: dict[str, list[PullRequest]],
    fmt: str,
    *,
    log: Optional[logging.Logger] = None,
    echo: Optional[Callable[[str], None]] = None,
) -> None:
    """Write ``pr_map`` in the requested format. Raises ConfigError for unknown formats."""
    validate_format(fmt)
    log = log or logger
    echo = echo or _echo

    if fmt == "discord":
        log.info("Copy paste the below into discord")
        echo("")
        for line in format_discord(pr_map):
            echo(line)
        return

    for line in format_terminal(pr_map):
        log.info(line)
