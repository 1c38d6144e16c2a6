"""Helpers shared by every subcommand: client construction and error settling."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, TypeVar

import click
from github import GithubException

from prtracker_cli.auth import resolve_github_token, validate_token
from prtracker_core.config import parse_start_date
from prtracker_core.context import ClientContext, build_context
from prtracker_core.errors import PRTrackerError
from prtracker_core.gh.client import get_client
from prtracker_core.outcome import Outcome

if TYPE_CHECKING:
    from github import Github

logger = logging.getLogger(__name__)

T = TypeVar("T")


def open_session(ctx: click.Context, *, dated: bool = True) -> tuple[Github, ClientContext]:
    """Validate configuration and credentials, then build the client.

    Everything that can be wrong with the invocation is caught here, before
    any request goes out. ``dated=False`` drops the cutoff entirely.
    """
    obj = ctx.obj or {}
    config = obj["config"]
    cutoff = parse_start_date(config["start_date"]) if dated else None
    run_ctx = build_context(config, cutoff)
    token = validate_token(resolve_github_token(obj.get("token")))
    return get_client(token, run_ctx), run_ctx


def settle(outcome: Outcome[T]) -> T:
    """Return the outcome's value, or abort if a failure left nothing to work with."""
    if outcome.ok:
        return outcome.value
    if outcome.partial:
        logger.error(outcome.error_message())
        return outcome.value
    raise click.ClickException(outcome.error_message())


@contextmanager
def fatal_errors():
    """Turn expected failures into a one-line error and exit status 1."""
    try:
        yield
    except (PRTrackerError, GithubException) as e:
        raise click.ClickException(str(e)) from e
