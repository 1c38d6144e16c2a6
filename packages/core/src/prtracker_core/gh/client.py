from __future__ import annotations

import logging

from github import Auth, Github

from prtracker_core.context import ClientContext

logger = logging.getLogger(__name__)


def get_client(token: str, ctx: ClientContext) -> Github:
    """Build an authenticated client and log the run parameters once."""
    logger.info("Organization: %s", ctx.organization)
    logger.info("Release Branch Name: %s", ctx.release_branch)
    if ctx.repo_names:
        logger.info("Specific Repos: %s", ", ".join(ctx.repo_names))
    if ctx.cutoff is not None:
        logger.info("PRs After Date: %s", ctx.cutoff.isoformat())
    # No retries: a failed call is reported and the batch moves on.
    return Github(auth=Auth.Token(token), retry=None)
