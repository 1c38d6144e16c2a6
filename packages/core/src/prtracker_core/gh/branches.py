"""Release branch detection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from github import GithubException

from prtracker_core.context import ClientContext
from prtracker_core.outcome import Outcome

if TYPE_CHECKING:
    from github.Repository import Repository

logger = logging.getLogger(__name__)


def check_for_release_branch(ctx: ClientContext, repo: Repository) -> bool:
    """Return True as soon as a branch named exactly like the release branch turns up."""
    for branch in repo.get_branches():
        if branch.name == ctx.release_branch:
            logger.debug("found repo with branch %s: %s", ctx.release_branch, repo.name)
            return True
    return False


def gather_release_repositories(ctx: ClientContext, repos: list[Repository]) -> Outcome[dict[str, Repository]]:
    """Map ``org/name`` to each repository that has the release branch.

    Repositories without the branch are left out, not mapped to a false value.
    """
    release_repos: dict[str, Repository] = {}
    failures: list[str] = []

    for repo in repos:
        key = ctx.repo_key(repo.name)
        try:
            has_branch = check_for_release_branch(ctx, repo)
        except GithubException as e:
            logger.error("failed to list branches for repo %s: %s", key, e)
            failures.append(f"{key}: {e}")
            continue

        if has_branch:
            logger.debug("found release repo %s", repo.name)
            release_repos[key] = repo

    summary = "some repo branches could not be checked, see logs above" if failures else ""
    return Outcome(release_repos, failures, summary)
