"""Repository discovery for an organization."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from github import GithubException

from prtracker_core.context import ClientContext
from prtracker_core.errors import FetchError
from prtracker_core.outcome import Outcome

if TYPE_CHECKING:
    from github import Github
    from github.Repository import Repository

logger = logging.getLogger(__name__)


def gather_repositories(gh: Github, ctx: ClientContext) -> Outcome[list[Repository]]:
    """Return the repositories a run should look at.

    Explicitly named repositories are fetched one by one and are not filtered.
    Otherwise every organization repository is listed and archived, excluded,
    and stale (not pushed since the cutoff) repositories are dropped.

    Raises FetchError if the organization listing itself fails.
    """
    if ctx.repo_names:
        return gather_named_repositories(gh, ctx)

    repos: list[Repository] = []
    try:
        for repo in list_org_repositories(gh, ctx):
            if repo.archived:
                continue
            name = repo.name
            if not name or name in ctx.excluded_repositories:
                continue
            if ctx.is_before_cutoff(repo.pushed_at):
                continue
            logger.debug("found repo %s", name)
            repos.append(repo)
    except GithubException as e:
        logger.error("failed to fetch some repositories: %s", e)
        raise FetchError(f"failed to list repositories for organization {ctx.organization}: {e}") from e
    return Outcome(repos)


def list_org_repositories(gh: Github, ctx: ClientContext):
    """Lazily page through every repository in the organization."""
    return gh.get_organization(ctx.organization).get_repos(type="all")


def gather_named_repositories(gh: Github, ctx: ClientContext) -> Outcome[list[Repository]]:
    repos: list[Repository] = []
    failures: list[str] = []

    for name in ctx.repo_names:
        full_name = ctx.repo_key(name)
        try:
            repo = gh.get_repo(full_name)
        except GithubException as e:
            logger.error("failed to get repo with name %s: %s", full_name, e)
            failures.append(f"{full_name}: {e}")
            continue
        logger.debug("found repo %s", repo.name)
        repos.append(repo)

    return Outcome(repos, failures, "some repos could not be found, see logs above" if failures else "")
