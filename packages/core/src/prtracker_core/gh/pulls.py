"""Collection of pull requests merged since the cutoff."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from github import GithubException

from prtracker_core.context import ClientContext
from prtracker_core.outcome import Outcome

if TYPE_CHECKING:
    from github.PullRequest import PullRequest
    from github.Repository import Repository

logger = logging.getLogger(__name__)


def gather_merged_prs(ctx: ClientContext, repos: list[Repository]) -> Outcome[dict[str, list[PullRequest]]]:
    """Map ``org/name`` to the PRs merged into each repository since the cutoff.

    A repository that fails part-way through keeps the PRs collected before
    the failure. Repositories with nothing to report are left out.
    """
    pr_map: dict[str, list[PullRequest]] = {}
    failures: list[str] = []

    for repo in repos:
        key = ctx.repo_key(repo.name)
        collected: list[PullRequest] = []
        try:
            _collect_merged_prs(ctx, repo, collected)
        except GithubException as e:
            logger.error("failed to list pull requests for repo %s: %s", key, e)
            failures.append(f"{key}: {e}")

        if collected:
            logger.debug("found %d PRs for repo %s", len(collected), repo.name)
            pr_map[key] = collected

    summary = "some repo PR lists could not be checked, see logs above" if failures else ""
    return Outcome(pr_map, failures, summary)


def _collect_merged_prs(ctx: ClientContext, repo: Repository, collected: list[PullRequest]) -> None:
    """Append merged PRs to ``collected`` until one merged before the cutoff turns up.

    PRs come back most recently updated first. Update time is only a proxy for
    merge time, so a PR merged after the cutoff but last touched before a
    pre-cutoff merge is missed.
    """
    pulls = repo.get_pulls(state="closed", sort="updated", direction="desc")
    for pr in pulls:
        if pr.merged_at is None:
            continue

        if ctx.is_before_cutoff(pr.merged_at):
            return

        if not pr_title_check(ctx, pr.title):
            continue

        logger.debug("found pr #%d (%s) for repo %s", pr.number, pr.title, repo.name)
        collected.append(pr)


def pr_title_check(ctx: ClientContext, title: str | None) -> bool:
    """Return False if the title contains any excluded substring (case-sensitive)."""
    title = title or ""
    return not any(excluded in title for excluded in ctx.excluded_pr_titles)
