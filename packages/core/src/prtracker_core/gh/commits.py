"""Reconciliation of merged PRs against the release branch's commit log.

A squash-merged PR leaves a commit whose message ends in ``(#<number>)``.
When that reference shows up on the release branch the PR has already been
shipped and is dropped from the report.
"""

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


def filter_matching_commits_on_branch(
    ctx: ClientContext,
    pr_map: dict[str, list[PullRequest]],
    release_repos: dict[str, Repository],
) -> Outcome[dict[str, list[PullRequest]]]:
    """Drop every PR already referenced by a release branch commit.

    Repositories without a release branch pass through untouched. A repository
    whose commit log cannot be fetched is left out of the result.
    """
    filtered: dict[str, list[PullRequest]] = {}
    failures: list[str] = []

    for key, prs in pr_map.items():
        release_repo = release_repos.get(key)
        if release_repo is None:
            logger.debug("no release branch for repo %s, all PRs valid", key)
            filtered[key] = prs
            continue

        try:
            messages = gather_commit_messages(ctx, release_repo)
        except GithubException as e:
            logger.error("failed to filter PRs for repo %s: %s", key, e)
            failures.append(f"{key}: {e}")
            continue

        remaining = []
        for pr in prs:
            if is_on_branch(pr.number, messages):
                logger.debug("found matching release branch commit for PR #%d on repo %s", pr.number, key)
                continue
            remaining.append(pr)

        if remaining:
            logger.debug("found %d PRs on repo %s not included in release branch", len(remaining), key)
            filtered[key] = remaining
        else:
            logger.debug("all PRs on repo %s included in release branch, skipping", key)

    summary = "failed to filter PRs for some repos, see logs above" if failures else ""
    return Outcome(filtered, failures, summary)


def gather_commit_messages(ctx: ClientContext, repo: Repository) -> list[str]:
    """Return the message of every release branch commit since the cutoff."""
    kwargs = {"sha": ctx.release_branch}
    if ctx.cutoff is not None:
        kwargs["since"] = ctx.cutoff
    messages = [commit.commit.message or "" for commit in repo.get_commits(**kwargs)]
    logger.debug("found %d commits on branch %s for repo %s", len(messages), ctx.release_branch, repo.name)
    return messages


def is_on_branch(pr_number: int, messages: list[str]) -> bool:
    marker = f"(#{pr_number})"
    return any(marker in message for message in messages)
