"""Bulk branch protection for release branches."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from github import GithubException
from github.GithubObject import NotSet

from prtracker_core.context import ClientContext
from prtracker_core.errors import FetchError
from prtracker_core.gh.branches import check_for_release_branch
from prtracker_core.gh.repos import gather_named_repositories, list_org_repositories
from prtracker_core.outcome import Outcome

if TYPE_CHECKING:
    from github import Github
    from github.Branch import Branch
    from github.Repository import Repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProtectionRule:
    """Protection settings applied to a release branch that has none yet."""

    required_approving_review_count: int = 1
    require_code_owner_reviews: bool = True
    required_checks: tuple[str, ...] = ("build-and-test / build-and-test",)
    required_conversation_resolution: bool = True

    @classmethod
    def from_config(cls, config: dict) -> ProtectionRule:
        protection = config.get("protection") or {}
        return cls(
            required_approving_review_count=int(protection.get("required_approving_review_count", 1)),
            require_code_owner_reviews=bool(protection.get("require_code_owner_reviews", True)),
            required_checks=tuple(protection.get("required_checks") or ()),
            required_conversation_resolution=bool(protection.get("required_conversation_resolution", True)),
        )


def add_branch_protections(gh: Github, ctx: ClientContext, rule: ProtectionRule) -> Outcome[list[Repository]]:
    """Protect the release branch on every repository that has it unprotected.

    Archived and private repositories are skipped; branch protection on
    private repositories needs a paid plan. Returns the repositories that
    received a rule.
    """
    candidates, failures = _gather_candidates(gh, ctx)
    added: list[Repository] = []

    for repo in candidates:
        key = ctx.repo_key(repo.name)
        try:
            branch = repo.get_branch(ctx.release_branch)
            if _is_protected(branch):
                logger.debug("found valid rule for repo %s, skipping", key)
                continue
            logger.debug("adding rule to repo %s", key)
            branch.edit_protection(
                required_approving_review_count=rule.required_approving_review_count,
                require_code_owner_reviews=rule.require_code_owner_reviews,
                checks=list(rule.required_checks) or NotSet,
                required_conversation_resolution=rule.required_conversation_resolution,
            )
        except GithubException as e:
            logger.error("failed to add %s branch protection for repo %s: %s", ctx.release_branch, key, e)
            failures.append(f"{key}: {e}")
            continue
        added.append(repo)

    summary = "some repos could not have branch protection added, see logs above" if failures else ""
    return Outcome(added, failures, summary)


def _is_protected(branch: Branch) -> bool:
    try:
        branch.get_protection()
    except GithubException as e:
        if e.status == 404:
            return False
        raise
    return True


def _gather_candidates(gh: Github, ctx: ClientContext) -> tuple[list[Repository], list[str]]:
    candidates: list[Repository] = []
    failures: list[str] = []

    if ctx.repo_names:
        named = gather_named_repositories(gh, ctx)
        failures.extend(named.failures)
        repos = named.value
    else:
        try:
            repos = list(list_org_repositories(gh, ctx))
        except GithubException as e:
            logger.error("failed to fetch some repositories: %s", e)
            raise FetchError(f"failed to list repositories for organization {ctx.organization}: {e}") from e

    for repo in repos:
        if repo.archived or repo.private:
            continue
        key = ctx.repo_key(repo.name)
        try:
            has_branch = check_for_release_branch(ctx, repo)
        except GithubException as e:
            logger.error("error looking for release branch on repo %s: %s", key, e)
            failures.append(f"{key}: {e}")
            continue
        if has_branch:
            logger.debug("found repo %s", key)
            candidates.append(repo)

    return candidates, failures
