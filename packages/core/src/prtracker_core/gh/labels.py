"""Bulk label creation and renaming."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from github import GithubException
from github.GithubObject import NotSet

from prtracker_core.context import ClientContext
from prtracker_core.errors import ConfigError
from prtracker_core.outcome import Outcome

if TYPE_CHECKING:
    from github.Label import Label
    from github.Repository import Repository

logger = logging.getLogger(__name__)

# GitHub's own fallback color; the API needs one when creating a label.
DEFAULT_LABEL_COLOR = "ededed"


@dataclass(frozen=True)
class LabelData:
    name: str
    old_name: str = ""
    color: str = ""
    desc: str = ""
    update_only: bool = False

    def validate(self) -> LabelData:
        if self.update_only and not self.old_name:
            raise ConfigError("could not update labels as no old name was specified")
        return self


def create_label_on_repositories(ctx: ClientContext, repos: list[Repository], data: LabelData) -> Outcome[list[str]]:
    """Create or rename a label on every repository in ``repos``.

    With ``old_name`` set, an existing label of that name is renamed (and its
    color/description replaced when given). Repositories lacking it get a new
    label unless ``update_only`` is set. Returns the ``org/name`` keys changed.
    """
    data.validate()

    changed: list[str] = []
    failures: list[str] = []

    for repo in repos:
        key = ctx.repo_key(repo.name)
        try:
            if create_label_on_repository(ctx, repo, data):
                changed.append(key)
        except GithubException as e:
            logger.error("failed to add/update label %s for %s: %s", data.name, key, e)
            failures.append(f"{key}: {e}")

    summary = "some repos could not have the label added/updated, see logs above" if failures else ""
    return Outcome(changed, failures, summary)


def create_label_on_repository(ctx: ClientContext, repo: Repository, data: LabelData) -> bool:
    """Return True if the repository's labels were changed."""
    key = ctx.repo_key(repo.name)

    if data.old_name:
        label = _get_label(repo, data.old_name)
        if label is not None:
            label.edit(
                name=data.name,
                color=data.color or label.color,
                description=data.desc or label.description or NotSet,
            )
            logger.info("updated label with name %s to name %s on repo %s", data.old_name, data.name, key)
            return True
        logger.debug("no label named %s on repo %s", data.old_name, key)

    if data.update_only:
        return False

    repo.create_label(data.name, data.color or DEFAULT_LABEL_COLOR, description=data.desc or NotSet)
    logger.info("created label with name %s on repo %s", data.name, key)
    return True


def _get_label(repo: Repository, name: str) -> Label | None:
    try:
        return repo.get_label(name)
    except GithubException as e:
        if e.status == 404:
            return None
        raise
