"""Immutable run configuration handed to every pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class ClientContext:
    """Everything a pipeline stage needs to know about the current run.

    ``cutoff`` is timezone-aware UTC. ``None`` disables every date filter,
    which the label command relies on to reach all active repositories.
    """

    organization: str
    release_branch: str
    repo_names: tuple[str, ...] = ()
    cutoff: datetime | None = None
    excluded_repositories: tuple[str, ...] = ()
    excluded_pr_titles: tuple[str, ...] = ()

    def repo_key(self, name: str) -> str:
        return f"{self.organization}/{name}"

    def is_before_cutoff(self, moment: datetime | None) -> bool:
        """True when ``moment`` falls strictly before the cutoff.

        A missing timestamp counts as before. Equal to the cutoff is not before.
        """
        if self.cutoff is None:
            return False
        if moment is None:
            return True
        return as_utc(moment) < self.cutoff


def as_utc(moment: datetime) -> datetime:
    # Older PyGithub releases hand back naive datetimes that are implicitly UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def build_context(config: dict, cutoff: datetime | None) -> ClientContext:
    """Freeze a loaded config dict into a ClientContext."""
    return ClientContext(
        organization=config["organization"],
        release_branch=config["release_branch"],
        repo_names=tuple(config.get("repos") or ()),
        cutoff=cutoff,
        excluded_repositories=tuple(config.get("excluded_repositories") or ()),
        excluded_pr_titles=tuple(config.get("excluded_pr_titles") or ()),
    )
