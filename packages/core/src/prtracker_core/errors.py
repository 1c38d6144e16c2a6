"""Exception types shared by the pipeline stages and the CLI."""

from __future__ import annotations


class PRTrackerError(Exception):
    """Base class for every error prtracker raises on purpose."""


class ConfigError(PRTrackerError):
    """Bad token, date, output format, or flag combination.

    Always raised before any request is sent to GitHub.
    """


class FetchError(PRTrackerError):
    """A listing that the whole operation depends on could not be fetched."""
