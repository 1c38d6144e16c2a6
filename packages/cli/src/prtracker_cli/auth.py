"""GitHub token resolution.

Resolution order (stops at first success):
  1. --token flag
  2. GITHUB_TOKEN environment variable
  3. A token file: ~/.github_personal_token on macOS and Windows,
     /.github_personal_token on Linux
  4. `gh auth token` (GitHub CLI session)
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
import sys
from pathlib import Path

from prtracker_core.errors import ConfigError

logger = logging.getLogger(__name__)

TOKEN_FILENAME = ".github_personal_token"

# Classic, OAuth, user-to-server, server-to-server, refresh and fine-grained tokens.
_TOKEN_PREFIX_RE = re.compile(r"^(ghp|gho|ghu|ghs|ghr)_\w+$|^github_pat_\w+$")


def resolve_github_token(explicit: str | None = None) -> str | None:
    """Return a GitHub token or None if no source yields one.

    Never raises. Callers decide whether a missing token is fatal.
    """
    if explicit:
        return explicit.strip()

    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token.strip()

    token_file = token_file_path()
    if token_file is not None:
        try:
            token = token_file.read_text(encoding="utf-8").strip()
        except OSError:
            token = ""
        if token:
            logger.debug("Resolved GitHub token from %s.", token_file)
            return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            gh_token = result.stdout.strip()
            if gh_token:
                logger.debug("Resolved GitHub token via gh CLI session.")
                return gh_token
    except (FileNotFoundError, subprocess.TimeoutExpired):
        # gh is not installed or timed out, fall through.
        pass

    return None


def token_file_path() -> Path | None:
    """Platform-specific location of the fallback token file, if any."""
    if sys.platform == "darwin" or sys.platform.startswith("win"):
        return Path.home() / TOKEN_FILENAME
    if sys.platform.startswith("linux"):
        return Path("/") / TOKEN_FILENAME
    return None


def validate_token(token: str | None) -> str:
    """Return ``token`` unchanged or raise ConfigError if it is missing or malformed."""
    if not token:
        raise ConfigError(
            "No GitHub token found. Pass --token, set GITHUB_TOKEN, or run `gh auth login` first."
        )
    if not _TOKEN_PREFIX_RE.match(token):
        raise ConfigError("provided token malformed, must use a valid GitHub token")
    return token
