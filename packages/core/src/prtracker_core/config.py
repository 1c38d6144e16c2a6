from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml

from prtracker_core.errors import ConfigError

DEFAULT_CONFIG: dict = {
    "organization": "GTNewHorizons",
    "release_branch": "release/2.7.x",
    "start_date": "2024-12-08",
    "formatting": "terminal",
    "repos": [],
    # Repositories that are not versioned with the modpack.
    "excluded_repositories": [
        "DreamAssemblerXXL",
        "GT-New-Horizons-Modpack",
        "GTNH-Translations",
        "RetroFuturaGradle",
        "GTNHGradle",
        "Twist-Space-Technology-Mod",
        "GTNH-Web-Map",
        "CustomGTCapeHook-Cape-List",
        "JustEnoughCalculation",
        "GTNHIssueHelper",
        "StructureLib",
        "worldedit-gtnh",
    ],
    # Substrings of PR titles that never need reporting, e.g. automated formatting PRs.
    "excluded_pr_titles": [
        "Spotless apply for branch",
    ],
    "protection": {
        "required_approving_review_count": 1,
        "require_code_owner_reviews": True,
        "required_checks": ["build-and-test / build-and-test"],
        "required_conversation_resolution": True,
    },
}

DATE_FORMAT = "%Y-%m-%d"

LIST_KEYS = ("repos", "excluded_repositories", "excluded_pr_titles")


def load_config(config_path: str = ".prtracker.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prtracker.yml in the current directory
      3. CLI argument overrides
    """
    config = {
        **DEFAULT_CONFIG,
        "repos": list(DEFAULT_CONFIG["repos"]),
        "excluded_repositories": list(DEFAULT_CONFIG["excluded_repositories"]),
        "excluded_pr_titles": list(DEFAULT_CONFIG["excluded_pr_titles"]),
        "protection": dict(DEFAULT_CONFIG["protection"]),
    }

    path = Path(config_path)
    if path.exists():
        try:
            with open(path) as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse config file {config_path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping, got {type(file_config).__name__}")
        # Partial protection blocks only override the keys they name.
        protection = file_config.pop("protection", None) or {}
        config.update(file_config)
        config["protection"].update(protection)
        _check_list_keys(config, config_path)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    return config


def _check_list_keys(config: dict, config_path: str) -> None:
    # `repos: widgets` is a lone name, not a sequence of characters.
    for key in LIST_KEYS:
        value = config.get(key)
        if value is None:
            config[key] = []
        elif isinstance(value, str):
            config[key] = [value]
        elif not isinstance(value, list):
            raise ConfigError(f"'{key}' in {config_path} must be a list, got {type(value).__name__}")


def parse_start_date(date: str) -> datetime:
    """Convert a ``YYYY-MM-DD`` string to midnight UTC on that day."""
    try:
        parsed = datetime.strptime(str(date), DATE_FORMAT)
    except ValueError as e:
        raise ConfigError(f"'start-date' flag malformed, must be in YYYY-MM-DD format: {e}") from e
    return parsed.replace(tzinfo=timezone.utc)
