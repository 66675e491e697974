"""
Configuration management for Repo Health Guard.

Loads settings from:
1. .repo-health-guard.toml (local config)
2. pyproject.toml (project-level config)

Both use the ``[tool.repo-health-guard]`` table. Environment variables
override file values.
"""

import os
import tomllib
from pathlib import Path
from typing import NamedTuple

LOCAL_CONFIG_NAME = ".repo-health-guard.toml"
TOOL_TABLE = "repo-health-guard"

DEFAULT_PLATFORM = "github"
DEFAULT_WINDOW_DAYS = 30
DEFAULT_STAGNATION_DAYS = 30
DEFAULT_MAX_FILES = 50
DEFAULT_MAX_PAGES = 10


class Settings(NamedTuple):
    """Resolved, immutable configuration."""

    platform: str = DEFAULT_PLATFORM
    base_url: str | None = None
    window_days: int = DEFAULT_WINDOW_DAYS
    stagnation_days: int = DEFAULT_STAGNATION_DAYS
    max_files: int = DEFAULT_MAX_FILES
    max_pages: int = DEFAULT_MAX_PAGES
    verify_ssl: bool = True


def load_config_file(config_path: Path) -> dict:
    """Load a TOML configuration file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e


def load_tool_config(root: Path | None = None) -> dict:
    """
    Return the ``[tool.repo-health-guard]`` table.

    Priority:
    1. .repo-health-guard.toml (local config, highest priority)
    2. pyproject.toml (project-level config, fallback)
    """
    root = root or Path.cwd()

    local_config_path = root / LOCAL_CONFIG_NAME
    if local_config_path.exists():
        config = load_config_file(local_config_path)
        return config.get("tool", {}).get(TOOL_TABLE, {})

    pyproject_path = root / "pyproject.toml"
    if pyproject_path.exists():
        config = load_config_file(pyproject_path)
        return config.get("tool", {}).get(TOOL_TABLE, {})

    return {}


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _bool_option(tool_config: dict, key: str, default: bool) -> bool:
    value = tool_config.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(
            f"Config option {key} must be true or false, got {value!r}"
        )
    return value


def get_settings(root: Path | None = None) -> Settings:
    """
    Resolve settings from config files and environment variables.

    Priority (highest first):
    1. REPO_HEALTH_GUARD_PLATFORM / _BASE_URL / _WINDOW_DAYS environment variables
    2. .repo-health-guard.toml
    3. pyproject.toml
    4. Defaults
    """
    tool_config = load_tool_config(root)

    platform = os.getenv("REPO_HEALTH_GUARD_PLATFORM") or tool_config.get(
        "platform", DEFAULT_PLATFORM
    )
    base_url = os.getenv("REPO_HEALTH_GUARD_BASE_URL") or tool_config.get("base_url")
    window_days = _env_int("REPO_HEALTH_GUARD_WINDOW_DAYS")
    if window_days is None:
        window_days = int(tool_config.get("window_days", DEFAULT_WINDOW_DAYS))

    return Settings(
        platform=str(platform).lower(),
        base_url=base_url,
        window_days=window_days,
        stagnation_days=int(
            tool_config.get("stagnation_days", DEFAULT_STAGNATION_DAYS)
        ),
        max_files=int(tool_config.get("max_files", DEFAULT_MAX_FILES)),
        max_pages=int(tool_config.get("max_pages", DEFAULT_MAX_PAGES)),
        verify_ssl=_bool_option(tool_config, "verify_ssl", True),
    )
