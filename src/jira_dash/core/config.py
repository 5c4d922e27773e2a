"""Configuration file loading for jira-dash.

Example config.toml:
  [settings]
  default_profile = "work"
  page_size = 50
  refresh_interval_seconds = 0
  max_concurrency = 0

  [[profiles]]
  name = "work"
  url = "https://acme.atlassian.net"
  email = "me@acme.com"

API tokens never live in this file; they are kept in the secret store under
the profile name.
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

APP_NAME = "jira-dash"
CONFIG_ENV_VAR = "JIRA_DASH_CONFIG"
DEFAULT_JQL = "assignee = currentUser() ORDER BY updated DESC"


class ConfigError(Exception):
    """Raised when the configuration file is unreadable or invalid."""


@dataclass(frozen=True)
class Profile:
    """A named Jira site and account.

    Attributes:
        name: Profile name, also the secret store key
        url: Jira site base URL
        email: Account email
    """

    name: str
    url: str
    email: str


@dataclass(frozen=True)
class Settings:
    """Application-wide settings.

    Attributes:
        default_profile: Profile used when none is given on the command line
        default_jql: Query shown when the dashboard opens
        page_size: Issues fetched per search page
        refresh_interval_seconds: Background refresh period (0 disables)
        max_concurrency: Cap on in-flight background operations (0 = unbounded)
        tick_interval_seconds: How often the dashboard drains finished operations
    """

    default_profile: str | None
    default_jql: str
    page_size: int
    refresh_interval_seconds: float
    max_concurrency: int
    tick_interval_seconds: float

    @staticmethod
    def default() -> "Settings":
        return Settings(
            default_profile=None,
            default_jql=DEFAULT_JQL,
            page_size=50,
            refresh_interval_seconds=0.0,
            max_concurrency=0,
            tick_interval_seconds=0.05,
        )


@dataclass(frozen=True)
class DashConfig:
    """In-memory representation of config.toml."""

    settings: Settings
    profiles: tuple[Profile, ...]

    def get_profile(self, name: str | None) -> Profile | None:
        """Resolve a profile by name, falling back to the default profile.

        With no name and no default_profile, the first profile wins.

        Args:
            name: Requested profile name, or None

        Returns:
            The matching Profile, or None if there are no profiles

        Raises:
            ConfigError: If a name was requested (or set as default) but is unknown
        """
        wanted = name if name is not None else self.settings.default_profile
        if wanted is None:
            return self.profiles[0] if self.profiles else None
        for profile in self.profiles:
            if profile.name == wanted:
                return profile
        raise ConfigError(f"Profile '{wanted}' not found.")


def default_config_path() -> Path:
    """Location of config.toml, honoring the JIRA_DASH_CONFIG override."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(click.get_app_dir(APP_NAME)) / "config.toml"


def load_config(path: Path) -> DashConfig:
    """Load config.toml if present; otherwise return defaults.

    Args:
        path: Path to config.toml

    Returns:
        DashConfig with parsed values

    Raises:
        ConfigError: If the file cannot be parsed or a value is invalid
    """
    if not path.exists():
        return DashConfig(settings=Settings.default(), profiles=())

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Could not read {path}: {e}") from e

    settings = _parse_settings(data.get("settings", {}))
    profiles = tuple(_parse_profile(i, raw) for i, raw in enumerate(data.get("profiles", [])))

    names = [p.name for p in profiles]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate profile names: {', '.join(duplicates)}")

    return DashConfig(settings=settings, profiles=profiles)


def _parse_settings(raw: Any) -> Settings:
    if not isinstance(raw, dict):
        raise ConfigError("[settings] must be a table")
    defaults = Settings.default()

    default_profile = raw.get("default_profile", defaults.default_profile)
    if default_profile is not None and not isinstance(default_profile, str):
        raise ConfigError("settings.default_profile must be a string")

    default_jql = raw.get("default_jql", defaults.default_jql)
    if not isinstance(default_jql, str) or not default_jql.strip():
        raise ConfigError("settings.default_jql must be a non-empty string")

    page_size = raw.get("page_size", defaults.page_size)
    if not isinstance(page_size, int) or not 1 <= page_size <= 100:
        raise ConfigError("settings.page_size must be an integer between 1 and 100")

    max_concurrency = raw.get("max_concurrency", defaults.max_concurrency)
    if not isinstance(max_concurrency, int) or max_concurrency < 0:
        raise ConfigError("settings.max_concurrency must be a non-negative integer")

    return Settings(
        default_profile=default_profile,
        default_jql=default_jql,
        page_size=page_size,
        refresh_interval_seconds=_non_negative_float(
            raw, "refresh_interval_seconds", defaults.refresh_interval_seconds
        ),
        max_concurrency=max_concurrency,
        tick_interval_seconds=_non_negative_float(
            raw, "tick_interval_seconds", defaults.tick_interval_seconds
        ),
    )


def _non_negative_float(raw: dict[str, Any], key: str, default: float) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ConfigError(f"settings.{key} must be a non-negative number")
    return float(value)


def _parse_profile(index: int, raw: Any) -> Profile:
    if not isinstance(raw, dict):
        raise ConfigError(f"profiles[{index}] must be a table")
    values: dict[str, str] = {}
    for key in ("name", "url", "email"):
        value = raw.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"profiles[{index}].{key} must be a non-empty string")
        values[key] = value.strip()
    return Profile(name=values["name"], url=values["url"], email=values["email"])
