"""Shared helpers for commands that act on a profile."""

import click

from jira_dash.core.config import ConfigError, Profile
from jira_dash.core.context import DashContext


def resolve_profile(ctx: DashContext, name: str | None) -> Profile:
    """Pick the profile a command should use.

    Args:
        ctx: Context holding the loaded configuration
        name: Profile requested with --profile, or None for the default

    Returns:
        The resolved Profile

    Raises:
        click.ClickException: If the profile is unknown or none are configured
    """
    try:
        profile = ctx.config.get_profile(name)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if profile is None:
        raise click.ClickException(
            "No profiles configured. Add a [[profiles]] entry to config.toml."
        )
    return profile
