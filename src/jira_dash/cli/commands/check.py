"""Connection check command."""

import asyncio
import logging

import click

from jira_dash.api.errors import JiraApiError, is_critical, user_message
from jira_dash.api.types import CurrentUser
from jira_dash.cli.profile_helpers import resolve_profile
from jira_dash.core.config import Profile
from jira_dash.core.context import DashContext
from jira_dash.gateway.secret_store.abc import SecretStoreError

logger = logging.getLogger(__name__)


async def _whoami(ctx: DashContext, profile: Profile) -> tuple[str, CurrentUser]:
    api = await ctx.session_factory.open(profile)
    try:
        return api.base_url, await api.myself()
    finally:
        await api.aclose()


@click.command("check")
@click.option("--profile", "-p", "profile_name", help="Profile to check.")
@click.pass_obj
def check(ctx: DashContext, profile_name: str | None) -> None:
    """Verify that a profile's URL and API token work."""
    profile = resolve_profile(ctx, profile_name)
    try:
        base_url, user = asyncio.run(_whoami(ctx, profile))
    except SecretStoreError as e:
        raise click.ClickException(str(e)) from e
    except JiraApiError as e:
        logger.warning("Connection check failed for %s: %s", profile.name, e)
        message = user_message(e)
        if is_critical(e):
            message += f" Update it with 'jira-dash auth set-token {profile.name}'."
        raise click.ClickException(message) from e

    click.echo(
        f"{click.style('✓', fg='green')} Connected to {base_url} as "
        f"{click.style(user.display_name, bold=True)}"
    )
