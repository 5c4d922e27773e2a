"""API token management commands."""

import click

from jira_dash.cli.profile_helpers import resolve_profile
from jira_dash.core.context import DashContext
from jira_dash.gateway.secret_store.abc import SecretStoreError


@click.group("auth")
def auth_group() -> None:
    """Manage API tokens stored in the system keychain."""


@auth_group.command("set-token")
@click.argument("profile_name")
@click.option(
    "--token",
    prompt="API token",
    hide_input=True,
    help="Jira API token (prompted for when omitted).",
)
@click.pass_obj
def set_token(ctx: DashContext, profile_name: str, token: str) -> None:
    """Store the API token for PROFILE_NAME."""
    profile = resolve_profile(ctx, profile_name)
    token = token.strip()
    if not token:
        raise click.ClickException("API token must not be empty.")
    try:
        ctx.secret_store.store(profile.name, token)
    except SecretStoreError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Stored API token for profile '{profile.name}'.")


@auth_group.command("delete-token")
@click.argument("profile_name")
@click.pass_obj
def delete_token(ctx: DashContext, profile_name: str) -> None:
    """Remove the stored API token for PROFILE_NAME."""
    try:
        ctx.secret_store.delete(profile_name)
    except SecretStoreError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Deleted API token for profile '{profile_name}'.")


@auth_group.command("status")
@click.pass_obj
def status(ctx: DashContext) -> None:
    """Show which profiles have a stored API token."""
    if not ctx.config.profiles:
        click.echo("No profiles configured.")
        return
    for profile in ctx.config.profiles:
        stored = ctx.secret_store.exists(profile.name)
        state = click.style("stored", fg="green") if stored else click.style("missing", fg="red")
        click.echo(f"{profile.name}: {state}")
