"""Profile listing command."""

import click

from jira_dash.core.context import DashContext


@click.command("profiles")
@click.pass_obj
def profiles(ctx: DashContext) -> None:
    """List configured profiles and whether each has a stored token."""
    config = ctx.config
    if not config.profiles:
        click.echo("No profiles configured.")
        return

    default = config.get_profile(None)
    for profile in config.profiles:
        marker = "*" if default is not None and profile.name == default.name else " "
        if ctx.secret_store.exists(profile.name):
            token = click.style("token stored", fg="green")
        else:
            token = click.style("no token", fg="yellow")
        click.echo(f"{marker} {click.style(profile.name, bold=True)}  {profile.url}  ({token})")
