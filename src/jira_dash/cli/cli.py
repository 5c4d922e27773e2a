"""Top-level click group for jira-dash."""

from pathlib import Path

import click

from jira_dash.cli.commands.auth import auth_group
from jira_dash.cli.commands.check import check
from jira_dash.cli.commands.dash import dash
from jira_dash.cli.commands.profiles import profiles
from jira_dash.core.config import APP_NAME, ConfigError, default_config_path, load_config
from jira_dash.core.context import DashContext
from jira_dash.core.logging_setup import configure_logging

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="jira-dash")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to config.toml (overrides JIRA_DASH_CONFIG).",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, config_path: Path | None) -> None:
    """Browse and edit Jira issues from the terminal."""
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is not None:
        return

    configure_logging(debug=debug, log_dir=Path(click.get_app_dir(APP_NAME)))
    try:
        config = load_config(config_path or default_config_path())
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    ctx.obj = DashContext.for_production(config)


cli.add_command(auth_group)
cli.add_command(check)
cli.add_command(dash)
cli.add_command(profiles)
