"""The interactive dashboard command."""

import click

from jira_dash.cli.profile_helpers import resolve_profile
from jira_dash.core.context import DashContext
from jira_dash.tui.app import JiraDashApp


@click.command("dash")
@click.option("--profile", "-p", "profile_name", help="Profile to connect with.")
@click.option("--jql", help="Initial JQL query (defaults to settings.default_jql).")
@click.pass_obj
def dash(ctx: DashContext, profile_name: str | None, jql: str | None) -> None:
    """Open the interactive issue dashboard.

    Exits with status 1 if the dashboard closes without ever connecting.

    Examples:
        jira-dash dash
        jira-dash dash -p work
        jira-dash dash --jql "project = PROJ AND status = 'In Progress'"
    """
    profile = resolve_profile(ctx, profile_name)
    query = jql.strip() if jql else ctx.config.settings.default_jql
    app = JiraDashApp(ctx, profile, query)
    exit_code = ctx.tui_runner.run(app)
    if exit_code != 0:
        raise SystemExit(exit_code)
