"""jira-dash CLI entry point.

This package provides a Click-based CLI and a Textual dashboard for browsing
and editing Jira issues from the terminal. See `jira-dash --help` for details.
"""

from jira_dash.cli.cli import cli


def main() -> None:
    """CLI entry point used by the `jira-dash` console script."""
    cli()
