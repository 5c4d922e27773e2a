"""Running the dashboard app, swappable so CLI tests never start a terminal UI.

Running a Textual app takes over the terminal and starts an event loop. CLI
tests swap in FakeTuiRunner to check which app the command built and how its
exit status is reported, without starting it.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from jira_dash.tui.app import JiraDashApp

logger = logging.getLogger(__name__)


class TuiRunner(ABC):
    """Abstract interface for running the dashboard."""

    @abstractmethod
    def run(self, app: JiraDashApp) -> int:
        """Run the dashboard until the user quits.

        Returns:
            Process exit status; non-zero when the app ended without a session
        """
        ...


class RealTuiRunner(TuiRunner):
    def run(self, app: JiraDashApp) -> int:
        if not sys.stdout.isatty():
            raise click.ClickException("The dashboard needs an interactive terminal.")
        logger.info("Starting dashboard for profile %s", app.profile.name)
        app.run()
        exit_code = app.return_code or 0
        logger.info("Dashboard exited with status %d", exit_code)
        return exit_code


class FakeTuiRunner(TuiRunner):
    """Captures apps passed to run() without starting the event loop.

    This class has NO public setup methods. All state is provided via
    constructor.
    """

    def __init__(self, *, exit_code: int = 0) -> None:
        """Create FakeTuiRunner.

        Args:
            exit_code: Status every run() reports, as if the app had exited with it
        """
        self._exit_code = exit_code
        self._apps_run: list[JiraDashApp] = []

    def run(self, app: JiraDashApp) -> int:
        self._apps_run.append(app)
        return self._exit_code

    @property
    def apps_run(self) -> list[JiraDashApp]:
        """Apps that would have been run, in order.

        This property is for test assertions only.
        """
        return self._apps_run
