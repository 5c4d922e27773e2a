"""Tests for TuiRunner implementations."""

import io

import click
import pytest

from jira_dash.core.config import Profile
from jira_dash.core.context import DashContext
from jira_dash.tui.app import JiraDashApp
from jira_dash.tui.runner import FakeTuiRunner, RealTuiRunner

PROFILE = Profile(name="work", url="https://fake.atlassian.net", email="me@x.com")


def test_apps_run_starts_empty() -> None:
    """FakeTuiRunner starts with empty app list."""
    runner = FakeTuiRunner()
    assert runner.apps_run == []


def test_run_captures_apps_in_order() -> None:
    """run() captures apps without starting the event loop."""
    runner = FakeTuiRunner()
    ctx = DashContext.for_test(tui_runner=runner)
    app1 = JiraDashApp(ctx, PROFILE, "project = A")
    app2 = JiraDashApp(ctx, PROFILE, "project = B")

    # This should return immediately - if it hangs, the test fails
    assert runner.run(app1) == 0
    assert runner.run(app2) == 0

    assert runner.apps_run == [app1, app2]


def test_fake_reports_configured_exit_code() -> None:
    runner = FakeTuiRunner(exit_code=1)
    app = JiraDashApp(DashContext.for_test(tui_runner=runner), PROFILE, "project = A")

    assert runner.run(app) == 1


def test_real_runner_refuses_non_terminal_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdout", io.StringIO())
    app = JiraDashApp(DashContext.for_test(), PROFILE, "project = A")

    with pytest.raises(click.ClickException, match="interactive terminal"):
        RealTuiRunner().run(app)
