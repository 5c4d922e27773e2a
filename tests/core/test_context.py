"""Tests for DashContext factories."""

from jira_dash.core.config import DashConfig, Profile, Settings
from jira_dash.core.context import DashContext
from jira_dash.gateway.browser.fake import FakeBrowser
from jira_dash.gateway.browser.real import RealBrowser
from jira_dash.gateway.jira.fake import FakeJiraSessionFactory
from jira_dash.gateway.jira.real import RealJiraSessionFactory
from jira_dash.gateway.secret_store.fake import FakeSecretStore
from jira_dash.gateway.secret_store.real import RealSecretStore
from jira_dash.gateway.time.fake import FakeTime
from jira_dash.gateway.time.real import RealTime
from jira_dash.tui.runner import FakeTuiRunner, RealTuiRunner


def test_for_test_defaults_to_fakes() -> None:
    ctx = DashContext.for_test()

    assert isinstance(ctx.secret_store, FakeSecretStore)
    assert isinstance(ctx.session_factory, FakeJiraSessionFactory)
    assert isinstance(ctx.time, FakeTime)
    assert isinstance(ctx.browser, FakeBrowser)
    assert isinstance(ctx.tui_runner, FakeTuiRunner)
    assert ctx.config.profiles == ()


def test_for_test_keeps_overrides() -> None:
    browser = FakeBrowser()
    config = DashConfig(
        settings=Settings.default(),
        profiles=(Profile(name="work", url="https://x.atlassian.net", email="a@b.c"),),
    )

    ctx = DashContext.for_test(config=config, browser=browser)

    assert ctx.browser is browser
    assert ctx.config is config


def test_for_production_wires_real_gateways() -> None:
    """Construction touches neither the keyring nor the network."""
    ctx = DashContext.for_production(DashConfig(settings=Settings.default(), profiles=()))

    assert isinstance(ctx.secret_store, RealSecretStore)
    assert isinstance(ctx.session_factory, RealJiraSessionFactory)
    assert isinstance(ctx.time, RealTime)
    assert isinstance(ctx.browser, RealBrowser)
    assert isinstance(ctx.tui_runner, RealTuiRunner)
