"""Dependency bundle for jira-dash commands and the dashboard.

DashContext gathers every gateway behind one frozen object so that commands
and the Textual app receive their collaborators instead of constructing them.
Tests build it with for_test() and override only what they care about.
"""

from dataclasses import dataclass

from jira_dash.core.config import DashConfig, Settings
from jira_dash.gateway.browser.abc import Browser
from jira_dash.gateway.browser.fake import FakeBrowser
from jira_dash.gateway.browser.real import RealBrowser
from jira_dash.gateway.jira.abc import JiraSessionFactory
from jira_dash.gateway.jira.fake import FakeJiraSessionFactory
from jira_dash.gateway.jira.real import RealJiraSessionFactory
from jira_dash.gateway.secret_store.abc import SecretStore
from jira_dash.gateway.secret_store.fake import FakeSecretStore
from jira_dash.gateway.secret_store.real import RealSecretStore
from jira_dash.gateway.time.abc import Time
from jira_dash.gateway.time.fake import FakeTime
from jira_dash.gateway.time.real import RealTime
from jira_dash.tui.runner import FakeTuiRunner, RealTuiRunner, TuiRunner


@dataclass(frozen=True)
class DashContext:
    """Configuration plus every external dependency.

    Attributes:
        config: Parsed config.toml
        secret_store: Per-profile API token storage
        session_factory: Opens authenticated Jira sessions
        time: Clock and sleep, used for retry backoff
        browser: Opens issue pages
        tui_runner: Runs the Textual app (captured instead of run in tests)
    """

    config: DashConfig
    secret_store: SecretStore
    session_factory: JiraSessionFactory
    time: Time
    browser: Browser
    tui_runner: TuiRunner

    @classmethod
    def for_production(cls, config: DashConfig) -> "DashContext":
        """Create a context wired to the keyring, real HTTP and the terminal.

        Args:
            config: Parsed configuration

        Returns:
            DashContext configured for production use
        """
        secret_store = RealSecretStore()
        time = RealTime()
        return cls(
            config=config,
            secret_store=secret_store,
            session_factory=RealJiraSessionFactory(secret_store=secret_store, time=time),
            time=time,
            browser=RealBrowser(),
            tui_runner=RealTuiRunner(),
        )

    @classmethod
    def for_test(
        cls,
        *,
        config: DashConfig | None = None,
        secret_store: SecretStore | None = None,
        session_factory: JiraSessionFactory | None = None,
        time: Time | None = None,
        browser: Browser | None = None,
        tui_runner: TuiRunner | None = None,
    ) -> "DashContext":
        """Create a context from fakes, overriding any subset.

        Example:
            tui_runner = FakeTuiRunner()
            ctx = DashContext.for_test(config=config, tui_runner=tui_runner)
            result = CliRunner().invoke(cli, ["dash"], obj=ctx)
            assert len(tui_runner.apps_run) == 1
        """
        return cls(
            config=config or DashConfig(settings=Settings.default(), profiles=()),
            secret_store=secret_store or FakeSecretStore(),
            session_factory=session_factory or FakeJiraSessionFactory(),
            time=time or FakeTime(),
            browser=browser or FakeBrowser(),
            tui_runner=tui_runner or FakeTuiRunner(),
        )
