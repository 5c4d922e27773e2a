"""In-memory Browser that records pages instead of opening them."""

from jira_dash.gateway.browser.abc import Browser


class FakeBrowser(Browser):
    """Records every URL handed to launch().

    This class has NO public setup methods. All state is provided via
    constructor.
    """

    def __init__(self, *, available: bool = True) -> None:
        """Create FakeBrowser.

        Args:
            available: Whether launches succeed; False simulates a headless host
        """
        self._available = available
        self._opened_urls: list[str] = []

    def launch(self, url: str) -> bool:
        if not self._available:
            return False
        self._opened_urls.append(url)
        return True

    @property
    def opened_urls(self) -> list[str]:
        """URLs successfully launched, in order.

        This property is for test assertions only.
        """
        return self._opened_urls
