"""Opening issue pages in the user's web browser."""

from abc import ABC, abstractmethod


def issue_url(base_url: str, issue_key: str) -> str:
    """Web page of an issue, e.g. https://acme.atlassian.net/browse/PROJ-1."""
    return f"{base_url.rstrip('/')}/browse/{issue_key}"


class Browser(ABC):
    """Abstract interface for showing Jira pages in the system browser."""

    def open_issue(self, base_url: str, issue_key: str) -> bool:
        """Open an issue's page on its site.

        Args:
            base_url: Site the issue lives on
            issue_key: Issue key, e.g. "PROJ-1"

        Returns:
            True if a browser accepted the page
        """
        return self.launch(issue_url(base_url, issue_key))

    @abstractmethod
    def launch(self, url: str) -> bool:
        """Hand a URL to the system opener; False if none could be started."""
        ...
