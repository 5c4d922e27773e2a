"""Status bar widget for the dashboard."""

from rich.text import Text
from textual.widgets import Static


class StatusBar(Static):
    """Bottom bar: connection, issue counts, activity and the last message.

    Renders e.g.: work | 25 of 130 issues | 2 running | Loaded PROJ-12
    """

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._profile: str | None = None
        self._loaded = 0
        self._total = 0
        self._in_flight = 0
        self._message: str | None = None

    def on_mount(self) -> None:
        self._update_display()

    def set_profile(self, profile: str | None) -> None:
        self._profile = profile
        self._update_display()

    def set_issue_counts(self, loaded: int, total: int) -> None:
        self._loaded = loaded
        self._total = total
        self._update_display()

    def set_in_flight(self, count: int) -> None:
        if count == self._in_flight:
            return
        self._in_flight = count
        self._update_display()

    def set_message(self, message: str) -> None:
        self._message = message
        self._update_display()

    def _update_display(self) -> None:
        text = Text()
        text.append(self._profile or "not connected", style="bold")
        noun = "issue" if self._total == 1 else "issues"
        text.append(f" | {self._loaded} of {self._total} {noun}")
        if self._in_flight:
            text.append(f" | {self._in_flight} running", style="yellow")
        if self._message:
            text.append(f" | {self._message}")
        self.update(text)
