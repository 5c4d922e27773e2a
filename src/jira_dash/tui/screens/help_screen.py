"""Modal screen listing keyboard shortcuts."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label

SECTIONS = (
    (
        "Navigation",
        (
            ("↑/k", "Move cursor up"),
            ("↓/j", "Move cursor down"),
            ("Enter", "Open issue detail"),
            ("m", "Load more issues"),
        ),
    ),
    (
        "Actions",
        (
            ("t", "Transition selected issue"),
            ("a", "Change assignee"),
            ("p", "Change priority"),
            ("o", "Open issue in browser"),
            ("n", "Create an issue"),
            ("/", "Edit JQL query"),
            ("f", "Quick filter"),
        ),
    ),
    (
        "Issue detail",
        (
            ("c", "Add a comment"),
            ("h", "Load older history"),
            ("l", "Follow first linked issue"),
            ("e", "Add or remove labels"),
            ("x", "Add or remove components"),
            ("i", "Link to another issue"),
            ("d", "Remove a link"),
            ("s", "Edit the summary"),
            ("Esc", "Back to the list"),
        ),
    ),
    (
        "General",
        (
            ("r", "Refresh issues"),
            ("?", "Show this help"),
            ("q", "Quit"),
        ),
    ),
)


class HelpScreen(ModalScreen):
    """Modal screen showing keyboard shortcuts."""

    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("q", "dismiss", "Close"),
        Binding("?", "dismiss", "Close"),
    ]

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-dialog {
        width: 60;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: solid $primary;
        padding: 1 2;
    }

    #help-title {
        text-style: bold;
        text-align: center;
        margin-bottom: 1;
        width: 100%;
    }

    .help-section {
        margin-top: 1;
        height: auto;
    }

    .help-section-title {
        text-style: bold;
        color: $primary;
    }

    .help-binding {
        margin-left: 2;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical(id="help-dialog"):
            yield Label("jira-dash - Keyboard Shortcuts", id="help-title")
            for title, bindings in SECTIONS:
                with Vertical(classes="help-section"):
                    yield Label(title, classes="help-section-title")
                    for key, description in bindings:
                        yield Label(f"{key:<8}{description}", classes="help-binding")
            yield Label("")
            yield Label("Press Esc to close", id="help-footer")
