"""Modal issue search used to pick the target of a new link."""

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Input, Label, OptionList
from textual.widgets.option_list import Option

from jira_dash.api.types import IssueSuggestion


class LinkSearchScreen(ModalScreen[str | None]):
    """Search-as-you-type issue picker; dismisses with the chosen key or None.

    The screen runs no searches itself. Every edit posts QueryChanged and the
    app feeds suggestions back through show_suggestions().
    """

    class QueryChanged(Message):
        def __init__(self, issue_key: str, query: str) -> None:
            super().__init__()
            self.issue_key = issue_key
            self.query = query

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    DEFAULT_CSS = """
    LinkSearchScreen {
        align: center middle;
    }

    #link-dialog {
        width: 90%;
        max-width: 120;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: solid $primary;
        padding: 1 2;
    }

    #link-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #link-suggestions {
        height: auto;
        max-height: 20;
    }
    """

    def __init__(self, issue_key: str, title: str) -> None:
        super().__init__()
        self._issue_key = issue_key
        self._title = title
        self._shown: tuple[IssueSuggestion, ...] = ()

    def compose(self) -> ComposeResult:
        with Vertical(id="link-dialog"):
            yield Label(self._title, id="link-title")
            yield Input(placeholder="Issue key or summary text", id="link-query")
            yield OptionList(id="link-suggestions")

    def on_mount(self) -> None:
        self.query_one("#link-query", Input).focus()

    def show_suggestions(self, suggestions: tuple[IssueSuggestion, ...]) -> None:
        if suggestions == self._shown:
            return
        self._shown = suggestions
        options = self.query_one("#link-suggestions", OptionList)
        options.clear_options()
        options.add_options(
            Option(f"{s.key}  {s.summary_text}".rstrip(), id=s.key) for s in suggestions
        )

    @on(Input.Changed, "#link-query")
    def on_query_changed(self, event: Input.Changed) -> None:
        query = event.value.strip()
        if query:
            self.post_message(self.QueryChanged(self._issue_key, query))

    @on(Input.Submitted, "#link-query")
    def on_query_submitted(self, event: Input.Submitted) -> None:
        if self._shown:
            self.query_one("#link-suggestions", OptionList).focus()

    @on(OptionList.OptionSelected, "#link-suggestions")
    def on_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id)

    def action_cancel(self) -> None:
        self.dismiss(None)
