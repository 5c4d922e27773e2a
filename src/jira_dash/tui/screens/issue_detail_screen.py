"""Modal screen showing one issue with its comments and history."""

from rich.text import Text
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.message import Message
from textual.screen import ModalScreen
from textual.widgets import Input, Label, Static

from jira_dash.api.types import ChangelogEntry, Comment, Issue
from jira_dash.tui.state import DashState


def format_fields(issue: Issue) -> Text:
    """Render the issue's headline fields as aligned "name: value" lines.

    Args:
        issue: Issue to describe

    Returns:
        Rich Text, never interpreted as markup
    """
    rows = [
        ("Type", issue.issue_type),
        ("Status", issue.status),
        ("Priority", issue.priority or "-"),
        ("Assignee", issue.assignee or "Unassigned"),
        ("Reporter", issue.reporter or "-"),
    ]
    if issue.fields.labels:
        rows.append(("Labels", ", ".join(issue.fields.labels)))
    if issue.fields.components:
        rows.append(("Components", ", ".join(c.name for c in issue.fields.components)))
    for link in issue.fields.issuelinks:
        linked = link.linked_issue
        if linked is not None:
            rows.append(("Link", f"{link.description} {linked.key} {linked.summary}".rstrip()))

    text = Text()
    for name, value in rows:
        text.append(f"{name:<12}", style="bold")
        text.append(f"{value}\n")
    return text


def format_comments(comments: tuple[Comment, ...], total: int) -> Text:
    if not comments:
        return Text("No comments", style="dim")
    text = Text()
    for comment in comments:
        author = comment.author.display_name if comment.author else "Unknown"
        created = (comment.created or "")[:10]
        text.append(f"{author}", style="bold")
        text.append(f" · {created}\n", style="dim")
        text.append(f"{comment.body_text}\n\n")
    if total > len(comments):
        text.append(f"... {total - len(comments)} older comments not shown", style="dim")
    return text


def format_changelog(entries: tuple[ChangelogEntry, ...]) -> Text:
    if not entries:
        return Text("No history", style="dim")
    text = Text()
    for entry in entries:
        author = entry.author.display_name if entry.author else "Unknown"
        for item in entry.items:
            text.append(f"{(entry.created or '')[:10]} {author}: ", style="dim")
            text.append(f"{item.field} {item.from_string or '-'} -> {item.to_string or '-'}\n")
    return text


class IssueDetailScreen(ModalScreen):
    """Detail view for a single issue.

    The app owns all state; it calls show() whenever new results arrive and
    reacts to the messages this screen posts.
    """

    class CommentEntered(Message):
        def __init__(self, issue_key: str, body: str) -> None:
            super().__init__()
            self.issue_key = issue_key
            self.body = body

    class TransitionRequested(Message):
        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    class AssigneeRequested(Message):
        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    class PriorityRequested(Message):
        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    class BrowserRequested(Message):
        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    class OlderHistoryRequested(Message):
        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    class LinkFollowRequested(Message):
        """Posted with the key of the linked issue to show next."""

        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    class LabelsRequested(Message):
        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    class ComponentsRequested(Message):
        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    class LinkRequested(Message):
        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    class UnlinkRequested(Message):
        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    class SummaryEditRequested(Message):
        def __init__(self, issue_key: str) -> None:
            super().__init__()
            self.issue_key = issue_key

    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("c", "comment", "Comment"),
        Binding("t", "transition", "Transition"),
        Binding("a", "assign", "Assign"),
        Binding("p", "priority", "Priority"),
        Binding("o", "open_in_browser", "Browser"),
        Binding("h", "older_history", "Older history"),
        Binding("l", "follow_link", "Follow link"),
        Binding("e", "labels", "Labels"),
        Binding("x", "components", "Components"),
        Binding("i", "link", "Link"),
        Binding("d", "unlink", "Unlink"),
        Binding("s", "edit_summary", "Summary"),
    ]

    DEFAULT_CSS = """
    IssueDetailScreen {
        align: center middle;
    }

    #detail-dialog {
        width: 90%;
        max-width: 140;
        height: 90%;
        background: $surface;
        border: solid $primary;
        padding: 1 2;
    }

    #detail-title {
        text-style: bold;
        margin-bottom: 1;
    }

    .detail-section-title {
        text-style: bold;
        color: $primary;
        margin-top: 1;
    }

    #comment-input {
        display: none;
    }
    """

    def __init__(self, issue: Issue) -> None:
        super().__init__()
        self._issue = issue

    @property
    def issue_key(self) -> str:
        return self._issue.key

    def compose(self) -> ComposeResult:
        with Vertical(id="detail-dialog"):
            yield Label(self._title(), id="detail-title")
            with VerticalScroll():
                yield Static(format_fields(self._issue), id="detail-fields")
                yield Label("Description", classes="detail-section-title")
                yield Static(Text(self._issue.description_text), id="detail-description")
                yield Label("Comments", classes="detail-section-title")
                yield Static(format_comments((), 0), id="detail-comments")
                yield Label("History", classes="detail-section-title")
                yield Static(format_changelog(()), id="detail-history")
            yield Input(placeholder="Comment (Enter to send)", id="comment-input")

    def _title(self) -> Text:
        return Text(f"{self._issue.key}  {self._issue.summary}")

    def show(self, state: DashState) -> None:
        """Re-render from the latest state; the shown issue follows state.detail."""
        if state.detail is None:
            return
        self._issue = state.detail
        self.query_one("#detail-title", Label).update(self._title())
        self.query_one("#detail-fields", Static).update(format_fields(self._issue))
        self.query_one("#detail-description", Static).update(Text(self._issue.description_text))
        self.query_one("#detail-comments", Static).update(
            format_comments(state.comments, state.comments_total)
        )
        self.query_one("#detail-history", Static).update(format_changelog(state.changelog))

    def action_comment(self) -> None:
        comment_input = self.query_one("#comment-input", Input)
        comment_input.display = True
        comment_input.focus()

    @on(Input.Submitted, "#comment-input")
    def on_comment_submitted(self, event: Input.Submitted) -> None:
        body = event.value.strip()
        event.input.value = ""
        event.input.display = False
        if body:
            self.post_message(self.CommentEntered(self._issue.key, body))

    def action_transition(self) -> None:
        self.post_message(self.TransitionRequested(self._issue.key))

    def action_assign(self) -> None:
        self.post_message(self.AssigneeRequested(self._issue.key))

    def action_priority(self) -> None:
        self.post_message(self.PriorityRequested(self._issue.key))

    def action_open_in_browser(self) -> None:
        self.post_message(self.BrowserRequested(self._issue.key))

    def action_older_history(self) -> None:
        self.post_message(self.OlderHistoryRequested(self._issue.key))

    def action_follow_link(self) -> None:
        for link in self._issue.fields.issuelinks:
            if link.linked_issue is not None:
                self.post_message(self.LinkFollowRequested(link.linked_issue.key))
                return
        self.notify("No linked issues", severity="warning")

    def action_edit_summary(self) -> None:
        self.post_message(self.SummaryEditRequested(self._issue.key))

    def action_labels(self) -> None:
        self.post_message(self.LabelsRequested(self._issue.key))

    def action_components(self) -> None:
        self.post_message(self.ComponentsRequested(self._issue.key))

    def action_link(self) -> None:
        self.post_message(self.LinkRequested(self._issue.key))

    def action_unlink(self) -> None:
        if not self._issue.fields.issuelinks:
            self.notify("No links to remove", severity="warning")
            return
        self.post_message(self.UnlinkRequested(self._issue.key))
