"""Issue table widget for the dashboard."""

from textual.widgets import DataTable

from jira_dash.api.types import Issue

COLUMNS = (
    ("key", "key"),
    ("type", "type"),
    ("status", "status"),
    ("priority", "priority"),
    ("assignee", "assignee"),
    ("summary", "summary"),
)


class IssueTable(DataTable):
    """DataTable subclass listing the issues of the active query.

    Uses row selection mode; rows are keyed by issue key.
    """

    def __init__(self) -> None:
        super().__init__(cursor_type="row")
        self._issues: tuple[Issue, ...] = ()

    def action_cursor_left(self) -> None:
        """Disable left arrow navigation (row mode only)."""
        pass

    def action_cursor_right(self) -> None:
        """Disable right arrow navigation (row mode only)."""
        pass

    def on_mount(self) -> None:
        for label, key in COLUMNS:
            self.add_column(label, key=key)

    def populate(self, issues: tuple[Issue, ...]) -> None:
        """Replace the rows, keeping the cursor on the same issue when possible.

        If the selected issue disappeared, the cursor stays at the same row
        index, clamped to the new row count.

        Args:
            issues: Issues to display, in order
        """
        if issues == self._issues:
            return

        selected_key: str | None = None
        if 0 <= self.cursor_row < len(self._issues):
            selected_key = self._issues[self.cursor_row].key
        saved_cursor_row = self.cursor_row

        self._issues = issues
        self.clear()
        for issue in issues:
            self.add_row(*_row_values(issue), key=issue.key)

        if not issues:
            return
        for index, issue in enumerate(issues):
            if issue.key == selected_key:
                self.move_cursor(row=index)
                return
        if saved_cursor_row >= 0:
            self.move_cursor(row=min(saved_cursor_row, len(issues) - 1))

    def get_selected_issue(self) -> Issue | None:
        """The issue under the cursor, or None when the table is empty."""
        cursor_row = self.cursor_row
        if cursor_row < 0 or cursor_row >= len(self._issues):
            return None
        return self._issues[cursor_row]


def _row_values(issue: Issue) -> tuple[str, ...]:
    return (
        issue.key,
        issue.issue_type,
        issue.status,
        issue.priority or "-",
        issue.assignee or "Unassigned",
        issue.summary,
    )
