"""Modal option picker and the choice lists it is filled with."""

from collections.abc import Iterable

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, OptionList
from textual.widgets.option_list import Option

from jira_dash.api.types import (
    Component,
    FilterOptions,
    IssueLink,
    IssueLinkType,
    IssueType,
    Priority,
    Transition,
    User,
)

Choices = tuple[tuple[str, str], ...]

UNASSIGNED_ID = "-unassigned-"
NEW_LABEL_ID = "-new-label-"
FILTER_ORDER = " ORDER BY updated DESC"


def transition_label(transition: Transition) -> str:
    """Label a transition with its target status when that adds information."""
    if transition.to is None or transition.to.name == transition.name:
        return transition.name
    return f"{transition.name} -> {transition.to.name}"


def transition_choices(transitions: Iterable[Transition]) -> Choices:
    return tuple((t.id, transition_label(t)) for t in transitions)


def assignee_choices(users: Iterable[User]) -> Choices:
    """Active users plus an entry that clears the assignee."""
    choices = [(u.account_id, u.display_name) for u in users if u.active]
    return ((UNASSIGNED_ID, "Unassigned"), *choices)


def priority_choices(priorities: Iterable[Priority]) -> Choices:
    return tuple((p.id, p.name) for p in priorities)


def label_choices(current: Iterable[str], known: Iterable[str]) -> Choices:
    """Removals for the issue's labels, additions for the rest, then a free-form entry.

    IDs are "remove:<label>", "add:<label>" or NEW_LABEL_ID.
    """
    current = tuple(current)
    removals = [(f"remove:{label}", f"Remove {label}") for label in current]
    additions = [(f"add:{label}", f"Add {label}") for label in known if label not in current]
    return (*removals, *additions, (NEW_LABEL_ID, "New label..."))


def component_choices(current: Iterable[Component], known: Iterable[str]) -> Choices:
    names = tuple(c.name for c in current)
    removals = [(f"remove:{name}", f"Remove {name}") for name in names]
    additions = [(f"add:{name}", f"Add {name}") for name in known if name not in names]
    return (*removals, *additions)


def link_type_choices(link_types: Iterable[IssueLinkType]) -> Choices:
    """Both directions of every link type, phrased from the current issue.

    IDs are "outward:<type name>" (this issue is the outward side) or
    "inward:<type name>".
    """
    choices: list[tuple[str, str]] = []
    for link_type in link_types:
        choices.append((f"outward:{link_type.name}", f"This issue {link_type.outward} ..."))
        choices.append((f"inward:{link_type.name}", f"This issue {link_type.inward} ..."))
    return tuple(choices)


def unlink_choices(links: Iterable[IssueLink]) -> Choices:
    choices: list[tuple[str, str]] = []
    for link in links:
        linked = link.linked_issue
        if linked is not None:
            choices.append((link.id, f"{link.description} {linked.key} {linked.summary}".rstrip()))
    return tuple(choices)


def issue_type_choices(issue_types: Iterable[IssueType]) -> Choices:
    return tuple((t.id, t.name) for t in issue_types if not t.subtask)


def jql_string(value: str) -> str:
    """Quote a value as a JQL string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def filter_choices(options: FilterOptions) -> Choices:
    """Quick filters; each ID is a complete JQL query."""
    clauses = [("assignee = currentUser()", "Assigned to me")]
    clauses += [(f"project = {jql_string(p.key)}", f"Project: {p.name}") for p in options.projects]
    clauses += [(f"status = {jql_string(s.name)}", f"Status: {s.name}") for s in options.statuses]
    clauses += [
        (f"priority = {jql_string(p.name)}", f"Priority: {p.name}") for p in options.priorities
    ]
    clauses += [(f"labels = {jql_string(label)}", f"Label: {label}") for label in options.labels]
    return tuple((clause + FILTER_ORDER, label) for clause, label in clauses)


class PickerScreen(ModalScreen[str | None]):
    """Lists (id, label) choices; dismisses with the chosen ID or None."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("q", "cancel", "Cancel"),
    ]

    DEFAULT_CSS = """
    PickerScreen {
        align: center middle;
    }

    #picker-dialog {
        width: 60;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: solid $primary;
        padding: 1 2;
    }

    #picker-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    def __init__(self, title: str, choices: Choices) -> None:
        super().__init__()
        self._title = title
        self._choices = choices

    @property
    def heading(self) -> str:
        return self._title

    def compose(self) -> ComposeResult:
        with Vertical(id="picker-dialog"):
            yield Label(self._title, id="picker-title")
            if self._choices:
                yield OptionList(
                    *(Option(label, id=choice_id) for choice_id, label in self._choices),
                    id="picker-options",
                )
            else:
                yield Label("Nothing to choose from")

    @on(OptionList.OptionSelected, "#picker-options")
    def on_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id)

    def action_cancel(self) -> None:
        self.dismiss(None)
