"""Main Textual application for the jira-dash dashboard."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Header, Label

from jira_dash.api.types import CreateIssueRequest, Issue, IssueUpdateRequest
from jira_dash.core.config import Profile
from jira_dash.core.context import DashContext
from jira_dash.gateway.jira.abc import JiraApi
from jira_dash.tasks.channel import ResultChannel
from jira_dash.tasks.dispatcher import TaskDispatcher
from jira_dash.tasks.messages import (
    ApiMessage,
    AssigneesFetched,
    ComponentsFetched,
    IssueTypesFetched,
    LabelsFetched,
    LinkTypesFetched,
    Ok,
    PrioritiesFetched,
    TransitionsFetched,
)
from jira_dash.tasks.operations import (
    Connect,
    FetchAssignees,
    FetchChangelog,
    FetchComments,
    FetchComponents,
    FetchIssues,
    FetchIssueTypes,
    FetchLabels,
    FetchLinkedIssue,
    FetchLinkTypes,
    FetchPriorities,
    FetchTransitions,
)
from jira_dash.tui.screens.help_screen import HelpScreen
from jira_dash.tui.screens.issue_detail_screen import IssueDetailScreen
from jira_dash.tui.screens.link_search_screen import LinkSearchScreen
from jira_dash.tui.screens.picker_screen import (
    NEW_LABEL_ID,
    UNASSIGNED_ID,
    Choices,
    PickerScreen,
    assignee_choices,
    component_choices,
    filter_choices,
    issue_type_choices,
    label_choices,
    link_type_choices,
    priority_choices,
    transition_choices,
    unlink_choices,
)
from jira_dash.tui.screens.prompt_screen import PromptScreen
from jira_dash.tui.state import DashState, reduce
from jira_dash.tui.widgets.issue_table import IssueTable
from jira_dash.tui.widgets.status_bar import StatusBar

logger = logging.getLogger(__name__)

PickerFetch = (
    FetchTransitions
    | FetchAssignees
    | FetchPriorities
    | FetchLabels
    | FetchComponents
    | FetchLinkTypes
    | FetchIssueTypes
)

_PICKER_RESULTS: dict[type, type] = {
    FetchTransitions: TransitionsFetched,
    FetchAssignees: AssigneesFetched,
    FetchPriorities: PrioritiesFetched,
    FetchLabels: LabelsFetched,
    FetchComponents: ComponentsFetched,
    FetchLinkTypes: LinkTypesFetched,
    FetchIssueTypes: IssueTypesFetched,
}


@dataclass(frozen=True)
class _PendingPicker:
    """A picker waiting for the fetch that supplies its choices.

    Results scoped to an issue or a project only answer the picker when the
    scope matches; a late result of an earlier request for another issue
    never opens this picker.
    """

    expects: type
    show: Callable[[], None]
    issue_key: str | None = None
    project_key: str | None = None

    def answers(self, message: ApiMessage) -> bool:
        if not isinstance(message, self.expects):
            return False
        match message:
            case TransitionsFetched(issue_key=key):
                return key == self.issue_key
            case (
                AssigneesFetched(project_key=key)
                | ComponentsFetched(project_key=key)
                | IssueTypesFetched(project_key=key)
            ):
                return key == self.project_key
            case _:
                return True


class JiraDashApp(App):
    """Interactive dashboard over one Jira session.

    User actions dispatch background operations and return at once. A timer
    drains the result channel every tick and applies each message through
    reduce(); the widgets are then redrawn from the resulting DashState.
    """

    TITLE = "jira-dash"

    DEFAULT_CSS = """
    #main-container {
        height: 1fr;
    }

    #loading-message {
        padding: 1 2;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q", "exit_app", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("m", "load_more", "More"),
        Binding("/", "edit_query", "JQL"),
        Binding("f", "filter", "Filter"),
        Binding("n", "new_issue", "New"),
        Binding("t", "transitions", "Transition"),
        Binding("a", "assign", "Assign"),
        Binding("p", "priority", "Priority"),
        Binding("o", "open_in_browser", "Browser"),
        Binding("?", "help", "Help"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
    ]

    def __init__(self, ctx: DashContext, profile: Profile, jql: str) -> None:
        """Initialize the dashboard.

        Args:
            ctx: Dependencies and settings
            profile: Profile to connect with
            jql: Initial query
        """
        super().__init__()
        self._ctx = ctx
        self._profile = profile
        settings = ctx.config.settings
        self._dispatcher = TaskDispatcher(
            ResultChannel(), max_concurrency=settings.max_concurrency or None
        )
        self._state = DashState(jql=jql, page_size=settings.page_size, connecting=True)
        self._pending_picker: _PendingPicker | None = None
        self._table: IssueTable | None = None
        self._status_bar: StatusBar | None = None

    @property
    def profile(self) -> Profile:
        return self._profile

    @property
    def state(self) -> DashState:
        return self._state

    @property
    def dispatcher(self) -> TaskDispatcher:
        return self._dispatcher

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="main-container"):
            yield Label(f"Connecting to {self._profile.url}...", id="loading-message")
            yield IssueTable()
        yield StatusBar()

    def on_mount(self) -> None:
        self._table = self.query_one(IssueTable)
        self._status_bar = self.query_one(StatusBar)
        self._table.display = False

        self._dispatcher.connect(self._ctx.session_factory, Connect(self._profile))

        settings = self._ctx.config.settings
        self.set_interval(settings.tick_interval_seconds, self.drain_results)
        if settings.refresh_interval_seconds > 0:
            self.set_interval(settings.refresh_interval_seconds, self._background_refresh)

    async def on_unmount(self) -> None:
        self._dispatcher.channel.close()
        if self._state.api is not None:
            await self._state.api.aclose()

    def drain_results(self) -> None:
        """Apply every finished operation's message, then redraw."""
        for message in self._dispatcher.channel.drain():
            self._apply(message)
        self._render_state()

    def _apply(self, message: ApiMessage) -> None:
        logger.debug("Applying %s", type(message).__name__)
        reduction = reduce(self._state, message)
        self._state = reduction.state
        for notice in reduction.notices:
            self.notify(notice.text, severity=notice.severity)
        api = self._state.api
        if api is not None:
            for operation in reduction.followups:
                self._dispatcher.dispatch(api, operation)
        self._open_pending_picker(message)

    def _open_pending_picker(self, message: ApiMessage) -> None:
        pending = self._pending_picker
        if pending is None or not pending.answers(message):
            return
        self._pending_picker = None
        # The reducer already reported a failed fetch.
        if isinstance(message.outcome, Ok):
            pending.show()

    def _request_picker(
        self,
        fetch: PickerFetch,
        show: Callable[[], None],
        *,
        issue_key: str | None = None,
        project_key: str | None = None,
    ) -> None:
        """Fetch a picker's choices, then call show() once they are in the state."""
        api = self._state.api
        if api is None:
            return
        self._pending_picker = _PendingPicker(
            _PICKER_RESULTS[type(fetch)], show, issue_key, project_key
        )
        self._dispatcher.dispatch(api, fetch)

    def _show_picker(self, title: str, choices: Choices, chosen: Callable[[str], None]) -> None:
        self._pending_picker = None

        def on_dismiss(choice: str | None) -> None:
            if choice is not None:
                chosen(choice)

        self.push_screen(PickerScreen(title, choices), callback=on_dismiss)

    def _prompt(self, prompt: str, entered: Callable[[str], None], value: str = "") -> None:
        def on_dismiss(text: str | None) -> None:
            if text is not None:
                entered(text)

        self.push_screen(PromptScreen(prompt, value), callback=on_dismiss)

    def _dispatch_write(self, write: Callable[[JiraApi], object]) -> None:
        api = self._state.api
        if api is not None:
            write(api)

    def _render_state(self) -> None:
        state = self._state
        if self._table is not None:
            self._table.populate(state.issues)
            if not state.loading and state.api is not None and not self._table.display:
                self.query_one("#loading-message", Label).display = False
                self._table.display = True
                self._table.focus()
            elif state.loading and not state.issues:
                self.query_one("#loading-message", Label).update("Loading issues...")
            elif not state.connecting and state.api is None:
                self.query_one("#loading-message", Label).update("Not connected")
        if self._status_bar is not None:
            self._status_bar.set_profile(state.profile_name)
            self._status_bar.set_issue_counts(len(state.issues), state.total)
            self._status_bar.set_in_flight(self._dispatcher.in_flight)
        if isinstance(self.screen, IssueDetailScreen):
            self.screen.show(state)
        elif isinstance(self.screen, LinkSearchScreen):
            self.screen.show_suggestions(state.link_suggestions)

    def _require_connection(self) -> bool:
        if self._state.api is None:
            self.notify("Not connected", severity="warning")
            return False
        return True

    def _background_refresh(self) -> None:
        api = self._state.api
        if api is None or self._state.loading:
            return
        self._dispatcher.fetch_issues(
            api, self._state.jql, self._state.page_size, is_background_refresh=True
        )

    def _search(self, jql: str) -> None:
        api = self._state.api
        if api is None:
            return
        self._state = self._state.with_query(jql)
        self._dispatcher.dispatch(api, FetchIssues(jql, self._state.page_size))
        self._render_state()

    def action_exit_app(self) -> None:
        # Status 1 tells scripts the dashboard never got a session.
        self.exit(return_code=0 if self._state.api is not None else 1)

    def action_refresh(self) -> None:
        if self._require_connection():
            self._search(self._state.jql)

    def action_load_more(self) -> None:
        api = self._state.api
        if api is None:
            return
        updated = self._state.begin_load_more()
        if updated is None:
            if not self._state.has_more:
                self.notify("All issues loaded")
            return
        self._state = updated
        assert updated.pending_offset is not None
        self._dispatcher.load_more(api, updated.jql, updated.pending_offset, updated.page_size)

    def action_edit_query(self) -> None:
        self._prompt("JQL query", self._query_edited, self._state.jql)

    def _query_edited(self, jql: str) -> None:
        if self._require_connection():
            self._search(jql)

    def action_filter(self) -> None:
        if not self._require_connection():
            return
        options = self._state.filter_options
        if options is None:
            self.notify("Filter options are still loading", severity="warning")
            return
        self._show_picker("Quick filter", filter_choices(options), self._query_edited)

    def action_help(self) -> None:
        self.push_screen(HelpScreen())

    def action_cursor_down(self) -> None:
        if self._table is not None:
            self._table.action_cursor_down()

    def action_cursor_up(self) -> None:
        if self._table is not None:
            self._table.action_cursor_up()

    def _selected_key(self) -> str | None:
        if self._table is None:
            return None
        issue = self._table.get_selected_issue()
        return issue.key if issue is not None else None

    def _find_issue(self, issue_key: str) -> Issue | None:
        for issue in (self._state.detail, *self._state.issues):
            if issue is not None and issue.key == issue_key:
                return issue
        return None

    def _project_of(self, issue_key: str) -> str:
        issue = self._find_issue(issue_key)
        if issue is not None and issue.project_key:
            return issue.project_key
        return issue_key.rpartition("-")[0]

    # Pickers. Each _pick_* builds its choices from the reduced state, so it
    # only runs after the fetch it waited on has been applied.

    def _pick_transition(self, issue_key: str) -> None:
        self._show_picker(
            f"Transition {issue_key}",
            transition_choices(self._state.transitions),
            lambda choice: self._dispatch_write(
                lambda api: self._dispatcher.execute_transition(api, issue_key, choice)
            ),
        )

    def _pick_assignee(self, issue_key: str) -> None:
        self._show_picker(
            f"Assign {issue_key}",
            assignee_choices(self._state.assignable_users),
            lambda choice: self._dispatch_write(
                lambda api: self._dispatcher.change_assignee(
                    api, issue_key, None if choice == UNASSIGNED_ID else choice
                )
            ),
        )

    def _pick_priority(self, issue_key: str) -> None:
        self._show_picker(
            f"Priority of {issue_key}",
            priority_choices(self._state.priorities),
            lambda choice: self._dispatch_write(
                lambda api: self._dispatcher.change_priority(api, issue_key, choice)
            ),
        )

    def _pick_label(self, issue_key: str) -> None:
        issue = self._find_issue(issue_key)
        current = issue.fields.labels if issue is not None else ()
        self._show_picker(
            f"Labels of {issue_key}",
            label_choices(current, self._state.labels),
            lambda choice: self._label_chosen(issue_key, choice),
        )

    def _label_chosen(self, issue_key: str, choice: str) -> None:
        if choice == NEW_LABEL_ID:
            self._prompt("New label", lambda label: self._add_label(issue_key, label))
            return
        action, _, label = choice.partition(":")
        if action == "remove":
            self._dispatch_write(lambda api: self._dispatcher.remove_label(api, issue_key, label))
        else:
            self._add_label(issue_key, label)

    def _add_label(self, issue_key: str, label: str) -> None:
        if any(c.isspace() for c in label):
            self.notify("Labels cannot contain spaces", severity="warning")
            return
        self._dispatch_write(lambda api: self._dispatcher.add_label(api, issue_key, label))

    def _pick_component(self, issue_key: str) -> None:
        issue = self._find_issue(issue_key)
        current = issue.fields.components if issue is not None else ()
        self._show_picker(
            f"Components of {issue_key}",
            component_choices(current, self._state.components),
            lambda choice: self._component_chosen(issue_key, choice),
        )

    def _component_chosen(self, issue_key: str, choice: str) -> None:
        action, _, name = choice.partition(":")
        if action == "remove":
            self._dispatch_write(
                lambda api: self._dispatcher.remove_component(api, issue_key, name)
            )
        else:
            self._dispatch_write(lambda api: self._dispatcher.add_component(api, issue_key, name))

    def _pick_link_type(self, issue_key: str) -> None:
        choices = link_type_choices(self._state.link_types)
        phrases = dict(choices)

        def chosen(choice: str) -> None:
            direction, _, type_name = choice.partition(":")
            title = phrases[choice].replace("This issue", issue_key, 1)

            def on_dismiss(target: str | None) -> None:
                self._link_target_chosen(issue_key, direction, type_name, target)

            self.push_screen(LinkSearchScreen(issue_key, title), callback=on_dismiss)

        self._show_picker(f"Link {issue_key}", choices, chosen)

    def _link_target_chosen(
        self, issue_key: str, direction: str, type_name: str, target: str | None
    ) -> None:
        self._state = self._state.end_link_search()
        if target is None:
            return
        if direction == "outward":
            outward_key, inward_key = issue_key, target
        else:
            outward_key, inward_key = target, issue_key
        self._dispatch_write(
            lambda api: self._dispatcher.create_link(
                api, issue_key, type_name, outward_key, inward_key
            )
        )

    def _pick_issue_type(self, project_key: str) -> None:
        def chosen(issue_type_id: str) -> None:
            self._prompt(
                f"Summary of the new {project_key} issue",
                lambda summary: self._create_issue(project_key, issue_type_id, summary),
            )

        self._show_picker(
            f"New issue in {project_key}", issue_type_choices(self._state.issue_types), chosen
        )

    def _create_issue(self, project_key: str, issue_type_id: str, summary: str) -> None:
        request = CreateIssueRequest(
            project_key=project_key, issue_type_id=issue_type_id, summary=summary
        )
        self._dispatch_write(lambda api: self._dispatcher.create_issue(api, request))

    def _request_transitions(self, issue_key: str) -> None:
        self._request_picker(
            FetchTransitions(issue_key),
            lambda: self._pick_transition(issue_key),
            issue_key=issue_key,
        )

    def _request_assignees(self, issue_key: str) -> None:
        project_key = self._project_of(issue_key)
        self._request_picker(
            FetchAssignees(project_key),
            lambda: self._pick_assignee(issue_key),
            project_key=project_key,
        )

    def _request_priorities(self, issue_key: str) -> None:
        self._request_picker(FetchPriorities(), lambda: self._pick_priority(issue_key))

    def action_transitions(self) -> None:
        key = self._selected_key()
        if key is not None:
            self._request_transitions(key)

    def action_assign(self) -> None:
        key = self._selected_key()
        if key is not None:
            self._request_assignees(key)

    def action_priority(self) -> None:
        key = self._selected_key()
        if key is not None:
            self._request_priorities(key)

    def action_new_issue(self) -> None:
        if not self._require_connection():
            return
        project_key = self._default_project()
        if project_key is None:
            self.notify("No project to create the issue in", severity="warning")
            return
        self._request_picker(
            FetchIssueTypes(project_key),
            lambda: self._pick_issue_type(project_key),
            project_key=project_key,
        )

    def _default_project(self) -> str | None:
        key = self._selected_key()
        if key is not None:
            return self._project_of(key)
        options = self._state.filter_options
        if options is not None and options.projects:
            return options.projects[0].key
        return None

    def action_open_in_browser(self) -> None:
        key = self._selected_key()
        if key is not None:
            self._open_in_browser(key)

    def _open_in_browser(self, issue_key: str) -> None:
        api = self._state.api
        if api is None:
            return
        if not self._ctx.browser.open_issue(api.base_url, issue_key):
            self.notify(f"Could not open a browser for {issue_key}", severity="warning")
            return
        if self._status_bar is not None:
            self._status_bar.set_message(f"Opened {issue_key}")

    @on(IssueTable.RowSelected)
    def on_row_selected(self, event: IssueTable.RowSelected) -> None:
        """Enter or double-click on a row opens the issue detail."""
        api = self._state.api
        issue = self._table.get_selected_issue() if self._table is not None else None
        if api is None or issue is None:
            return
        self._state = self._state.open_detail(issue)
        self.push_screen(IssueDetailScreen(issue), callback=self._detail_closed)
        # Search results carry a reduced field set; reload the full issue.
        for operation in (
            FetchLinkedIssue(issue.key),
            FetchComments(issue.key),
            FetchChangelog(issue.key),
        ):
            self._dispatcher.dispatch(api, operation)

    def _detail_closed(self, _result: object) -> None:
        self._state = self._state.close_detail()

    @on(IssueDetailScreen.CommentEntered)
    def on_comment_entered(self, event: IssueDetailScreen.CommentEntered) -> None:
        api = self._state.api
        if api is not None:
            self._dispatcher.submit_comment(api, event.issue_key, event.body)

    @on(IssueDetailScreen.TransitionRequested)
    def on_transition_requested(self, event: IssueDetailScreen.TransitionRequested) -> None:
        self._request_transitions(event.issue_key)

    @on(IssueDetailScreen.AssigneeRequested)
    def on_assignee_requested(self, event: IssueDetailScreen.AssigneeRequested) -> None:
        self._request_assignees(event.issue_key)

    @on(IssueDetailScreen.PriorityRequested)
    def on_priority_requested(self, event: IssueDetailScreen.PriorityRequested) -> None:
        self._request_priorities(event.issue_key)

    @on(IssueDetailScreen.LabelsRequested)
    def on_labels_requested(self, event: IssueDetailScreen.LabelsRequested) -> None:
        key = event.issue_key
        self._request_picker(FetchLabels(), lambda: self._pick_label(key))

    @on(IssueDetailScreen.ComponentsRequested)
    def on_components_requested(self, event: IssueDetailScreen.ComponentsRequested) -> None:
        key = event.issue_key
        project_key = self._project_of(key)
        self._request_picker(
            FetchComponents(project_key),
            lambda: self._pick_component(key),
            project_key=project_key,
        )

    @on(IssueDetailScreen.LinkRequested)
    def on_link_requested(self, event: IssueDetailScreen.LinkRequested) -> None:
        key = event.issue_key
        self._request_picker(FetchLinkTypes(), lambda: self._pick_link_type(key))

    @on(IssueDetailScreen.UnlinkRequested)
    def on_unlink_requested(self, event: IssueDetailScreen.UnlinkRequested) -> None:
        key = event.issue_key
        issue = self._find_issue(key)
        if issue is None:
            return
        self._show_picker(
            f"Remove a link from {key}",
            unlink_choices(issue.fields.issuelinks),
            lambda link_id: self._dispatch_write(
                lambda api: self._dispatcher.delete_link(api, key, link_id)
            ),
        )

    @on(IssueDetailScreen.SummaryEditRequested)
    def on_summary_edit_requested(self, event: IssueDetailScreen.SummaryEditRequested) -> None:
        key = event.issue_key
        issue = self._find_issue(key)
        if issue is None:
            return
        self._prompt(
            f"Summary of {key}",
            lambda summary: self._dispatch_write(
                lambda api: self._dispatcher.update_issue(
                    api, key, IssueUpdateRequest(summary=summary)
                )
            ),
            issue.summary,
        )

    @on(LinkSearchScreen.QueryChanged)
    def on_link_query_changed(self, event: LinkSearchScreen.QueryChanged) -> None:
        api = self._state.api
        if api is None:
            return
        self._state = self._state.search_links(event.query)
        self._dispatcher.search_issues_for_link(api, event.query, event.issue_key)

    @on(IssueDetailScreen.BrowserRequested)
    def on_browser_requested(self, event: IssueDetailScreen.BrowserRequested) -> None:
        self._open_in_browser(event.issue_key)

    @on(IssueDetailScreen.LinkFollowRequested)
    def on_link_follow_requested(self, event: IssueDetailScreen.LinkFollowRequested) -> None:
        api = self._state.api
        if api is None or self._state.detail is None:
            return
        self._state = self._state.follow_link(event.issue_key)
        self._dispatcher.fetch_linked_issue(api, event.issue_key)

    @on(IssueDetailScreen.OlderHistoryRequested)
    def on_older_history_requested(self, event: IssueDetailScreen.OlderHistoryRequested) -> None:
        api = self._state.api
        updated = self._state.begin_older_history()
        if api is None or updated is None:
            return
        self._state = updated
        assert updated.pending_changelog_offset is not None
        self._dispatcher.fetch_changelog(
            api, event.issue_key, updated.pending_changelog_offset, is_append=True
        )
