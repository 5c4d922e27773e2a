"""Dashboard state and the reducer that applies result messages to it.

reduce() performs no I/O. Given the current DashState and one ApiMessage it
returns the next state, the notices to show, and any operations that should
be dispatched as a consequence (for example, searching once a session
connects). Results that no longer match what the user is looking at are
discarded here, which is how superseded requests are ignored without
cancellation.
"""

from dataclasses import dataclass, replace
from typing import Literal

from jira_dash.api.types import (
    ChangelogEntry,
    Comment,
    FilterOptions,
    Issue,
    IssueLinkType,
    IssueSuggestion,
    IssueType,
    Priority,
    Transition,
    User,
)
from jira_dash.gateway.jira.abc import JiraApi
from jira_dash.tasks.messages import (
    ApiMessage,
    AssigneeChanged,
    AssigneesFetched,
    ChangelogFetched,
    ClientConnected,
    CommentsFetched,
    CommentSubmitted,
    ComponentChanged,
    ComponentsFetched,
    Err,
    FilterOptionsFetched,
    IssueCreated,
    IssuesFetched,
    IssueSearchResults,
    IssueTypesFetched,
    IssueUpdated,
    LabelChanged,
    LabelsFetched,
    LinkCreated,
    LinkDeleted,
    LinkedIssueFetched,
    LinkTypesFetched,
    LoadMoreFetched,
    Ok,
    PrioritiesFetched,
    PriorityChanged,
    TransitionExecuted,
    TransitionsFetched,
)
from jira_dash.tasks.operations import (
    FetchChangelog,
    FetchComments,
    FetchFilterOptions,
    FetchIssues,
    FetchLinkedIssue,
    Operation,
)

Severity = Literal["information", "warning", "error"]


@dataclass(frozen=True)
class Notice:
    text: str
    severity: Severity = "information"


@dataclass(frozen=True)
class DashState:
    """Everything the dashboard renders.

    Attributes:
        jql: Active query; search results for any other query are stale
        page_size: Issues requested per page
        api: Connected session, or None before connecting
        issues: Issues loaded so far for the active query
        total: Total matches reported by the last search page
        loading: A first-page search is in flight
        pending_offset: Offset of the in-flight load-more request, if any
        detail: Issue shown in the detail view, if open
        following_link: Linked issue the detail view will switch to once fetched
        pending_changelog_offset: Offset of the in-flight "older history" request
        link_query: Query whose suggestions the link search is waiting for
    """

    jql: str
    page_size: int
    api: JiraApi | None = None
    profile_name: str | None = None
    connecting: bool = False
    issues: tuple[Issue, ...] = ()
    total: int = 0
    loading: bool = False
    pending_offset: int | None = None
    detail: Issue | None = None
    following_link: str | None = None
    pending_changelog_offset: int | None = None
    comments: tuple[Comment, ...] = ()
    comments_total: int = 0
    changelog: tuple[ChangelogEntry, ...] = ()
    changelog_has_more: bool = False
    transitions: tuple[Transition, ...] = ()
    transitions_for: str | None = None
    assignable_users: tuple[User, ...] = ()
    priorities: tuple[Priority, ...] = ()
    labels: tuple[str, ...] = ()
    components: tuple[str, ...] = ()
    link_types: tuple[IssueLinkType, ...] = ()
    link_query: str | None = None
    link_suggestions: tuple[IssueSuggestion, ...] = ()
    issue_types: tuple[IssueType, ...] = ()
    filter_options: FilterOptions | None = None

    @property
    def has_more(self) -> bool:
        return len(self.issues) < self.total

    @property
    def next_offset(self) -> int:
        return len(self.issues)

    def with_query(self, jql: str) -> "DashState":
        """Switch to a new query, clearing results of the old one."""
        return replace(self, jql=jql, issues=(), total=0, loading=True, pending_offset=None)

    def begin_load_more(self) -> "DashState | None":
        """Mark a load-more request in flight.

        Returns:
            The updated state, or None when there is nothing more to load or
            a search is already running
        """
        if self.loading or self.pending_offset is not None or not self.has_more:
            return None
        return replace(self, pending_offset=self.next_offset)

    def open_detail(self, issue: Issue) -> "DashState":
        return replace(
            self,
            detail=issue,
            comments=(),
            comments_total=0,
            changelog=(),
            changelog_has_more=False,
            pending_changelog_offset=None,
        )

    def close_detail(self) -> "DashState":
        return replace(
            self,
            detail=None,
            following_link=None,
            comments=(),
            changelog=(),
            pending_changelog_offset=None,
        )

    def follow_link(self, issue_key: str) -> "DashState":
        return replace(self, following_link=issue_key)

    def begin_older_history(self) -> "DashState | None":
        """Mark a request for the next page of history in flight.

        Returns:
            The updated state, or None when no detail is open, the history is
            complete, or a page is already on its way
        """
        if (
            self.detail is None
            or self.pending_changelog_offset is not None
            or not self.changelog_has_more
        ):
            return None
        return replace(self, pending_changelog_offset=len(self.changelog))

    def search_links(self, query: str) -> "DashState":
        return replace(self, link_query=query, link_suggestions=())

    def end_link_search(self) -> "DashState":
        return replace(self, link_query=None, link_suggestions=())


@dataclass(frozen=True)
class Reduction:
    state: DashState
    notices: tuple[Notice, ...] = ()
    followups: tuple[Operation, ...] = ()


def _error(state: DashState, message: str) -> Reduction:
    return Reduction(state, (Notice(message, "error"),))


def _replace_issue(state: DashState, issue: Issue) -> DashState:
    """Swap an updated issue into the list and the detail view."""
    issues = tuple(issue if i.key == issue.key else i for i in state.issues)
    detail = issue if state.detail is not None and state.detail.key == issue.key else state.detail
    return replace(state, issues=issues, detail=detail)


def _issue_changed(state: DashState, outcome: Ok[Issue] | Err, verb: str) -> Reduction:
    match outcome:
        case Ok(value=issue):
            return Reduction(_replace_issue(state, issue), (Notice(f"{issue.key} {verb}"),))
        case Err(message=message):
            return _error(state, message)


def reduce(state: DashState, message: ApiMessage) -> Reduction:
    """Apply one result message.

    Args:
        state: Current state
        message: Result of a background operation

    Returns:
        Next state plus notices and follow-up operations
    """
    match message:
        case ClientConnected(profile_name=profile_name, outcome=Ok(value=api)):
            connected = replace(
                state, api=api, profile_name=profile_name, connecting=False, loading=True
            )
            return Reduction(
                connected,
                (Notice(f"Connected to {api.base_url}"),),
                (FetchIssues(state.jql, state.page_size), FetchFilterOptions()),
            )
        case ClientConnected(outcome=Err(message=error)):
            return _error(replace(state, connecting=False), error)

        case IssuesFetched(jql=jql) if jql != state.jql:
            return Reduction(state)
        case IssuesFetched(outcome=Ok(value=result)):
            return Reduction(
                replace(
                    state,
                    issues=result.issues,
                    total=result.total,
                    loading=False,
                    pending_offset=None,
                )
            )
        case IssuesFetched(outcome=Err(message=error), is_background_refresh=background):
            if background:
                notice = Notice(f"Refresh failed: {error}", "warning")
            else:
                notice = Notice(error, "error")
            return Reduction(replace(state, loading=False), (notice,))

        case LoadMoreFetched(jql=jql, offset=offset) if (
            jql != state.jql or offset != state.pending_offset
        ):
            return Reduction(state)
        case LoadMoreFetched(outcome=Ok(value=result)):
            return Reduction(
                replace(
                    state,
                    issues=state.issues + result.issues,
                    total=result.total,
                    pending_offset=None,
                )
            )
        case LoadMoreFetched(outcome=Err(message=error)):
            return _error(replace(state, pending_offset=None), error)

        case FilterOptionsFetched(outcome=Ok(value=options)):
            return Reduction(replace(state, filter_options=options))

        case TransitionsFetched(issue_key=key, outcome=Ok(value=transitions)):
            return Reduction(replace(state, transitions=tuple(transitions), transitions_for=key))

        case TransitionExecuted(outcome=Ok(value=issue) as outcome):
            cleared = replace(state, transitions=(), transitions_for=None)
            return _issue_changed(cleared, outcome, f"moved to {issue.status}")
        case TransitionExecuted(outcome=Err(message=error)):
            return _error(state, error)
        case AssigneeChanged(outcome=outcome):
            return _issue_changed(state, outcome, "assignee updated")
        case PriorityChanged(outcome=outcome):
            return _issue_changed(state, outcome, "priority updated")
        case IssueUpdated(outcome=outcome):
            return _issue_changed(state, outcome, "updated")
        case LabelChanged(outcome=outcome):
            return _issue_changed(state, outcome, "labels updated")
        case ComponentChanged(outcome=outcome):
            return _issue_changed(state, outcome, "components updated")

        case AssigneesFetched(outcome=Ok(value=users)):
            return Reduction(replace(state, assignable_users=tuple(users)))
        case PrioritiesFetched(outcome=Ok(value=priorities)):
            return Reduction(replace(state, priorities=tuple(priorities)))
        case LabelsFetched(outcome=Ok(value=labels)):
            return Reduction(replace(state, labels=tuple(labels)))
        case ComponentsFetched(outcome=Ok(value=components)):
            return Reduction(replace(state, components=tuple(components)))
        case LinkTypesFetched(outcome=Ok(value=link_types)):
            return Reduction(replace(state, link_types=tuple(link_types)))
        case IssueSearchResults(query=query) if query != state.link_query:
            return Reduction(state)
        case IssueSearchResults(outcome=Ok(value=suggestions)):
            return Reduction(replace(state, link_suggestions=tuple(suggestions)))
        case IssueTypesFetched(outcome=Ok(value=issue_types)):
            return Reduction(replace(state, issue_types=tuple(issue_types)))

        case CommentsFetched(issue_key=key) | ChangelogFetched(issue_key=key) if (
            state.detail is None or state.detail.key != key
        ):
            return Reduction(state)
        case CommentsFetched(outcome=Ok(value=result)):
            return Reduction(
                replace(state, comments=result.comments, comments_total=result.total)
            )
        case ChangelogFetched(is_append=True, start_at=start_at) if (
            start_at != state.pending_changelog_offset
        ):
            return Reduction(state)
        case ChangelogFetched(outcome=Ok(value=page), is_append=True):
            return Reduction(
                replace(
                    state,
                    changelog=state.changelog + page.values,
                    changelog_has_more=page.has_more(),
                    pending_changelog_offset=None,
                )
            )
        case ChangelogFetched(outcome=Ok(value=page)):
            return Reduction(
                replace(state, changelog=page.values, changelog_has_more=page.has_more())
            )
        case ChangelogFetched(outcome=Err(message=error), is_append=True):
            return _error(replace(state, pending_changelog_offset=None), error)

        case CommentSubmitted(issue_key=key, outcome=Ok()):
            return Reduction(state, (Notice(f"Comment added to {key}"),), (FetchComments(key),))

        case LinkedIssueFetched(issue_key=key, outcome=Ok(value=issue)) if (
            state.detail is not None and key == state.following_link
        ):
            followed = replace(_replace_issue(state, issue), following_link=None)
            return Reduction(
                followed.open_detail(issue),
                followups=(FetchComments(key), FetchChangelog(key)),
            )
        case LinkedIssueFetched(outcome=Ok(value=issue)):
            return Reduction(_replace_issue(state, issue))
        case LinkedIssueFetched(issue_key=key, outcome=Err(message=error)) if (
            key == state.following_link
        ):
            return _error(replace(state, following_link=None), error)

        case LinkCreated(issue_key=key, outcome=Ok()):
            return Reduction(state, (Notice(f"Link created on {key}"),), (FetchLinkedIssue(key),))
        case LinkDeleted(issue_key=key, outcome=Ok()):
            return Reduction(state, (Notice(f"Link removed from {key}"),), (FetchLinkedIssue(key),))

        case IssueCreated(outcome=Ok(value=issue)):
            return Reduction(
                replace(state, loading=True),
                (Notice(f"Created {issue.key}"),),
                (FetchIssues(state.jql, state.page_size),),
            )

        case (
            FilterOptionsFetched(outcome=Err(message=error))
            | TransitionsFetched(outcome=Err(message=error))
            | AssigneesFetched(outcome=Err(message=error))
            | PrioritiesFetched(outcome=Err(message=error))
            | LabelsFetched(outcome=Err(message=error))
            | ComponentsFetched(outcome=Err(message=error))
            | LinkTypesFetched(outcome=Err(message=error))
            | IssueSearchResults(outcome=Err(message=error))
            | IssueTypesFetched(outcome=Err(message=error))
            | CommentsFetched(outcome=Err(message=error))
            | ChangelogFetched(outcome=Err(message=error))
            | CommentSubmitted(outcome=Err(message=error))
            | LinkedIssueFetched(outcome=Err(message=error))
            | LinkCreated(outcome=Err(message=error))
            | LinkDeleted(outcome=Err(message=error))
            | IssueCreated(outcome=Err(message=error))
        ):
            return _error(state, error)

    return Reduction(state)
