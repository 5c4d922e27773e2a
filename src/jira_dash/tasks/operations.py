"""Descriptions of the background operations the dispatcher can launch.

Each operation is a frozen dataclass carrying exactly the inputs its remote
calls need. `Operation` is the closed union of all of them;
TaskDispatcher.dispatch() matches on it exhaustively.
"""

from dataclasses import dataclass

from jira_dash.api.types import CreateIssueRequest, FieldUpdates, IssueUpdateRequest
from jira_dash.core.config import Profile

COMMENTS_PAGE_SIZE = 50
CHANGELOG_PAGE_SIZE = 100


@dataclass(frozen=True)
class Connect:
    profile: Profile


@dataclass(frozen=True)
class FetchIssues:
    """Run a JQL search from the first page.

    Attributes:
        jql: Query string, echoed back on the result for correlation
        page_size: Issues per page
        is_background_refresh: Whether the search was triggered by the refresh timer
    """

    jql: str
    page_size: int
    is_background_refresh: bool = False


@dataclass(frozen=True)
class LoadMoreIssues:
    jql: str
    offset: int
    page_size: int


@dataclass(frozen=True)
class FetchFilterOptions:
    pass


@dataclass(frozen=True)
class FetchTransitions:
    issue_key: str


@dataclass(frozen=True)
class ExecuteTransition:
    issue_key: str
    transition_id: str
    fields: FieldUpdates | None = None


@dataclass(frozen=True)
class FetchAssignees:
    project_key: str


@dataclass(frozen=True)
class ChangeAssignee:
    """Assign an issue; account_id None unassigns it."""

    issue_key: str
    account_id: str | None


@dataclass(frozen=True)
class FetchPriorities:
    pass


@dataclass(frozen=True)
class ChangePriority:
    issue_key: str
    priority_id: str


@dataclass(frozen=True)
class FetchComments:
    issue_key: str


@dataclass(frozen=True)
class SubmitComment:
    issue_key: str
    body: str


@dataclass(frozen=True)
class UpdateIssue:
    issue_key: str
    request: IssueUpdateRequest


@dataclass(frozen=True)
class FetchLabels:
    pass


@dataclass(frozen=True)
class AddLabel:
    issue_key: str
    label: str


@dataclass(frozen=True)
class RemoveLabel:
    issue_key: str
    label: str


@dataclass(frozen=True)
class FetchComponents:
    project_key: str


@dataclass(frozen=True)
class AddComponent:
    issue_key: str
    component: str


@dataclass(frozen=True)
class RemoveComponent:
    issue_key: str
    component: str


@dataclass(frozen=True)
class FetchChangelog:
    """Fetch a page of history; is_append marks a "load older" request."""

    issue_key: str
    start_at: int = 0
    is_append: bool = False


@dataclass(frozen=True)
class FetchLinkedIssue:
    issue_key: str


@dataclass(frozen=True)
class FetchLinkTypes:
    pass


@dataclass(frozen=True)
class SearchIssuesForLink:
    query: str
    exclude_key: str | None = None


@dataclass(frozen=True)
class CreateLink:
    """Link two issues and report against issue_key (the issue on screen)."""

    issue_key: str
    link_type_name: str
    outward_key: str
    inward_key: str


@dataclass(frozen=True)
class DeleteLink:
    issue_key: str
    link_id: str


@dataclass(frozen=True)
class CreateIssue:
    request: CreateIssueRequest


@dataclass(frozen=True)
class FetchIssueTypes:
    project_key: str


Operation = (
    FetchIssues
    | LoadMoreIssues
    | FetchFilterOptions
    | FetchTransitions
    | ExecuteTransition
    | FetchAssignees
    | ChangeAssignee
    | FetchPriorities
    | ChangePriority
    | FetchComments
    | SubmitComment
    | UpdateIssue
    | FetchLabels
    | AddLabel
    | RemoveLabel
    | FetchComponents
    | AddComponent
    | RemoveComponent
    | FetchChangelog
    | FetchLinkedIssue
    | FetchLinkTypes
    | SearchIssuesForLink
    | CreateLink
    | DeleteLink
    | CreateIssue
    | FetchIssueTypes
)
