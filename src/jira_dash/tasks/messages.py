"""Result messages posted by background operations.

Every dispatch produces exactly one message. A message carries an Outcome,
which is either Ok(value) or Err(message) where message is the display string
of the classified error, plus whatever context the consumer needs to match
the result to the request that produced it.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from jira_dash.api.types import (
    ChangelogPage,
    Comment,
    FilterOptions,
    Issue,
    IssueLinkType,
    IssueSuggestion,
    IssueType,
    Priority,
    SearchResult,
    Transition,
    User,
)
from jira_dash.gateway.jira.abc import JiraApi

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    message: str


Outcome = Ok[T] | Err


@dataclass(frozen=True)
class CommentsResult:
    comments: tuple[Comment, ...]
    total: int


@dataclass(frozen=True)
class ClientConnected:
    profile_name: str
    outcome: Outcome[JiraApi]


@dataclass(frozen=True)
class IssuesFetched:
    jql: str
    outcome: Outcome[SearchResult]
    is_background_refresh: bool = False


@dataclass(frozen=True)
class LoadMoreFetched:
    jql: str
    offset: int
    outcome: Outcome[SearchResult]


@dataclass(frozen=True)
class FilterOptionsFetched:
    outcome: Outcome[FilterOptions]


@dataclass(frozen=True)
class TransitionsFetched:
    issue_key: str
    outcome: Outcome[list[Transition]]


@dataclass(frozen=True)
class TransitionExecuted:
    issue_key: str
    outcome: Outcome[Issue]


@dataclass(frozen=True)
class AssigneesFetched:
    project_key: str
    outcome: Outcome[list[User]]


@dataclass(frozen=True)
class AssigneeChanged:
    issue_key: str
    outcome: Outcome[Issue]


@dataclass(frozen=True)
class PrioritiesFetched:
    outcome: Outcome[list[Priority]]


@dataclass(frozen=True)
class PriorityChanged:
    issue_key: str
    outcome: Outcome[Issue]


@dataclass(frozen=True)
class CommentsFetched:
    issue_key: str
    outcome: Outcome[CommentsResult]


@dataclass(frozen=True)
class CommentSubmitted:
    issue_key: str
    outcome: Outcome[Comment]


@dataclass(frozen=True)
class IssueUpdated:
    issue_key: str
    outcome: Outcome[Issue]


@dataclass(frozen=True)
class LabelsFetched:
    outcome: Outcome[list[str]]


@dataclass(frozen=True)
class LabelChanged:
    issue_key: str
    outcome: Outcome[Issue]


@dataclass(frozen=True)
class ComponentsFetched:
    project_key: str
    outcome: Outcome[list[str]]


@dataclass(frozen=True)
class ComponentChanged:
    issue_key: str
    outcome: Outcome[Issue]


@dataclass(frozen=True)
class ChangelogFetched:
    """A page of history; start_at echoes the offset that was requested."""

    issue_key: str
    outcome: Outcome[ChangelogPage]
    start_at: int = 0
    is_append: bool = False


@dataclass(frozen=True)
class LinkedIssueFetched:
    issue_key: str
    outcome: Outcome[Issue]


@dataclass(frozen=True)
class LinkTypesFetched:
    outcome: Outcome[list[IssueLinkType]]


@dataclass(frozen=True)
class IssueSearchResults:
    query: str
    outcome: Outcome[list[IssueSuggestion]]


@dataclass(frozen=True)
class LinkCreated:
    issue_key: str
    outcome: Outcome[None]


@dataclass(frozen=True)
class LinkDeleted:
    issue_key: str
    outcome: Outcome[None]


@dataclass(frozen=True)
class IssueCreated:
    outcome: Outcome[Issue]


@dataclass(frozen=True)
class IssueTypesFetched:
    project_key: str
    outcome: Outcome[list[IssueType]]


ApiMessage = (
    ClientConnected
    | IssuesFetched
    | LoadMoreFetched
    | FilterOptionsFetched
    | TransitionsFetched
    | TransitionExecuted
    | AssigneesFetched
    | AssigneeChanged
    | PrioritiesFetched
    | PriorityChanged
    | CommentsFetched
    | CommentSubmitted
    | IssueUpdated
    | LabelsFetched
    | LabelChanged
    | ComponentsFetched
    | ComponentChanged
    | ChangelogFetched
    | LinkedIssueFetched
    | LinkTypesFetched
    | IssueSearchResults
    | LinkCreated
    | LinkDeleted
    | IssueCreated
    | IssueTypesFetched
)

