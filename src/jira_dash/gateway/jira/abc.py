"""Abstract Jira API operations.

JiraApi is the handle background tasks share. Implementations must be safe
to call from many concurrent tasks at once and must report failures by
raising JiraApiError subclasses.
"""

from abc import ABC, abstractmethod

from jira_dash.api.types import (
    ChangelogPage,
    Comment,
    CommentPage,
    Component,
    CreatedIssue,
    CreateIssueRequest,
    CurrentUser,
    FieldUpdates,
    FilterOptions,
    Issue,
    IssueLinkType,
    IssueSuggestion,
    IssueType,
    IssueUpdateRequest,
    Priority,
    SearchResult,
    Transition,
    User,
)
from jira_dash.core.config import Profile


class JiraApi(ABC):
    """Abstract interface for one authenticated Jira session.

    All implementations (real and fake) must implement this interface.
    """

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Base URL of the Jira site this session talks to."""
        ...

    @abstractmethod
    async def myself(self) -> CurrentUser:
        """Fetch the authenticated user."""
        ...

    @abstractmethod
    async def search_issues(self, jql: str, start_at: int, max_results: int) -> SearchResult:
        """Run a JQL search and return one page of results.

        Args:
            jql: JQL query string
            start_at: Offset of the first issue to return
            max_results: Page size
        """
        ...

    @abstractmethod
    async def get_issue(self, issue_key: str) -> Issue:
        """Fetch one issue by key."""
        ...

    @abstractmethod
    async def get_transitions(self, issue_key: str) -> list[Transition]:
        """List workflow transitions available for an issue."""
        ...

    @abstractmethod
    async def transition_issue(
        self, issue_key: str, transition_id: str, fields: FieldUpdates | None
    ) -> None:
        """Execute a workflow transition.

        Args:
            issue_key: Issue to transition
            transition_id: ID from get_transitions()
            fields: Extra fields required by the transition screen, if any
        """
        ...

    @abstractmethod
    async def get_assignable_users(self, project_key: str) -> list[User]:
        """List users that can be assigned issues in a project."""
        ...

    @abstractmethod
    async def update_assignee(self, issue_key: str, account_id: str | None) -> None:
        """Assign an issue, or unassign it when account_id is None."""
        ...

    @abstractmethod
    async def get_priorities(self) -> list[Priority]:
        """List the site's priorities."""
        ...

    @abstractmethod
    async def update_priority(self, issue_key: str, priority_id: str) -> None:
        """Change an issue's priority."""
        ...

    @abstractmethod
    async def get_comments(self, issue_key: str, start_at: int, max_results: int) -> CommentPage:
        """Fetch one page of an issue's comments."""
        ...

    @abstractmethod
    async def add_comment(self, issue_key: str, body: str) -> Comment:
        """Add a plain-text comment to an issue."""
        ...

    @abstractmethod
    async def update_issue(self, issue_key: str, request: IssueUpdateRequest) -> None:
        """Update editable fields of an issue."""
        ...

    @abstractmethod
    async def get_labels(self) -> list[str]:
        """List labels known to the site."""
        ...

    @abstractmethod
    async def add_labels(self, issue_key: str, labels: list[str]) -> None:
        """Add labels to an issue."""
        ...

    @abstractmethod
    async def remove_labels(self, issue_key: str, labels: list[str]) -> None:
        """Remove labels from an issue."""
        ...

    @abstractmethod
    async def get_project_components(self, project_key: str) -> list[Component]:
        """List a project's components."""
        ...

    @abstractmethod
    async def add_components(self, issue_key: str, components: list[str]) -> None:
        """Add components (by name) to an issue."""
        ...

    @abstractmethod
    async def remove_components(self, issue_key: str, components: list[str]) -> None:
        """Remove components (by name) from an issue."""
        ...

    @abstractmethod
    async def get_changelog(self, issue_key: str, start_at: int, max_results: int) -> ChangelogPage:
        """Fetch one page of an issue's change history."""
        ...

    @abstractmethod
    async def get_issue_link_types(self) -> list[IssueLinkType]:
        """List the link types configured on the site."""
        ...

    @abstractmethod
    async def search_issues_for_picker(
        self, query: str, exclude_key: str | None
    ) -> list[IssueSuggestion]:
        """Suggest issues matching free text, for the link picker.

        Args:
            query: Free text or issue key prefix
            exclude_key: Issue to leave out of the suggestions (usually the current one)
        """
        ...

    @abstractmethod
    async def create_issue_link(
        self, link_type_name: str, outward_key: str, inward_key: str
    ) -> None:
        """Link two issues with a named link type."""
        ...

    @abstractmethod
    async def delete_issue_link(self, link_id: str) -> None:
        """Delete an issue link by ID."""
        ...

    @abstractmethod
    async def create_issue(self, request: CreateIssueRequest) -> CreatedIssue:
        """Create an issue and return its key."""
        ...

    @abstractmethod
    async def get_issue_types(self, project_key: str) -> list[IssueType]:
        """List issue types available when creating issues in a project."""
        ...

    @abstractmethod
    async def get_filter_options(self) -> FilterOptions:
        """Fetch the projects, statuses, priorities and labels for filtering."""
        ...

    @abstractmethod
    async def aclose(self) -> None:
        """Release network resources held by the session."""
        ...


class JiraSessionFactory(ABC):
    """Opens authenticated sessions for a profile."""

    @abstractmethod
    async def open(self, profile: Profile) -> JiraApi:
        """Retrieve the profile's secret, build a session and validate it.

        Args:
            profile: Profile naming the site URL and account email

        Returns:
            A validated JiraApi session

        Raises:
            SecretStoreError: If the secret could not be retrieved
            JiraApiError: If the connection could not be validated
        """
        ...
