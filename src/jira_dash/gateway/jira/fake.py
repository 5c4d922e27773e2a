"""Fake Jira API for testing dispatch and TUI components."""

import asyncio

from jira_dash.api.adf import text_to_adf
from jira_dash.api.errors import NotFound
from jira_dash.api.types import (
    ChangelogEntry,
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
    IssueFields,
    IssueLink,
    IssueLinkType,
    IssueSuggestion,
    IssueType,
    IssueUpdateRequest,
    LinkedIssueRef,
    Priority,
    Project,
    SearchResult,
    Status,
    Transition,
    User,
)
from jira_dash.core.config import Profile
from jira_dash.gateway.jira.abc import JiraApi, JiraSessionFactory


def make_issue(
    key: str,
    summary: str = "Test issue",
    *,
    status: str = "To Do",
    issue_type: str = "Task",
    priority: str | None = None,
    assignee: str | None = None,
    labels: tuple[str, ...] = (),
    components: tuple[str, ...] = (),
) -> Issue:
    """Build an Issue with sensible defaults for tests.

    Args:
        key: Issue key, e.g. "PROJ-1"
        summary: Issue summary
        status: Status name
        issue_type: Issue type name
        priority: Priority name, or None
        assignee: Assignee display name, or None
        labels: Labels on the issue
        components: Component names on the issue

    Returns:
        A frozen Issue
    """
    issue_id = str(10000 + sum(ord(c) for c in key))
    return Issue(
        id=issue_id,
        key=key,
        self_url=f"https://fake.atlassian.net/rest/api/3/issue/{issue_id}",
        fields=IssueFields(
            summary=summary,
            status=Status(id=status.lower().replace(" ", "-"), name=status),
            issuetype=IssueType(id=issue_type.lower(), name=issue_type),
            priority=Priority(id=priority.lower(), name=priority) if priority else None,
            assignee=make_user(assignee) if assignee else None,
            labels=labels,
            components=tuple(
                Component(id=str(i), name=name) for i, name in enumerate(components, start=1)
            ),
        ),
    )


def _ref(issue: Issue) -> LinkedIssueRef:
    return LinkedIssueRef(id=issue.id, key=issue.key, fields={"summary": issue.summary})


def make_user(display_name: str) -> User:
    """Build a User whose account ID is derived from the display name."""
    return User(account_id=display_name.lower().replace(" ", "."), display_name=display_name)


def make_transition(transition_id: str, name: str, to_status: str) -> Transition:
    """Build a Transition leading to the named status."""
    return Transition(
        id=transition_id,
        name=name,
        to=Status(id=to_status.lower().replace(" ", "-"), name=to_status),
    )


class FakeJiraApi(JiraApi):
    """In-memory JiraApi.

    Returns canned data without making any network calls. Writes mutate the
    stored issues so that a re-fetch after a write observes the change, the
    same way the real site behaves.

    This class has NO public setup methods. All state is provided via
    constructor using keyword arguments with sensible defaults.
    """

    def __init__(
        self,
        *,
        base_url: str = "https://fake.atlassian.net",
        current_user: CurrentUser | None = None,
        issues: list[Issue] | None = None,
        search_results: dict[str, list[Issue]] | None = None,
        transitions: dict[str, list[Transition]] | None = None,
        assignable_users: dict[str, list[User]] | None = None,
        priorities: list[Priority] | None = None,
        comments: dict[str, list[Comment]] | None = None,
        labels: list[str] | None = None,
        components: dict[str, list[Component]] | None = None,
        changelogs: dict[str, list[ChangelogEntry]] | None = None,
        link_types: list[IssueLinkType] | None = None,
        suggestions: list[IssueSuggestion] | None = None,
        projects: list[Project] | None = None,
        statuses: list[Status] | None = None,
        issue_types: dict[str, list[IssueType]] | None = None,
        failures: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
        search_delays: dict[str, float] | None = None,
    ) -> None:
        """Create FakeJiraApi with pre-configured state.

        Args:
            base_url: Reported site URL
            current_user: Returned by myself(); defaults to "Test User"
            issues: Issues addressable by key via get_issue()
            search_results: JQL -> matching issues; pages are slices of the list
            transitions: Issue key -> available transitions
            assignable_users: Project key -> assignable users
            priorities: Site priorities
            comments: Issue key -> comments
            labels: Site labels
            components: Project key -> components
            changelogs: Issue key -> changelog entries
            link_types: Site link types
            suggestions: Issue picker suggestions
            projects: Projects for filter options
            statuses: Statuses for filter options
            issue_types: Project key -> issue types
            failures: Method name -> exception raised by that method
            delays: Method name -> seconds to suspend before answering
            search_delays: JQL -> seconds search_issues() suspends for that query
        """
        self._base_url = base_url
        self._current_user = current_user or CurrentUser(
            account_id="test.user", display_name="Test User", email_address="test@example.com"
        )
        self._issues: dict[str, Issue] = {}
        for issue in issues or []:
            self._issues[issue.key] = issue
        self._search_results = search_results or {}
        for matching in self._search_results.values():
            for issue in matching:
                self._issues.setdefault(issue.key, issue)
        self._transitions = transitions or {}
        self._assignable_users = assignable_users or {}
        self._priorities = priorities or []
        self._comments = {key: list(value) for key, value in (comments or {}).items()}
        self._labels = labels or []
        self._components = components or {}
        self._changelogs = changelogs or {}
        self._link_types = link_types or []
        self._suggestions = suggestions or []
        self._projects = projects or []
        self._statuses = statuses or []
        self._issue_types = issue_types or {}
        self._failures = failures or {}
        self._delays = delays or {}
        self._search_delays = search_delays or {}
        self._calls: list[tuple[str, tuple[object, ...]]] = []
        self._links: dict[str, tuple[str, str, str]] = {}
        self._closed = False

    async def _enter(self, method: str, *args: object) -> None:
        self._calls.append((method, args))
        delay = self._delays.get(method, 0.0)
        if method == "search_issues" and args:
            delay = self._search_delays.get(str(args[0]), delay)
        await asyncio.sleep(delay)
        if method in self._failures:
            raise self._failures[method]

    def _require_issue(self, issue_key: str) -> Issue:
        if issue_key not in self._issues:
            raise NotFound(f"issue {issue_key}")
        return self._issues[issue_key]

    def _update_fields(self, issue_key: str, **updates: object) -> None:
        issue = self._require_issue(issue_key)
        fields = issue.fields.model_copy(update=updates)
        self._issues[issue_key] = issue.model_copy(update={"fields": fields})

    @property
    def base_url(self) -> str:
        return self._base_url

    async def myself(self) -> CurrentUser:
        await self._enter("myself")
        return self._current_user

    async def search_issues(self, jql: str, start_at: int, max_results: int) -> SearchResult:
        await self._enter("search_issues", jql, start_at, max_results)
        matching = [self._issues.get(i.key, i) for i in self._search_results.get(jql, [])]
        page = matching[start_at : start_at + max_results]
        return SearchResult(
            start_at=start_at, max_results=max_results, total=len(matching), issues=tuple(page)
        )

    async def get_issue(self, issue_key: str) -> Issue:
        await self._enter("get_issue", issue_key)
        return self._require_issue(issue_key)

    async def get_transitions(self, issue_key: str) -> list[Transition]:
        await self._enter("get_transitions", issue_key)
        return list(self._transitions.get(issue_key, []))

    async def transition_issue(
        self, issue_key: str, transition_id: str, fields: FieldUpdates | None
    ) -> None:
        await self._enter("transition_issue", issue_key, transition_id, fields)
        for transition in self._transitions.get(issue_key, []):
            if transition.id == transition_id and transition.to is not None:
                self._update_fields(issue_key, status=transition.to)
                return
        self._require_issue(issue_key)

    async def get_assignable_users(self, project_key: str) -> list[User]:
        await self._enter("get_assignable_users", project_key)
        return list(self._assignable_users.get(project_key, []))

    async def update_assignee(self, issue_key: str, account_id: str | None) -> None:
        await self._enter("update_assignee", issue_key, account_id)
        assignee = None
        if account_id is not None:
            for users in self._assignable_users.values():
                for user in users:
                    if user.account_id == account_id:
                        assignee = user
            if assignee is None:
                assignee = User(account_id=account_id, display_name=account_id)
        self._update_fields(issue_key, assignee=assignee)

    async def get_priorities(self) -> list[Priority]:
        await self._enter("get_priorities")
        return list(self._priorities)

    async def update_priority(self, issue_key: str, priority_id: str) -> None:
        await self._enter("update_priority", issue_key, priority_id)
        priority = next((p for p in self._priorities if p.id == priority_id), None)
        if priority is None:
            priority = Priority(id=priority_id, name=priority_id)
        self._update_fields(issue_key, priority=priority)

    async def get_comments(self, issue_key: str, start_at: int, max_results: int) -> CommentPage:
        await self._enter("get_comments", issue_key, start_at, max_results)
        comments = self._comments.get(issue_key, [])
        return CommentPage(
            start_at=start_at,
            max_results=max_results,
            total=len(comments),
            comments=tuple(comments[start_at : start_at + max_results]),
        )

    async def add_comment(self, issue_key: str, body: str) -> Comment:
        await self._enter("add_comment", issue_key, body)
        self._require_issue(issue_key)
        existing = self._comments.setdefault(issue_key, [])
        comment = Comment(
            id=str(len(existing) + 1),
            author=User(
                account_id=self._current_user.account_id,
                display_name=self._current_user.display_name,
            ),
            body=text_to_adf(body),
        )
        existing.append(comment)
        return comment

    async def update_issue(self, issue_key: str, request: IssueUpdateRequest) -> None:
        await self._enter("update_issue", issue_key, request)
        updates: dict[str, object] = {}
        if request.summary is not None:
            updates["summary"] = request.summary
        if request.description is not None:
            updates["description"] = text_to_adf(request.description)
        if request.labels is not None:
            updates["labels"] = request.labels
        if request.duedate is not None:
            updates["duedate"] = request.duedate
        if request.story_points is not None:
            updates["story_points"] = request.story_points
        self._update_fields(issue_key, **updates)

    async def get_labels(self) -> list[str]:
        await self._enter("get_labels")
        return list(self._labels)

    async def add_labels(self, issue_key: str, labels: list[str]) -> None:
        await self._enter("add_labels", issue_key, tuple(labels))
        current = self._require_issue(issue_key).fields.labels
        added = tuple(label for label in labels if label not in current)
        self._update_fields(issue_key, labels=current + added)

    async def remove_labels(self, issue_key: str, labels: list[str]) -> None:
        await self._enter("remove_labels", issue_key, tuple(labels))
        current = self._require_issue(issue_key).fields.labels
        self._update_fields(issue_key, labels=tuple(lb for lb in current if lb not in labels))

    async def get_project_components(self, project_key: str) -> list[Component]:
        await self._enter("get_project_components", project_key)
        return list(self._components.get(project_key, []))

    async def add_components(self, issue_key: str, components: list[str]) -> None:
        await self._enter("add_components", issue_key, tuple(components))
        current = self._require_issue(issue_key).fields.components
        names = {c.name for c in current}
        added = tuple(
            Component(id=f"new-{name}", name=name) for name in components if name not in names
        )
        self._update_fields(issue_key, components=current + added)

    async def remove_components(self, issue_key: str, components: list[str]) -> None:
        await self._enter("remove_components", issue_key, tuple(components))
        current = self._require_issue(issue_key).fields.components
        self._update_fields(
            issue_key, components=tuple(c for c in current if c.name not in components)
        )

    async def get_changelog(self, issue_key: str, start_at: int, max_results: int) -> ChangelogPage:
        await self._enter("get_changelog", issue_key, start_at, max_results)
        entries = self._changelogs.get(issue_key, [])
        page = entries[start_at : start_at + max_results]
        return ChangelogPage(
            start_at=start_at,
            max_results=max_results,
            total=len(entries),
            is_last=start_at + len(page) >= len(entries),
            values=tuple(page),
        )

    async def get_issue_link_types(self) -> list[IssueLinkType]:
        await self._enter("get_issue_link_types")
        return list(self._link_types)

    async def search_issues_for_picker(
        self, query: str, exclude_key: str | None
    ) -> list[IssueSuggestion]:
        await self._enter("search_issues_for_picker", query, exclude_key)
        needle = query.lower()
        return [
            s
            for s in self._suggestions
            if s.key != exclude_key
            and (needle in s.key.lower() or needle in s.summary_text.lower())
        ]

    async def create_issue_link(
        self, link_type_name: str, outward_key: str, inward_key: str
    ) -> None:
        await self._enter("create_issue_link", link_type_name, outward_key, inward_key)
        link_type = next((t for t in self._link_types if t.name == link_type_name), None)
        if link_type is None:
            raise NotFound(f"issue link type {link_type_name}")
        outward = self._require_issue(outward_key)
        inward = self._require_issue(inward_key)
        link_id = str(len(self._links) + 1)
        self._links[link_id] = (link_type_name, outward_key, inward_key)
        self._attach_link(
            outward_key, IssueLink(id=link_id, type=link_type, outward_issue=_ref(inward))
        )
        self._attach_link(
            inward_key, IssueLink(id=link_id, type=link_type, inward_issue=_ref(outward))
        )

    async def delete_issue_link(self, link_id: str) -> None:
        await self._enter("delete_issue_link", link_id)
        if link_id not in self._links:
            raise NotFound(f"issue link {link_id}")
        _, outward_key, inward_key = self._links.pop(link_id)
        for key in (outward_key, inward_key):
            links = self._issues[key].fields.issuelinks
            self._update_fields(key, issuelinks=tuple(lk for lk in links if lk.id != link_id))

    def _attach_link(self, issue_key: str, link: IssueLink) -> None:
        links = self._issues[issue_key].fields.issuelinks
        self._update_fields(issue_key, issuelinks=links + (link,))

    async def create_issue(self, request: CreateIssueRequest) -> CreatedIssue:
        await self._enter("create_issue", request)
        number = 1 + sum(1 for key in self._issues if key.startswith(f"{request.project_key}-"))
        key = f"{request.project_key}-{number}"
        issue = make_issue(key, request.summary, labels=request.labels)
        self._issues[key] = issue
        return CreatedIssue(id=issue.id, key=key, self_url=issue.self_url)

    async def get_issue_types(self, project_key: str) -> list[IssueType]:
        await self._enter("get_issue_types", project_key)
        return list(self._issue_types.get(project_key, []))

    async def get_filter_options(self) -> FilterOptions:
        await self._enter("get_filter_options")
        return FilterOptions(
            projects=tuple(self._projects),
            statuses=tuple(self._statuses),
            priorities=tuple(self._priorities),
            labels=tuple(self._labels),
        )

    async def aclose(self) -> None:
        self._closed = True

    @property
    def calls(self) -> list[tuple[str, tuple[object, ...]]]:
        """(method, args) for every call made, in order.

        This property is for test assertions only.
        """
        return self._calls

    def call_names(self) -> list[str]:
        """Method names of every call made, in order."""
        return [name for name, _ in self._calls]

    @property
    def links(self) -> dict[str, tuple[str, str, str]]:
        """Created links: id -> (type name, outward key, inward key)."""
        return dict(self._links)

    @property
    def closed(self) -> bool:
        return self._closed


class FakeJiraSessionFactory(JiraSessionFactory):
    """Session factory returning a pre-built api or raising a canned error.

    This class has NO public setup methods. All state is provided via
    constructor.
    """

    def __init__(
        self,
        *,
        api: JiraApi | None = None,
        error: Exception | None = None,
    ) -> None:
        """Create FakeJiraSessionFactory.

        Args:
            api: Session returned by open(); defaults to an empty FakeJiraApi
            error: If set, open() raises it instead
        """
        self._api = api if api is not None else FakeJiraApi()
        self._error = error
        self._opened_profiles: list[Profile] = []

    async def open(self, profile: Profile) -> JiraApi:
        self._opened_profiles.append(profile)
        await asyncio.sleep(0)
        if self._error is not None:
            raise self._error
        return self._api

    @property
    def opened_profiles(self) -> list[Profile]:
        """Profiles passed to open(), in call order."""
        return self._opened_profiles
