"""Production Jira API implementation over the REST v3 endpoints."""

import asyncio
import logging
from urllib.parse import quote, urlencode

import httpx

from jira_dash.api.adf import text_to_adf
from jira_dash.api.credential import Credential
from jira_dash.api.executor import RequestExecutor
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
    IssueLinkTypeList,
    IssueSuggestion,
    IssueType,
    IssueUpdateRequest,
    LabelPage,
    PickerResult,
    Priority,
    Project,
    ProjectDetails,
    SearchResult,
    Status,
    Transition,
    TransitionList,
    User,
)
from jira_dash.core.config import Profile
from jira_dash.gateway.jira.abc import JiraApi, JiraSessionFactory
from jira_dash.gateway.secret_store.abc import SecretStore
from jira_dash.gateway.time.abc import Time

logger = logging.getLogger(__name__)

# Fields requested for list views; the detail view fetches the full issue.
SEARCH_FIELDS = (
    "summary",
    "status",
    "issuetype",
    "priority",
    "assignee",
    "reporter",
    "project",
    "labels",
    "components",
    "created",
    "updated",
)

MAX_LABELS = 1000


def _key(issue_key: str) -> str:
    return quote(issue_key, safe="")


class RealJiraApi(JiraApi):
    """JiraApi backed by a RequestExecutor.

    Reads retry through the executor's backoff loop; writes are single
    attempts. The instance is shared across concurrent tasks.
    """

    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor

    @property
    def base_url(self) -> str:
        return self._executor.base_url

    def _url(self, path: str, **params: str | int) -> str:
        url = self._executor.api_url(path)
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    async def myself(self) -> CurrentUser:
        return await self._executor.validate_connection()

    async def search_issues(self, jql: str, start_at: int, max_results: int) -> SearchResult:
        url = self._url(
            "/search",
            jql=jql,
            startAt=start_at,
            maxResults=max_results,
            fields=",".join(SEARCH_FIELDS),
        )
        return await self._executor.get(url, SearchResult)

    async def get_issue(self, issue_key: str) -> Issue:
        return await self._executor.get(self._url(f"/issue/{_key(issue_key)}"), Issue)

    async def get_transitions(self, issue_key: str) -> list[Transition]:
        result = await self._executor.get(
            self._url(f"/issue/{_key(issue_key)}/transitions"), TransitionList
        )
        return list(result.transitions)

    async def transition_issue(
        self, issue_key: str, transition_id: str, fields: FieldUpdates | None
    ) -> None:
        body = {"transition": {"id": transition_id}}
        if fields is not None:
            body.update(fields.to_payload())
        await self._executor.send(
            "POST",
            self._url(f"/issue/{_key(issue_key)}/transitions"),
            body=body,
            transition=True,
        )

    async def get_assignable_users(self, project_key: str) -> list[User]:
        url = self._url("/user/assignable/search", project=project_key, maxResults=100)
        return await self._executor.get(url, list[User])

    async def update_assignee(self, issue_key: str, account_id: str | None) -> None:
        await self._executor.send(
            "PUT",
            self._url(f"/issue/{_key(issue_key)}/assignee"),
            body={"accountId": account_id},
        )

    async def get_priorities(self) -> list[Priority]:
        return await self._executor.get(self._url("/priority"), list[Priority])

    async def update_priority(self, issue_key: str, priority_id: str) -> None:
        await self._executor.send(
            "PUT",
            self._url(f"/issue/{_key(issue_key)}"),
            body={"fields": {"priority": {"id": priority_id}}},
        )

    async def get_comments(self, issue_key: str, start_at: int, max_results: int) -> CommentPage:
        url = self._url(
            f"/issue/{_key(issue_key)}/comment",
            startAt=start_at,
            maxResults=max_results,
            orderBy="-created",
        )
        return await self._executor.get(url, CommentPage)

    async def add_comment(self, issue_key: str, body: str) -> Comment:
        comment = await self._executor.send(
            "POST",
            self._url(f"/issue/{_key(issue_key)}/comment"),
            body={"body": text_to_adf(body)},
            shape=Comment,
        )
        assert comment is not None
        return comment

    async def update_issue(self, issue_key: str, request: IssueUpdateRequest) -> None:
        await self._executor.send(
            "PUT", self._url(f"/issue/{_key(issue_key)}"), body=request.to_payload()
        )

    async def get_labels(self) -> list[str]:
        page = await self._executor.get(self._url("/label", maxResults=MAX_LABELS), LabelPage)
        return list(page.values)

    async def add_labels(self, issue_key: str, labels: list[str]) -> None:
        await self._edit_list_field(issue_key, "labels", [{"add": label} for label in labels])

    async def remove_labels(self, issue_key: str, labels: list[str]) -> None:
        await self._edit_list_field(issue_key, "labels", [{"remove": label} for label in labels])

    async def get_project_components(self, project_key: str) -> list[Component]:
        return await self._executor.get(
            self._url(f"/project/{_key(project_key)}/components"), list[Component]
        )

    async def add_components(self, issue_key: str, components: list[str]) -> None:
        await self._edit_list_field(
            issue_key, "components", [{"add": {"name": name}} for name in components]
        )

    async def remove_components(self, issue_key: str, components: list[str]) -> None:
        await self._edit_list_field(
            issue_key, "components", [{"remove": {"name": name}} for name in components]
        )

    async def _edit_list_field(self, issue_key: str, field: str, operations: list) -> None:
        await self._executor.send(
            "PUT",
            self._url(f"/issue/{_key(issue_key)}"),
            body={"update": {field: operations}},
        )

    async def get_changelog(self, issue_key: str, start_at: int, max_results: int) -> ChangelogPage:
        url = self._url(
            f"/issue/{_key(issue_key)}/changelog", startAt=start_at, maxResults=max_results
        )
        return await self._executor.get(url, ChangelogPage)

    async def get_issue_link_types(self) -> list[IssueLinkType]:
        result = await self._executor.get(self._url("/issueLinkType"), IssueLinkTypeList)
        return list(result.issue_link_types)

    async def search_issues_for_picker(
        self, query: str, exclude_key: str | None
    ) -> list[IssueSuggestion]:
        params: dict[str, str | int] = {"query": query}
        if exclude_key is not None:
            params["currentIssueKey"] = exclude_key
        result = await self._executor.get(self._url("/issue/picker", **params), PickerResult)

        seen: set[str] = set()
        suggestions: list[IssueSuggestion] = []
        for section in result.sections:
            for issue in section.issues:
                if issue.key == exclude_key or issue.key in seen:
                    continue
                seen.add(issue.key)
                suggestions.append(issue)
        return suggestions

    async def create_issue_link(
        self, link_type_name: str, outward_key: str, inward_key: str
    ) -> None:
        await self._executor.send(
            "POST",
            self._url("/issueLink"),
            body={
                "type": {"name": link_type_name},
                "outwardIssue": {"key": outward_key},
                "inwardIssue": {"key": inward_key},
            },
        )

    async def delete_issue_link(self, link_id: str) -> None:
        await self._executor.send("DELETE", self._url(f"/issueLink/{_key(link_id)}"))

    async def create_issue(self, request: CreateIssueRequest) -> CreatedIssue:
        created = await self._executor.send(
            "POST", self._url("/issue"), body=request.to_payload(), shape=CreatedIssue
        )
        assert created is not None
        return created

    async def get_issue_types(self, project_key: str) -> list[IssueType]:
        details = await self._executor.get(
            self._url(f"/project/{_key(project_key)}"), ProjectDetails
        )
        return [t for t in details.issue_types if not t.subtask]

    async def get_filter_options(self) -> FilterOptions:
        projects, statuses, priorities, labels = await asyncio.gather(
            self._executor.get(self._url("/project"), list[Project]),
            self._executor.get(self._url("/status"), list[Status]),
            self.get_priorities(),
            self.get_labels(),
        )
        unique_statuses = {s.name: s for s in statuses}
        return FilterOptions(
            projects=tuple(projects),
            statuses=tuple(unique_statuses.values()),
            priorities=tuple(priorities),
            labels=tuple(labels),
        )

    async def aclose(self) -> None:
        await self._executor.aclose()


class RealJiraSessionFactory(JiraSessionFactory):
    """Opens sessions using the platform secret store and real HTTP."""

    def __init__(
        self,
        *,
        secret_store: SecretStore,
        time: Time,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret_store = secret_store
        self._time = time
        self._transport = transport

    async def open(self, profile: Profile) -> JiraApi:
        # Keyring backends may block on D-Bus or the macOS keychain.
        secret = await asyncio.to_thread(self._secret_store.retrieve, profile.name)
        credential = Credential.from_secret(profile.email, secret)
        del secret

        executor = RequestExecutor(
            base_url=profile.url,
            credential=credential,
            time=self._time,
            transport=self._transport,
        )
        api = RealJiraApi(executor)
        try:
            user = await api.myself()
        except BaseException:
            await api.aclose()
            raise
        logger.info("Connected to %s as %s", api.base_url, user.display_name)
        return api
