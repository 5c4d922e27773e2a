"""Launches Jira operations in the background and posts their results.

The interface never awaits a remote call. It calls one TaskDispatcher method,
which schedules an asyncio task and returns immediately; the task performs
its remote calls, wraps the result in an Outcome, and posts exactly one
tagged message to the ResultChannel. The interface picks messages up on its
next tick.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, TypeVar, assert_never

from jira_dash.api.errors import JiraApiError
from jira_dash.api.types import (
    CreateIssueRequest,
    FieldUpdates,
    Issue,
    IssueUpdateRequest,
)
from jira_dash.gateway.jira.abc import JiraApi, JiraSessionFactory
from jira_dash.gateway.secret_store.abc import SecretStoreError
from jira_dash.tasks.channel import ResultChannel
from jira_dash.tasks.messages import (
    ApiMessage,
    AssigneeChanged,
    AssigneesFetched,
    ChangelogFetched,
    ClientConnected,
    CommentsFetched,
    CommentsResult,
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
    Outcome,
    PrioritiesFetched,
    PriorityChanged,
    TransitionExecuted,
    TransitionsFetched,
)
from jira_dash.tasks.operations import (
    CHANGELOG_PAGE_SIZE,
    COMMENTS_PAGE_SIZE,
    AddComponent,
    AddLabel,
    ChangeAssignee,
    ChangePriority,
    Connect,
    CreateIssue,
    CreateLink,
    DeleteLink,
    ExecuteTransition,
    FetchAssignees,
    FetchChangelog,
    FetchComments,
    FetchComponents,
    FetchFilterOptions,
    FetchIssues,
    FetchIssueTypes,
    FetchLabels,
    FetchLinkedIssue,
    FetchLinkTypes,
    FetchPriorities,
    FetchTransitions,
    LoadMoreIssues,
    Operation,
    RemoveComponent,
    RemoveLabel,
    SearchIssuesForLink,
    SubmitComment,
    UpdateIssue,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _attempt(call: Awaitable[T]) -> Outcome[T]:
    """Await a remote call, erasing any failure to its display string.

    Classified failures keep their own message. Anything else is a bug in a
    gateway or a library; it is logged with its traceback and still reported
    so the dispatch posts its message.
    """
    try:
        return Ok(await call)
    except JiraApiError as e:
        return Err(str(e))
    except Exception as e:
        logger.exception("Unexpected failure in background operation")
        return Err(_unexpected(e))


def _unexpected(error: Exception) -> str:
    return f"Unexpected error: {error.__class__.__name__}: {error}"


async def _then_refetch(api: JiraApi, issue_key: str, write: Awaitable[None]) -> Issue:
    """Perform a write, then fetch the issue so the caller sees the new state.

    A failure of either step fails the whole operation.
    """
    await write
    return await api.get_issue(issue_key)


async def _create_and_fetch(api: JiraApi, request: CreateIssueRequest) -> Issue:
    created = await api.create_issue(request)
    return await api.get_issue(created.key)


async def _component_names(api: JiraApi, project_key: str) -> list[str]:
    return [c.name for c in await api.get_project_components(project_key)]


async def _comments(api: JiraApi, issue_key: str) -> CommentsResult:
    page = await api.get_comments(issue_key, 0, COMMENTS_PAGE_SIZE)
    return CommentsResult(comments=page.comments, total=page.total)


async def run_operation(api: JiraApi, operation: Operation) -> ApiMessage:
    """Perform an operation's remote calls and build its result message.

    Never raises JiraApiError: classified failures become Err outcomes.

    Args:
        api: Session to run against
        operation: What to do

    Returns:
        The message tagged with the operation's correlation context
    """
    match operation:
        case FetchIssues(jql=jql, page_size=page_size, is_background_refresh=background):
            return IssuesFetched(
                jql=jql,
                outcome=await _attempt(api.search_issues(jql, 0, page_size)),
                is_background_refresh=background,
            )
        case LoadMoreIssues(jql=jql, offset=offset, page_size=page_size):
            return LoadMoreFetched(
                jql=jql,
                offset=offset,
                outcome=await _attempt(api.search_issues(jql, offset, page_size)),
            )
        case FetchFilterOptions():
            return FilterOptionsFetched(outcome=await _attempt(api.get_filter_options()))
        case FetchTransitions(issue_key=key):
            return TransitionsFetched(
                issue_key=key, outcome=await _attempt(api.get_transitions(key))
            )
        case ExecuteTransition(issue_key=key, transition_id=transition_id, fields=fields):
            write = api.transition_issue(key, transition_id, fields)
            return TransitionExecuted(
                issue_key=key, outcome=await _attempt(_then_refetch(api, key, write))
            )
        case FetchAssignees(project_key=project_key):
            return AssigneesFetched(
                project_key=project_key,
                outcome=await _attempt(api.get_assignable_users(project_key)),
            )
        case ChangeAssignee(issue_key=key, account_id=account_id):
            write = api.update_assignee(key, account_id)
            return AssigneeChanged(
                issue_key=key, outcome=await _attempt(_then_refetch(api, key, write))
            )
        case FetchPriorities():
            return PrioritiesFetched(outcome=await _attempt(api.get_priorities()))
        case ChangePriority(issue_key=key, priority_id=priority_id):
            write = api.update_priority(key, priority_id)
            return PriorityChanged(
                issue_key=key, outcome=await _attempt(_then_refetch(api, key, write))
            )
        case FetchComments(issue_key=key):
            return CommentsFetched(issue_key=key, outcome=await _attempt(_comments(api, key)))
        case SubmitComment(issue_key=key, body=body):
            return CommentSubmitted(
                issue_key=key, outcome=await _attempt(api.add_comment(key, body))
            )
        case UpdateIssue(issue_key=key, request=request):
            write = api.update_issue(key, request)
            return IssueUpdated(
                issue_key=key, outcome=await _attempt(_then_refetch(api, key, write))
            )
        case FetchLabels():
            return LabelsFetched(outcome=await _attempt(api.get_labels()))
        case AddLabel(issue_key=key, label=label):
            write = api.add_labels(key, [label])
            return LabelChanged(
                issue_key=key, outcome=await _attempt(_then_refetch(api, key, write))
            )
        case RemoveLabel(issue_key=key, label=label):
            write = api.remove_labels(key, [label])
            return LabelChanged(
                issue_key=key, outcome=await _attempt(_then_refetch(api, key, write))
            )
        case FetchComponents(project_key=project_key):
            return ComponentsFetched(
                project_key=project_key,
                outcome=await _attempt(_component_names(api, project_key)),
            )
        case AddComponent(issue_key=key, component=component):
            write = api.add_components(key, [component])
            return ComponentChanged(
                issue_key=key, outcome=await _attempt(_then_refetch(api, key, write))
            )
        case RemoveComponent(issue_key=key, component=component):
            write = api.remove_components(key, [component])
            return ComponentChanged(
                issue_key=key, outcome=await _attempt(_then_refetch(api, key, write))
            )
        case FetchChangelog(issue_key=key, start_at=start_at, is_append=is_append):
            return ChangelogFetched(
                issue_key=key,
                outcome=await _attempt(api.get_changelog(key, start_at, CHANGELOG_PAGE_SIZE)),
                start_at=start_at,
                is_append=is_append,
            )
        case FetchLinkedIssue(issue_key=key):
            return LinkedIssueFetched(issue_key=key, outcome=await _attempt(api.get_issue(key)))
        case FetchLinkTypes():
            return LinkTypesFetched(outcome=await _attempt(api.get_issue_link_types()))
        case SearchIssuesForLink(query=query, exclude_key=exclude_key):
            return IssueSearchResults(
                query=query,
                outcome=await _attempt(api.search_issues_for_picker(query, exclude_key)),
            )
        case CreateLink(
            issue_key=key,
            link_type_name=link_type_name,
            outward_key=outward_key,
            inward_key=inward_key,
        ):
            return LinkCreated(
                issue_key=key,
                outcome=await _attempt(
                    api.create_issue_link(link_type_name, outward_key, inward_key)
                ),
            )
        case DeleteLink(issue_key=key, link_id=link_id):
            return LinkDeleted(
                issue_key=key, outcome=await _attempt(api.delete_issue_link(link_id))
            )
        case CreateIssue(request=request):
            return IssueCreated(outcome=await _attempt(_create_and_fetch(api, request)))
        case FetchIssueTypes(project_key=project_key):
            return IssueTypesFetched(
                project_key=project_key,
                outcome=await _attempt(api.get_issue_types(project_key)),
            )
        case _:
            assert_never(operation)


class TaskDispatcher:
    """Spawns background operations that report through a ResultChannel.

    Every method returns as soon as the work is scheduled. Running tasks are
    referenced until they finish so the event loop cannot collect them early.
    There is no ordering between dispatches and no cancellation; consumers
    correlate results through the context carried on each message.
    """

    def __init__(self, channel: ResultChannel, *, max_concurrency: int | None = None) -> None:
        """Create a dispatcher.

        Args:
            channel: Destination for result messages
            max_concurrency: Cap on operations running at once; None or 0 is unbounded
        """
        self._channel = channel
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def channel(self) -> ResultChannel:
        return self._channel

    @property
    def in_flight(self) -> int:
        """Number of dispatched operations that have not posted yet."""
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every dispatched operation has posted its message."""
        while self._tasks:
            await asyncio.wait(list(self._tasks))

    def dispatch(self, api: JiraApi, operation: Operation) -> asyncio.Task[None]:
        """Launch an operation against a session.

        Args:
            api: Session the operation runs against
            operation: What to do

        Returns:
            The scheduled task; callers normally ignore it
        """
        name = type(operation).__name__
        logger.debug("Dispatching %s", name)
        return self._spawn(name, lambda: run_operation(api, operation))

    def connect(self, factory: JiraSessionFactory, operation: Connect) -> asyncio.Task[None]:
        """Open a session for the operation's profile and post ClientConnected."""
        profile = operation.profile
        logger.debug("Dispatching Connect for profile %s", profile.name)

        async def open_session() -> ApiMessage:
            try:
                outcome: Outcome[JiraApi] = Ok(await factory.open(profile))
            except (JiraApiError, SecretStoreError) as e:
                outcome = Err(str(e))
            except Exception as e:
                logger.exception("Unexpected failure opening a session")
                outcome = Err(_unexpected(e))
            return ClientConnected(profile_name=profile.name, outcome=outcome)

        return self._spawn("Connect", open_session)

    def _spawn(
        self, name: str, build: Callable[[], Coroutine[Any, Any, ApiMessage]]
    ) -> asyncio.Task[None]:
        task = asyncio.create_task(self._run(name, build), name=f"jira-dash:{name}")
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def _run(
        self, name: str, build: Callable[[], Coroutine[Any, Any, ApiMessage]]
    ) -> None:
        if self._semaphore is None:
            message = await build()
        else:
            async with self._semaphore:
                message = await build()
        if self._channel.send(message):
            return
        logger.debug("Dropped %s result: channel closed", name)
        match message:
            case ClientConnected(outcome=Ok(value=api)):
                # Nobody will ever own this session.
                await api.aclose()

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Background task %s crashed", task.get_name(), exc_info=error)

    # One method per operation, so call sites read like the action they perform.

    def fetch_issues(
        self, api: JiraApi, jql: str, page_size: int, *, is_background_refresh: bool = False
    ) -> asyncio.Task[None]:
        return self.dispatch(api, FetchIssues(jql, page_size, is_background_refresh))

    def load_more(self, api: JiraApi, jql: str, offset: int, page_size: int) -> asyncio.Task[None]:
        return self.dispatch(api, LoadMoreIssues(jql, offset, page_size))

    def fetch_filter_options(self, api: JiraApi) -> asyncio.Task[None]:
        return self.dispatch(api, FetchFilterOptions())

    def fetch_transitions(self, api: JiraApi, issue_key: str) -> asyncio.Task[None]:
        return self.dispatch(api, FetchTransitions(issue_key))

    def execute_transition(
        self,
        api: JiraApi,
        issue_key: str,
        transition_id: str,
        fields: FieldUpdates | None = None,
    ) -> asyncio.Task[None]:
        return self.dispatch(api, ExecuteTransition(issue_key, transition_id, fields))

    def fetch_assignees(self, api: JiraApi, project_key: str) -> asyncio.Task[None]:
        return self.dispatch(api, FetchAssignees(project_key))

    def change_assignee(
        self, api: JiraApi, issue_key: str, account_id: str | None
    ) -> asyncio.Task[None]:
        return self.dispatch(api, ChangeAssignee(issue_key, account_id))

    def fetch_priorities(self, api: JiraApi) -> asyncio.Task[None]:
        return self.dispatch(api, FetchPriorities())

    def change_priority(self, api: JiraApi, issue_key: str, priority_id: str) -> asyncio.Task[None]:
        return self.dispatch(api, ChangePriority(issue_key, priority_id))

    def fetch_comments(self, api: JiraApi, issue_key: str) -> asyncio.Task[None]:
        return self.dispatch(api, FetchComments(issue_key))

    def submit_comment(self, api: JiraApi, issue_key: str, body: str) -> asyncio.Task[None]:
        return self.dispatch(api, SubmitComment(issue_key, body))

    def update_issue(
        self, api: JiraApi, issue_key: str, request: IssueUpdateRequest
    ) -> asyncio.Task[None]:
        return self.dispatch(api, UpdateIssue(issue_key, request))

    def fetch_labels(self, api: JiraApi) -> asyncio.Task[None]:
        return self.dispatch(api, FetchLabels())

    def add_label(self, api: JiraApi, issue_key: str, label: str) -> asyncio.Task[None]:
        return self.dispatch(api, AddLabel(issue_key, label))

    def remove_label(self, api: JiraApi, issue_key: str, label: str) -> asyncio.Task[None]:
        return self.dispatch(api, RemoveLabel(issue_key, label))

    def fetch_components(self, api: JiraApi, project_key: str) -> asyncio.Task[None]:
        return self.dispatch(api, FetchComponents(project_key))

    def add_component(self, api: JiraApi, issue_key: str, component: str) -> asyncio.Task[None]:
        return self.dispatch(api, AddComponent(issue_key, component))

    def remove_component(self, api: JiraApi, issue_key: str, component: str) -> asyncio.Task[None]:
        return self.dispatch(api, RemoveComponent(issue_key, component))

    def fetch_changelog(
        self, api: JiraApi, issue_key: str, start_at: int = 0, *, is_append: bool = False
    ) -> asyncio.Task[None]:
        return self.dispatch(api, FetchChangelog(issue_key, start_at, is_append))

    def fetch_linked_issue(self, api: JiraApi, issue_key: str) -> asyncio.Task[None]:
        return self.dispatch(api, FetchLinkedIssue(issue_key))

    def fetch_link_types(self, api: JiraApi) -> asyncio.Task[None]:
        return self.dispatch(api, FetchLinkTypes())

    def search_issues_for_link(
        self, api: JiraApi, query: str, exclude_key: str | None = None
    ) -> asyncio.Task[None]:
        return self.dispatch(api, SearchIssuesForLink(query, exclude_key))

    def create_link(
        self,
        api: JiraApi,
        issue_key: str,
        link_type_name: str,
        outward_key: str,
        inward_key: str,
    ) -> asyncio.Task[None]:
        return self.dispatch(api, CreateLink(issue_key, link_type_name, outward_key, inward_key))

    def delete_link(self, api: JiraApi, issue_key: str, link_id: str) -> asyncio.Task[None]:
        return self.dispatch(api, DeleteLink(issue_key, link_id))

    def create_issue(self, api: JiraApi, request: CreateIssueRequest) -> asyncio.Task[None]:
        return self.dispatch(api, CreateIssue(request))

    def fetch_issue_types(self, api: JiraApi, project_key: str) -> asyncio.Task[None]:
        return self.dispatch(api, FetchIssueTypes(project_key))
