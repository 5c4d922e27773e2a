"""Tests for DashState and the reduce() function."""

from dataclasses import replace

from jira_dash.api.types import (
    ChangelogEntry,
    ChangelogPage,
    Comment,
    FilterOptions,
    IssueSuggestion,
    SearchResult,
)
from jira_dash.gateway.jira.fake import FakeJiraApi, make_issue, make_transition
from jira_dash.tasks.messages import (
    AssigneeChanged,
    ChangelogFetched,
    ClientConnected,
    CommentsFetched,
    CommentsResult,
    CommentSubmitted,
    Err,
    FilterOptionsFetched,
    IssueCreated,
    IssueSearchResults,
    IssuesFetched,
    LinkCreated,
    LinkedIssueFetched,
    LoadMoreFetched,
    Ok,
    PrioritiesFetched,
    TransitionExecuted,
    TransitionsFetched,
)
from jira_dash.tasks.operations import (
    FetchChangelog,
    FetchComments,
    FetchFilterOptions,
    FetchIssues,
    FetchLinkedIssue,
)
from jira_dash.tui.state import DashState, Notice, reduce

JQL = "project = PROJ"


def page(*keys: str, start_at: int = 0, total: int | None = None) -> SearchResult:
    issues = tuple(make_issue(key) for key in keys)
    return SearchResult(
        start_at=start_at,
        max_results=50,
        total=total if total is not None else start_at + len(issues),
        issues=issues,
    )


def loaded(*keys: str, total: int | None = None) -> DashState:
    result = page(*keys, total=total)
    return DashState(
        jql=JQL, page_size=2, api=FakeJiraApi(), issues=result.issues, total=result.total
    )


class TestConnect:
    def test_success_stores_session_and_searches(self) -> None:
        api = FakeJiraApi(base_url="https://acme.atlassian.net")
        state = DashState(jql=JQL, page_size=50, connecting=True)

        reduction = reduce(state, ClientConnected("work", Ok(api)))

        assert reduction.state.api is api
        assert reduction.state.profile_name == "work"
        assert not reduction.state.connecting
        assert reduction.state.loading
        assert reduction.notices == (Notice("Connected to https://acme.atlassian.net"),)
        assert reduction.followups == (FetchIssues(JQL, 50), FetchFilterOptions())

    def test_failure_reports_error(self) -> None:
        state = DashState(jql=JQL, page_size=50, connecting=True)

        reduction = reduce(state, ClientConnected("work", Err("Authentication failed")))

        assert reduction.state.api is None
        assert not reduction.state.connecting
        assert reduction.notices == (Notice("Authentication failed", "error"),)
        assert reduction.followups == ()


class TestSearch:
    def test_results_for_active_query_replace_issues(self) -> None:
        state = replace(loaded("OLD-1"), loading=True)

        reduction = reduce(state, IssuesFetched(JQL, Ok(page("PROJ-1", "PROJ-2", total=5))))

        assert [i.key for i in reduction.state.issues] == ["PROJ-1", "PROJ-2"]
        assert reduction.state.total == 5
        assert not reduction.state.loading
        assert reduction.state.has_more

    def test_results_for_superseded_query_are_ignored(self) -> None:
        state = loaded("PROJ-1").with_query("project = NEW")

        reduction = reduce(state, IssuesFetched(JQL, Ok(page("PROJ-9"))))

        assert reduction.state is state
        assert reduction.notices == ()

    def test_failed_search_is_an_error(self) -> None:
        state = replace(loaded(), loading=True)

        reduction = reduce(state, IssuesFetched(JQL, Err("JIRA server error: boom")))

        assert not reduction.state.loading
        assert reduction.notices == (Notice("JIRA server error: boom", "error"),)

    def test_failed_background_refresh_is_a_warning(self) -> None:
        state = loaded("PROJ-1")

        reduction = reduce(state, IssuesFetched(JQL, Err("timeout"), is_background_refresh=True))

        assert reduction.state.issues == state.issues
        assert reduction.notices == (Notice("Refresh failed: timeout", "warning"),)


class TestLoadMore:
    def test_begin_load_more_records_offset(self) -> None:
        state = loaded("PROJ-1", "PROJ-2", total=3)

        updated = state.begin_load_more()

        assert updated is not None
        assert updated.pending_offset == 2

    def test_begin_load_more_refuses_when_done_or_busy(self) -> None:
        complete = loaded("PROJ-1", "PROJ-2")
        busy = replace(loaded("PROJ-1", total=3), pending_offset=1)

        assert complete.begin_load_more() is None
        assert busy.begin_load_more() is None

    def test_page_is_appended(self) -> None:
        state = loaded("PROJ-1", "PROJ-2", total=3).begin_load_more()
        assert state is not None

        reduction = reduce(state, LoadMoreFetched(JQL, 2, Ok(page("PROJ-3", start_at=2))))

        assert [i.key for i in reduction.state.issues] == ["PROJ-1", "PROJ-2", "PROJ-3"]
        assert reduction.state.pending_offset is None
        assert not reduction.state.has_more

    def test_page_for_unexpected_offset_is_ignored(self) -> None:
        state = loaded("PROJ-1", "PROJ-2", total=5).begin_load_more()
        assert state is not None

        reduction = reduce(state, LoadMoreFetched(JQL, 4, Ok(page("PROJ-5", start_at=4))))

        assert reduction.state is state

    def test_page_for_old_query_is_ignored(self) -> None:
        state = loaded("PROJ-1", total=3).begin_load_more()
        assert state is not None

        reduction = reduce(state, LoadMoreFetched("other", 1, Ok(page("X-2", start_at=1))))

        assert reduction.state is state


class TestIssueWrites:
    def test_transition_updates_list_and_clears_transitions(self) -> None:
        state = replace(
            loaded("PROJ-1", "PROJ-2"),
            transitions=(make_transition("31", "Done", "Done"),),
            transitions_for="PROJ-1",
        )
        moved = make_issue("PROJ-1", status="Done")

        reduction = reduce(state, TransitionExecuted("PROJ-1", Ok(moved)))

        assert reduction.state.issues[0].status == "Done"
        assert reduction.state.issues[1].key == "PROJ-2"
        assert reduction.state.transitions == ()
        assert reduction.notices == (Notice("PROJ-1 moved to Done"),)

    def test_write_updates_open_detail(self) -> None:
        state = loaded("PROJ-1").open_detail(make_issue("PROJ-1"))
        assigned = make_issue("PROJ-1", assignee="Grace Hopper")

        reduction = reduce(state, AssigneeChanged("PROJ-1", Ok(assigned)))

        assert reduction.state.detail is not None
        assert reduction.state.detail.assignee == "Grace Hopper"
        assert reduction.notices == (Notice("PROJ-1 assignee updated"),)

    def test_failed_write_keeps_state(self) -> None:
        state = loaded("PROJ-1")

        reduction = reduce(state, TransitionExecuted("PROJ-1", Err("Failed to transition issue")))

        assert reduction.state is state
        assert reduction.notices == (Notice("Failed to transition issue", "error"),)

    def test_created_issue_triggers_search(self) -> None:
        state = loaded("PROJ-1")

        reduction = reduce(state, IssueCreated(Ok(make_issue("PROJ-2"))))

        assert reduction.state.loading
        assert reduction.followups == (FetchIssues(JQL, 2),)


class TestDetail:
    def test_comments_for_open_issue_are_stored(self) -> None:
        state = loaded("PROJ-1").open_detail(make_issue("PROJ-1"))

        reduction = reduce(state, CommentsFetched("PROJ-1", Ok(CommentsResult((), 7))))

        assert reduction.state.comments_total == 7

    def test_comments_for_other_issue_are_ignored(self) -> None:
        state = loaded("PROJ-1", "PROJ-2").open_detail(make_issue("PROJ-2"))

        reduction = reduce(state, CommentsFetched("PROJ-1", Ok(CommentsResult((), 7))))

        assert reduction.state is state

    def test_changelog_append(self) -> None:
        first = ChangelogEntry(id="1")
        second = ChangelogEntry(id="2")
        state = replace(
            loaded("PROJ-1").open_detail(make_issue("PROJ-1")),
            changelog=(first,),
            changelog_has_more=True,
        ).begin_older_history()
        assert state is not None
        assert state.pending_changelog_offset == 1
        older = ChangelogPage(start_at=1, max_results=100, total=2, is_last=True, values=(second,))

        reduction = reduce(
            state, ChangelogFetched("PROJ-1", Ok(older), start_at=1, is_append=True)
        )

        assert reduction.state.changelog == (first, second)
        assert not reduction.state.changelog_has_more
        assert reduction.state.pending_changelog_offset is None

    def test_repeated_older_history_page_is_applied_once(self) -> None:
        first = ChangelogEntry(id="1")
        second = ChangelogEntry(id="2")
        state = replace(
            loaded("PROJ-1").open_detail(make_issue("PROJ-1")),
            changelog=(first,),
            changelog_has_more=True,
            pending_changelog_offset=1,
        )
        older = ChangelogPage(start_at=1, max_results=100, total=2, is_last=True, values=(second,))
        message = ChangelogFetched("PROJ-1", Ok(older), start_at=1, is_append=True)

        once = reduce(state, message).state
        twice = reduce(once, message).state

        assert [entry.id for entry in twice.changelog] == ["1", "2"]

    def test_begin_older_history_refuses_while_a_page_is_pending(self) -> None:
        state = replace(
            loaded("PROJ-1").open_detail(make_issue("PROJ-1")),
            changelog=(ChangelogEntry(id="1"),),
            changelog_has_more=True,
        )

        pending = state.begin_older_history()

        assert pending is not None
        assert pending.begin_older_history() is None
        assert state.close_detail().begin_older_history() is None

    def test_failed_older_history_clears_pending(self) -> None:
        state = replace(
            loaded("PROJ-1").open_detail(make_issue("PROJ-1")),
            changelog_has_more=True,
            pending_changelog_offset=0,
        )

        reduction = reduce(
            state, ChangelogFetched("PROJ-1", Err("Not found"), start_at=0, is_append=True)
        )

        assert reduction.state.pending_changelog_offset is None
        assert reduction.notices == (Notice("Not found", "error"),)

    def test_submitted_comment_reloads_comments(self) -> None:
        state = loaded("PROJ-1").open_detail(make_issue("PROJ-1"))
        comment = Comment(id="1")

        reduction = reduce(state, CommentSubmitted("PROJ-1", Ok(comment)))

        assert reduction.followups == (FetchComments("PROJ-1"),)
        assert reduction.notices == (Notice("Comment added to PROJ-1"),)

    def test_full_issue_refreshes_open_detail(self) -> None:
        state = loaded("PROJ-1").open_detail(make_issue("PROJ-1"))
        full = make_issue("PROJ-1", "Full summary")

        reduction = reduce(state, LinkedIssueFetched("PROJ-1", Ok(full)))

        assert reduction.state.detail == full
        assert reduction.state.issues[0] == full
        assert reduction.followups == ()

    def test_late_issue_does_not_reopen_closed_detail(self) -> None:
        state = loaded("PROJ-1").open_detail(make_issue("PROJ-1")).close_detail()

        reduction = reduce(state, LinkedIssueFetched("PROJ-1", Ok(make_issue("PROJ-1"))))

        assert reduction.state.detail is None

    def test_followed_link_switches_detail(self) -> None:
        state = loaded("PROJ-1").open_detail(make_issue("PROJ-1")).follow_link("PROJ-7")
        linked = make_issue("PROJ-7")

        reduction = reduce(state, LinkedIssueFetched("PROJ-7", Ok(linked)))

        assert reduction.state.detail == linked
        assert reduction.state.following_link is None
        assert reduction.followups == (FetchComments("PROJ-7"), FetchChangelog("PROJ-7"))

    def test_link_change_reloads_issue(self) -> None:
        state = loaded("PROJ-1").open_detail(make_issue("PROJ-1"))

        reduction = reduce(state, LinkCreated("PROJ-1", Ok(None)))

        assert reduction.followups == (FetchLinkedIssue("PROJ-1"),)


class TestLookups:
    def test_transitions_remember_issue(self) -> None:
        transitions = [make_transition("21", "Start", "In Progress")]

        reduction = reduce(loaded("PROJ-1"), TransitionsFetched("PROJ-1", Ok(transitions)))

        assert reduction.state.transitions == tuple(transitions)
        assert reduction.state.transitions_for == "PROJ-1"

    def test_lookup_failure_is_an_error_notice(self) -> None:
        state = loaded("PROJ-1")

        reduction = reduce(state, PrioritiesFetched(Err("Rate limited")))

        assert reduction.state is state
        assert reduction.notices == (Notice("Rate limited", "error"),)

    def test_filter_options_are_stored(self) -> None:
        options = FilterOptions(labels=("backend",))

        reduction = reduce(loaded("PROJ-1"), FilterOptionsFetched(Ok(options)))

        assert reduction.state.filter_options == options


class TestLinkSearch:
    def test_suggestions_for_current_query_are_stored(self) -> None:
        state = loaded("PROJ-1").search_links("login")
        suggestion = IssueSuggestion(key="PROJ-9", summary_text="Login page")

        reduction = reduce(state, IssueSearchResults("login", Ok([suggestion])))

        assert reduction.state.link_suggestions == (suggestion,)

    def test_suggestions_for_superseded_query_are_ignored(self) -> None:
        state = loaded("PROJ-1").search_links("logi").search_links("login")
        stale = IssueSearchResults("logi", Ok([IssueSuggestion(key="PROJ-3")]))

        reduction = reduce(state, stale)

        assert reduction.state is state

    def test_ending_the_search_drops_late_results(self) -> None:
        state = loaded("PROJ-1").search_links("login").end_link_search()

        reduction = reduce(state, IssueSearchResults("login", Ok([IssueSuggestion(key="X-1")])))

        assert reduction.state.link_suggestions == ()
