"""Tests for Jira payload models."""

import pytest
from pydantic import ValidationError

from jira_dash.api.types import (
    ChangelogPage,
    CreateIssueRequest,
    FieldUpdates,
    Issue,
    IssueLink,
    IssueUpdateRequest,
    SearchResult,
)

ISSUE_JSON = {
    "id": "10001",
    "key": "PROJ-1",
    "self": "https://acme.atlassian.net/rest/api/3/issue/10001",
    "fields": {
        "summary": "Fix login",
        "status": {
            "id": "3",
            "name": "In Progress",
            "statusCategory": {"id": 4, "key": "indeterminate", "name": "In Progress"},
        },
        "issuetype": {"id": "10002", "name": "Bug", "subtask": False},
        "priority": {"id": "2", "name": "High"},
        "assignee": {"accountId": "abc", "displayName": "Ada Lovelace"},
        "labels": ["backend"],
        "customfield_10016": 3.0,
        "unknownField": {"ignored": True},
        "description": {
            "type": "doc",
            "version": 1,
            "content": [{"type": "paragraph", "content": [{"type": "text", "text": "Steps"}]}],
        },
    },
}


class TestIssue:
    """Tests for Issue parsing and convenience accessors."""

    def test_parses_camel_case_payload(self) -> None:
        issue = Issue.model_validate(ISSUE_JSON)

        assert issue.key == "PROJ-1"
        assert issue.self_url.endswith("/issue/10001")
        assert issue.summary == "Fix login"
        assert issue.status == "In Progress"
        assert issue.issue_type == "Bug"
        assert issue.priority == "High"
        assert issue.assignee == "Ada Lovelace"
        assert issue.fields.labels == ("backend",)
        assert issue.fields.story_points == 3.0
        assert issue.description_text == "Steps"

    def test_project_key_falls_back_to_key_prefix(self) -> None:
        """Search results without a project field still know their project."""
        issue = Issue.model_validate(ISSUE_JSON)

        assert issue.project_key == "PROJ"

    def test_missing_optional_fields(self) -> None:
        payload = {
            "id": "1",
            "key": "X-1",
            "fields": {
                "summary": "s",
                "status": {"id": "1", "name": "To Do"},
                "issuetype": {"id": "1", "name": "Task"},
            },
        }

        issue = Issue.model_validate(payload)

        assert issue.priority is None
        assert issue.assignee is None
        assert issue.description_text == ""

    def test_missing_required_field_is_rejected(self) -> None:
        payload = {"id": "1", "key": "X-1", "fields": {"summary": "s"}}

        with pytest.raises(ValidationError):
            Issue.model_validate(payload)

    def test_issue_is_frozen(self) -> None:
        issue = Issue.model_validate(ISSUE_JSON)

        with pytest.raises(ValidationError):
            issue.key = "PROJ-2"  # type: ignore[misc]


class TestSearchResult:
    """Tests for pagination helpers."""

    def test_has_more_and_next_start(self) -> None:
        result = SearchResult.model_validate(
            {"startAt": 0, "maxResults": 1, "total": 3, "issues": [ISSUE_JSON]}
        )

        assert result.has_more() is True
        assert result.next_start() == 1

    def test_last_page(self) -> None:
        result = SearchResult.model_validate(
            {"startAt": 2, "maxResults": 1, "total": 3, "issues": [ISSUE_JSON]}
        )

        assert result.has_more() is False


def test_changelog_page_has_more_respects_is_last() -> None:
    page = ChangelogPage.model_validate(
        {"startAt": 0, "maxResults": 1, "total": 5, "isLast": True, "values": []}
    )

    assert page.has_more() is False


def test_issue_link_describes_direction() -> None:
    """The phrase depends on which side the linked issue is on."""
    link = IssueLink.model_validate(
        {
            "id": "5",
            "type": {"id": "1", "name": "Blocks", "inward": "is blocked by", "outward": "blocks"},
            "inwardIssue": {"id": "2", "key": "PROJ-2", "fields": {"summary": "Other"}},
        }
    )

    assert link.description == "is blocked by"
    assert link.linked_issue is not None
    assert link.linked_issue.key == "PROJ-2"
    assert link.linked_issue.summary == "Other"


class TestRequestPayloads:
    """Tests for request bodies sent to Jira."""

    def test_field_updates_payload(self) -> None:
        payload = FieldUpdates(resolution="Done", comment="Shipped").to_payload()

        assert payload["fields"] == {"resolution": {"name": "Done"}}
        comment_body = payload["update"]["comment"][0]["add"]["body"]
        assert comment_body["type"] == "doc"

    def test_issue_update_only_sends_changed_fields(self) -> None:
        payload = IssueUpdateRequest(summary="New title", story_points=5).to_payload()

        assert payload == {"fields": {"summary": "New title", "customfield_10016": 5}}

    def test_create_issue_payload(self) -> None:
        request = CreateIssueRequest(
            project_key="PROJ",
            issue_type_id="10002",
            summary="New bug",
            priority_id="2",
            labels=("ui",),
        )

        fields = request.to_payload()["fields"]

        assert fields["project"] == {"key": "PROJ"}
        assert fields["issuetype"] == {"id": "10002"}
        assert fields["summary"] == "New bug"
        assert fields["priority"] == {"id": "2"}
        assert fields["labels"] == ["ui"]
        assert "description" not in fields
        assert "assignee" not in fields
