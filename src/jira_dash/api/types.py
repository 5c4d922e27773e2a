"""Request and response shapes for the Jira REST API v3.

Response models are frozen pydantic models with camelCase aliases so the
executor can validate raw JSON straight into them. Unknown fields are ignored;
missing required fields surface as validation errors, which the executor
classifies as InvalidResponse.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from jira_dash.api.adf import adf_to_text, text_to_adf


class JiraModel(BaseModel):
    """Base for all Jira payloads."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class AvatarUrls(JiraModel):
    small: str | None = Field(default=None, alias="24x24")
    medium: str | None = Field(default=None, alias="32x32")
    large: str | None = Field(default=None, alias="48x48")


class CurrentUser(JiraModel):
    """The authenticated account, returned by /myself."""

    account_id: str
    display_name: str
    email_address: str = ""
    active: bool = True
    time_zone: str | None = None
    avatar_urls: AvatarUrls | None = None


class User(JiraModel):
    account_id: str
    display_name: str
    email_address: str | None = None
    active: bool = True
    avatar_urls: AvatarUrls | None = None


class StatusCategory(JiraModel):
    id: int
    key: str
    name: str
    color_name: str | None = None


class Status(JiraModel):
    id: str
    name: str
    status_category: StatusCategory | None = None


class IssueType(JiraModel):
    id: str
    name: str
    subtask: bool = False
    description: str | None = None
    icon_url: str | None = None


class Priority(JiraModel):
    id: str
    name: str
    icon_url: str | None = None


class Project(JiraModel):
    id: str
    key: str
    name: str
    avatar_urls: AvatarUrls | None = None


class Component(JiraModel):
    id: str
    name: str
    description: str | None = None


class LinkedIssueRef(JiraModel):
    """The far side of an issue link, with a summary-only field set."""

    id: str
    key: str
    fields: dict[str, Any] = Field(default_factory=dict)

    @property
    def summary(self) -> str:
        value = self.fields.get("summary")
        return value if isinstance(value, str) else ""


class IssueLinkType(JiraModel):
    id: str
    name: str
    inward: str
    outward: str


class IssueLink(JiraModel):
    """A link from the current issue; exactly one of inward/outward is set."""

    id: str
    type: IssueLinkType
    inward_issue: LinkedIssueRef | None = None
    outward_issue: LinkedIssueRef | None = None

    @property
    def linked_issue(self) -> LinkedIssueRef | None:
        return self.outward_issue or self.inward_issue

    @property
    def description(self) -> str:
        """Relationship phrase as seen from the current issue."""
        if self.outward_issue is not None:
            return self.type.outward
        return self.type.inward


class IssueFields(JiraModel):
    summary: str
    status: Status
    issuetype: IssueType
    description: Any = None
    priority: Priority | None = None
    assignee: User | None = None
    reporter: User | None = None
    project: Project | None = None
    labels: tuple[str, ...] = ()
    components: tuple[Component, ...] = ()
    issuelinks: tuple[IssueLink, ...] = ()
    created: str | None = None
    updated: str | None = None
    duedate: str | None = None
    story_points: float | None = Field(default=None, alias="customfield_10016")


class Issue(JiraModel):
    id: str
    key: str
    self_url: str = Field(default="", alias="self")
    fields: IssueFields

    @property
    def summary(self) -> str:
        return self.fields.summary

    @property
    def status(self) -> str:
        return self.fields.status.name

    @property
    def issue_type(self) -> str:
        return self.fields.issuetype.name

    @property
    def priority(self) -> str | None:
        return self.fields.priority.name if self.fields.priority else None

    @property
    def assignee(self) -> str | None:
        return self.fields.assignee.display_name if self.fields.assignee else None

    @property
    def reporter(self) -> str | None:
        return self.fields.reporter.display_name if self.fields.reporter else None

    @property
    def project_key(self) -> str | None:
        if self.fields.project is not None:
            return self.fields.project.key
        prefix, sep, _ = self.key.rpartition("-")
        return prefix if sep else None

    @property
    def description_text(self) -> str:
        return adf_to_text(self.fields.description)


class SearchResult(JiraModel):
    """One page of a JQL search."""

    start_at: int = 0
    max_results: int = 0
    total: int = 0
    issues: tuple[Issue, ...] = ()

    def has_more(self) -> bool:
        """Whether another page exists after this one."""
        return self.start_at + len(self.issues) < self.total

    def next_start(self) -> int:
        """Offset of the page after this one."""
        return self.start_at + len(self.issues)


class Transition(JiraModel):
    id: str
    name: str
    to: Status | None = None
    has_screen: bool = False


class TransitionList(JiraModel):
    transitions: tuple[Transition, ...] = ()


class Comment(JiraModel):
    id: str
    author: User | None = None
    body: Any = None
    created: str | None = None
    updated: str | None = None

    @property
    def body_text(self) -> str:
        return adf_to_text(self.body)


class CommentPage(JiraModel):
    start_at: int = 0
    max_results: int = 0
    total: int = 0
    comments: tuple[Comment, ...] = ()


class ChangeItem(JiraModel):
    field: str
    from_string: str | None = None
    to_string: str | None = None


class ChangelogEntry(JiraModel):
    id: str
    author: User | None = None
    created: str | None = None
    items: tuple[ChangeItem, ...] = ()


class ChangelogPage(JiraModel):
    start_at: int = 0
    max_results: int = 0
    total: int = 0
    is_last: bool = True
    values: tuple[ChangelogEntry, ...] = ()

    def has_more(self) -> bool:
        return not self.is_last and self.start_at + len(self.values) < self.total


class IssueLinkTypeList(JiraModel):
    issue_link_types: tuple[IssueLinkType, ...] = ()


class IssueSuggestion(JiraModel):
    """An entry from the issue picker, used when linking issues."""

    key: str
    summary_text: str = ""


class PickerSection(JiraModel):
    id: str = ""
    issues: tuple[IssueSuggestion, ...] = ()


class PickerResult(JiraModel):
    sections: tuple[PickerSection, ...] = ()


class LabelPage(JiraModel):
    values: tuple[str, ...] = ()
    is_last: bool = True


class ProjectDetails(JiraModel):
    id: str
    key: str
    name: str
    issue_types: tuple[IssueType, ...] = ()


class CreatedIssue(JiraModel):
    id: str
    key: str
    self_url: str = Field(default="", alias="self")


class FilterOptions(JiraModel):
    """Values offered by the filter editor."""

    projects: tuple[Project, ...] = ()
    statuses: tuple[Status, ...] = ()
    priorities: tuple[Priority, ...] = ()
    labels: tuple[str, ...] = ()


class FieldUpdates(JiraModel):
    """Fields a transition screen may require alongside the transition."""

    resolution: str | None = None
    comment: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.resolution is not None:
            payload["fields"] = {"resolution": {"name": self.resolution}}
        if self.comment:
            payload["update"] = {"comment": [{"add": {"body": text_to_adf(self.comment)}}]}
        return payload


class IssueUpdateRequest(JiraModel):
    """Editable issue fields; None means unchanged."""

    summary: str | None = None
    description: str | None = None
    labels: tuple[str, ...] | None = None
    duedate: str | None = None
    story_points: float | None = None

    def to_payload(self) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        if self.summary is not None:
            fields["summary"] = self.summary
        if self.description is not None:
            fields["description"] = text_to_adf(self.description)
        if self.labels is not None:
            fields["labels"] = list(self.labels)
        if self.duedate is not None:
            fields["duedate"] = self.duedate
        if self.story_points is not None:
            fields["customfield_10016"] = self.story_points
        return {"fields": fields}


class CreateIssueRequest(JiraModel):
    project_key: str
    issue_type_id: str
    summary: str
    description: str | None = None
    priority_id: str | None = None
    assignee_account_id: str | None = None
    labels: tuple[str, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "project": {"key": self.project_key},
            "issuetype": {"id": self.issue_type_id},
            "summary": self.summary,
        }
        if self.description:
            fields["description"] = text_to_adf(self.description)
        if self.priority_id is not None:
            fields["priority"] = {"id": self.priority_id}
        if self.assignee_account_id is not None:
            fields["assignee"] = {"accountId": self.assignee_account_id}
        if self.labels:
            fields["labels"] = list(self.labels)
        return {"fields": fields}
