"""Classified errors for Jira API calls.

Every failure the request executor can produce maps to exactly one subclass
of JiraApiError. Classification is separate from retry eligibility: each
class declares `retryable`, and the executor's backoff loop only consults
that flag.
"""

import json
from typing import ClassVar

import httpx


class JiraApiError(Exception):
    """Base class for all classified Jira API failures."""

    retryable: ClassVar[bool] = False


class Unauthorized(JiraApiError):
    """Authentication failed (HTTP 401)."""

    def __init__(self) -> None:
        super().__init__("Authentication failed: check your email and API token")


class Forbidden(JiraApiError):
    """The account lacks access to the resource (HTTP 403 on reads)."""

    def __init__(self) -> None:
        super().__init__("Permission denied: you don't have access to this resource")


class NotFound(JiraApiError):
    """Resource not found (HTTP 404)."""

    def __init__(self, resource: str) -> None:
        super().__init__(f"Resource not found: {resource}")
        self.resource = resource


class RateLimited(JiraApiError):
    """Too many requests (HTTP 429)."""

    retryable = True

    def __init__(self) -> None:
        super().__init__("Rate limited: please wait before retrying")


class ServerError(JiraApiError):
    """Server-side failure (HTTP 5xx) or an unexpected status code."""

    retryable = True

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        if status_code is None:
            message = f"JIRA server error: {detail}"
        elif 500 <= status_code <= 599:
            message = f"JIRA server error: HTTP {status_code}: {detail}"
        else:
            message = f"JIRA server error: Unexpected HTTP {status_code}: {detail}"
        super().__init__(message)
        self.detail = detail
        self.status_code = status_code


class NetworkFailure(JiraApiError):
    """Transport failure: connection refused, DNS failure, timeout."""

    retryable = True

    def __init__(self, detail: str) -> None:
        super().__init__(f"Network error: {detail}")
        self.detail = detail


class InvalidResponse(JiraApiError):
    """A 2xx response whose body did not match the expected shape."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid API response: {detail}")
        self.detail = detail


class ConnectionFailed(JiraApiError):
    """Connection validation at session start failed for network reasons."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Connection validation failed: {detail}")
        self.detail = detail


class Conflict(JiraApiError):
    """The issue was modified concurrently (HTTP 409)."""

    def __init__(self) -> None:
        super().__init__(
            "Conflict: issue was modified by another user. Please refresh and try again"
        )


class UpdateFailed(JiraApiError):
    """An issue update was rejected (HTTP 400 on writes)."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Failed to update issue: {detail}")
        self.detail = detail


class TransitionFailed(JiraApiError):
    """A workflow transition was rejected (HTTP 400 on a transition)."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Failed to transition issue: {detail}")
        self.detail = detail


class PermissionDenied(JiraApiError):
    """The account may read the issue but not modify it (HTTP 403 on writes)."""

    def __init__(self) -> None:
        super().__init__("You don't have permission to modify this issue")


class InvalidUrl(JiraApiError):
    """The configured base URL is not an absolute http(s) URL."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid URL: {detail}")
        self.detail = detail


def from_status(status_code: int, context: str) -> JiraApiError:
    """Map a non-2xx HTTP status to its classified error.

    The variant depends only on the status code; `context` only fills in
    the detail of the variants that carry one.

    Args:
        status_code: HTTP status of the failed response
        context: Structured error message from the body, or the request URL

    Returns:
        The classified error for this status
    """
    if status_code == 401:
        return Unauthorized()
    if status_code == 403:
        return Forbidden()
    if status_code == 404:
        return NotFound(context)
    if status_code == 409:
        return Conflict()
    if status_code == 429:
        return RateLimited()
    return ServerError(context, status_code=status_code)


def extract_error_message(response: httpx.Response) -> str | None:
    """Pull a human-readable message out of a Jira error body.

    Jira reports failures as {"errorMessages": [...], "errors": {field: msg}}.
    Both parts are joined with "; ". Returns None when the body is not JSON
    or carries no messages.
    """
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(body, dict):
        return None

    messages: list[str] = []
    error_messages = body.get("errorMessages")
    if isinstance(error_messages, list):
        messages.extend(str(m) for m in error_messages if m)
    errors = body.get("errors")
    if isinstance(errors, dict):
        messages.extend(f"{field}: {msg}" for field, msg in errors.items() if msg)

    if not messages:
        return None
    return "; ".join(messages)


def user_message(error: JiraApiError) -> str:
    """Friendly copy for showing an error to a user.

    Args:
        error: The classified error

    Returns:
        A short sentence without technical detail
    """
    match error:
        case Unauthorized():
            return "Authentication failed. Please check your email and API token."
        case Forbidden():
            return "Access denied. You don't have permission to access this resource."
        case NotFound(resource=resource):
            return f"'{resource}' was not found."
        case RateLimited():
            return "Too many requests. Please wait a moment and try again."
        case ServerError():
            return "JIRA server error. Please try again later."
        case NetworkFailure():
            return "Connection failed. Please check your internet connection."
        case InvalidUrl():
            return "Invalid JIRA URL in configuration."
        case InvalidResponse():
            return "Unexpected response from JIRA. Please try again."
        case ConnectionFailed():
            return "Could not connect to JIRA. Please check your URL and network."
        case UpdateFailed(detail=detail):
            return f"Failed to update issue: {detail}"
        case TransitionFailed(detail=detail):
            return f"Failed to change issue status: {detail}"
        case Conflict():
            return "This issue was modified by someone else. Please refresh and try again."
        case PermissionDenied():
            return "You don't have permission to modify this issue."
    return str(error)


def is_critical(error: JiraApiError) -> bool:
    """Whether the error ends the session rather than one operation."""
    return isinstance(error, (Unauthorized, Forbidden))
