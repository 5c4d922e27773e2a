"""Authenticated, retrying request executor for the Jira REST API.

Reads go through RequestExecutor.get(), which classifies every failure into
a JiraApiError subclass and retries the retryable ones with exponential
backoff. Writes go through send(), which makes a single attempt.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, TypeVar
from urllib.parse import urlsplit

import httpx
from pydantic import TypeAdapter, ValidationError

from jira_dash.api.credential import Credential
from jira_dash.api.errors import (
    ConnectionFailed,
    Forbidden,
    InvalidResponse,
    InvalidUrl,
    JiraApiError,
    NetworkFailure,
    PermissionDenied,
    ServerError,
    TransitionFailed,
    UpdateFailed,
    extract_error_message,
    from_status,
)
from jira_dash.api.types import CurrentUser
from jira_dash.gateway.time.abc import Time

logger = logging.getLogger(__name__)

T = TypeVar("T")

REQUEST_TIMEOUT_SECONDS = 30.0
MAX_ATTEMPTS = 3
BASE_RETRY_DELAY_MS = 1000
API_PREFIX = "/rest/api/3"


@dataclass(frozen=True)
class RequestAttempt:
    """Bookkeeping for one pass through the retry loop.

    Attributes:
        attempt_number: 1-indexed attempt counter
        computed_delay_ms: Delay to wait before the next attempt
    """

    attempt_number: int
    computed_delay_ms: int


def retry_delay_ms(attempt_number: int) -> int:
    """Backoff delay after failed attempt n: 1000ms * 2^(n-1)."""
    return BASE_RETRY_DELAY_MS * 2 ** (attempt_number - 1)


@lru_cache(maxsize=None)
def _adapter(shape: Any) -> TypeAdapter[Any]:
    return TypeAdapter(shape)


def validate_base_url(base_url: str) -> str:
    """Normalize a Jira base URL, rejecting anything but absolute http(s).

    Args:
        base_url: URL from the profile, e.g. "https://acme.atlassian.net/"

    Returns:
        The URL without a trailing slash

    Raises:
        InvalidUrl: If the scheme is not http(s) or the host is missing
    """
    stripped = base_url.strip()
    parts = urlsplit(stripped)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidUrl(base_url)
    return stripped.rstrip("/")


class RequestExecutor:
    """Executes authenticated calls against one Jira site.

    Holds no mutable per-call state, so one instance is shared by every
    concurrent task of a session. The underlying httpx.AsyncClient pools
    connections and is safe for concurrent use on one event loop.
    """

    def __init__(
        self,
        *,
        base_url: str,
        credential: Credential,
        time: Time,
        transport: httpx.AsyncBaseTransport | None = None,
        request_timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        """Create an executor bound to a base URL and credential.

        Args:
            base_url: Jira site URL (validated, trailing slash removed)
            credential: Credential whose header is attached to every call
            time: Time gateway used for backoff sleeps
            transport: Optional httpx transport, used by tests to stub the network
            request_timeout: Deadline in seconds for one attempt, body included

        Raises:
            InvalidUrl: If base_url is not an absolute http(s) URL
        """
        self._base_url = validate_base_url(base_url)
        self._time = time
        self._request_timeout = request_timeout
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": credential.header_value(),
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(request_timeout),
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def api_url(self, path: str) -> str:
        """Build a full REST v3 URL from a path like "/issue/PROJ-1"."""
        return f"{self._base_url}{API_PREFIX}{path}"

    async def get(self, url: str, shape: type[T] | Any) -> T:
        """GET a fully formed URL and validate the JSON body into shape.

        Retries RateLimited, ServerError and NetworkFailure up to
        MAX_ATTEMPTS total, sleeping retry_delay_ms(n) after attempt n.

        Args:
            url: Complete URL including query parameters
            shape: Pydantic model or type expression, e.g. list[Priority]

        Returns:
            The validated payload

        Raises:
            JiraApiError: The classified error of the final attempt
        """
        last_error: JiraApiError | None = None
        for attempt_number in range(1, MAX_ATTEMPTS + 1):
            try:
                return await self._get_once(url, shape)
            except JiraApiError as e:
                if not e.retryable:
                    raise
                last_error = e
                if attempt_number == MAX_ATTEMPTS:
                    logger.warning(
                        "Failed after %d attempts: GET %s: %s", MAX_ATTEMPTS, url, e
                    )
                    raise
                attempt = RequestAttempt(
                    attempt_number=attempt_number,
                    computed_delay_ms=retry_delay_ms(attempt_number),
                )
                logger.warning(
                    "Retry %d after %dms: GET %s: %s",
                    attempt.attempt_number,
                    attempt.computed_delay_ms,
                    url,
                    e,
                )
                await self._time.sleep(attempt.computed_delay_ms / 1000)

        if last_error is not None:
            raise last_error
        raise ServerError(f"max retries exceeded: {url}")

    async def send(
        self,
        method: str,
        url: str,
        *,
        body: dict[str, Any] | None = None,
        shape: type[T] | Any = None,
        transition: bool = False,
    ) -> T | None:
        """Perform a single-attempt write (POST, PUT or DELETE).

        Args:
            method: HTTP method
            url: Complete URL
            body: JSON body, if any
            shape: Shape to validate the response into, or None to ignore it
            transition: Classify HTTP 400 as TransitionFailed instead of UpdateFailed

        Returns:
            The validated payload, or None when shape is None

        Raises:
            JiraApiError: The classified failure
        """
        response = await self._request(method, url, body)
        if not response.is_success:
            raise _classify_write_failure(response, url, transition=transition)
        if shape is None:
            return None
        return _parse(response, shape)

    async def validate_connection(self) -> CurrentUser:
        """Fetch the current identity to prove URL and credentials work.

        Returns:
            The authenticated user

        Raises:
            ConnectionFailed: If the site could not be reached
            JiraApiError: Any other classified error, unchanged
        """
        try:
            return await self.get(self.api_url("/myself"), CurrentUser)
        except NetworkFailure as e:
            raise ConnectionFailed(f"{self._base_url}: {e.detail}") from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_once(self, url: str, shape: Any) -> Any:
        response = await self._request("GET", url, None)
        if not response.is_success:
            context = extract_error_message(response) or url
            raise from_status(response.status_code, context)
        return _parse(response, shape)

    async def _request(
        self, method: str, url: str, body: dict[str, Any] | None
    ) -> httpx.Response:
        logger.debug("%s %s", method, url)
        # httpx timeouts apply per phase and reset on every chunk read; the
        # outer deadline bounds the whole attempt.
        try:
            async with asyncio.timeout(self._request_timeout):
                return await self._client.request(method, url, json=body)
        except (httpx.TimeoutException, TimeoutError) as e:
            raise NetworkFailure(f"timeout: {url}") from e
        except httpx.TransportError as e:
            raise NetworkFailure(f"{e.__class__.__name__}: {e}") from e
        except httpx.DecodingError as e:
            raise InvalidResponse(f"{url}: {e}") from e
        except httpx.RequestError as e:
            raise NetworkFailure(f"{e.__class__.__name__}: {e}") from e
        except httpx.InvalidURL as e:
            raise InvalidUrl(url) from e


def _parse(response: httpx.Response, shape: Any) -> Any:
    try:
        return _adapter(shape).validate_json(response.content)
    except ValidationError as e:
        detail = f"{response.request.url}: {e.error_count()} validation error(s)"
        raise InvalidResponse(detail) from e


def _classify_write_failure(
    response: httpx.Response, url: str, *, transition: bool
) -> JiraApiError:
    context = extract_error_message(response) or url
    if response.status_code == 400:
        if transition:
            return TransitionFailed(context)
        return UpdateFailed(context)
    error = from_status(response.status_code, context)
    if isinstance(error, Forbidden):
        return PermissionDenied()
    return error
