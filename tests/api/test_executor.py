"""Tests for RequestExecutor using httpx.MockTransport and FakeTime."""

import asyncio
import base64
import json
from collections.abc import Callable

import httpx
import pytest

from jira_dash.api.credential import Credential
from jira_dash.api.errors import (
    ConnectionFailed,
    Forbidden,
    InvalidResponse,
    InvalidUrl,
    NetworkFailure,
    NotFound,
    PermissionDenied,
    RateLimited,
    ServerError,
    TransitionFailed,
    Unauthorized,
    UpdateFailed,
)
from jira_dash.api.executor import (
    MAX_ATTEMPTS,
    RequestExecutor,
    retry_delay_ms,
    validate_base_url,
)
from jira_dash.api.types import CurrentUser, Priority
from jira_dash.gateway.time.fake import FakeTime

BASE_URL = "https://acme.atlassian.net"
MYSELF = {"accountId": "abc", "displayName": "Ada Lovelace", "emailAddress": "ada@x.com"}

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingHandler:
    """Replays canned responses in order and records each request."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses[min(len(self.requests), len(self._responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


def make_executor(handler: Handler, time: FakeTime | None = None) -> RequestExecutor:
    return RequestExecutor(
        base_url=BASE_URL,
        credential=Credential.from_secret("user@x.com", "tok"),
        time=time or FakeTime(),
        transport=httpx.MockTransport(handler),
    )


def test_retry_delays_double_from_one_second() -> None:
    """Delay after attempt n is 1000 * 2^(n-1) ms."""
    assert [retry_delay_ms(n) for n in (1, 2, 3)] == [1000, 2000, 4000]


class TestValidateBaseUrl:
    def test_strips_trailing_slash(self) -> None:
        assert validate_base_url("https://acme.atlassian.net/") == BASE_URL

    @pytest.mark.parametrize("url", ["acme.atlassian.net", "ftp://acme", "https://", ""])
    def test_rejects_non_http_urls(self, url: str) -> None:
        with pytest.raises(InvalidUrl):
            validate_base_url(url)

    def test_executor_rejects_invalid_url(self) -> None:
        with pytest.raises(InvalidUrl):
            RequestExecutor(
                base_url="not a url",
                credential=Credential.from_secret("a@b.c", "t"),
                time=FakeTime(),
            )


class TestGet:
    """Tests for single-call behavior of get()."""

    @pytest.mark.asyncio
    async def test_attaches_auth_and_accept_headers(self) -> None:
        handler = RecordingHandler(httpx.Response(200, json=MYSELF))
        executor = make_executor(handler)

        await executor.get(executor.api_url("/myself"), CurrentUser)

        request = handler.requests[0]
        assert request.headers["Accept"] == "application/json"
        scheme, encoded = request.headers["Authorization"].split(" ", 1)
        assert scheme == "Basic"
        assert base64.b64decode(encoded).decode() == "user@x.com:tok"
        assert str(request.url) == f"{BASE_URL}/rest/api/3/myself"

    @pytest.mark.asyncio
    async def test_validates_body_into_shape(self) -> None:
        handler = RecordingHandler(
            httpx.Response(200, json=[{"id": "1", "name": "High"}, {"id": "2", "name": "Low"}])
        )
        executor = make_executor(handler)

        priorities = await executor.get(executor.api_url("/priority"), list[Priority])

        assert [p.name for p in priorities] == ["High", "Low"]

    @pytest.mark.asyncio
    async def test_shape_mismatch_is_invalid_response(self) -> None:
        handler = RecordingHandler(httpx.Response(200, json={"unexpected": True}))
        executor = make_executor(handler)

        with pytest.raises(InvalidResponse):
            await executor.get(executor.api_url("/myself"), CurrentUser)

        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 404, 500, 502])
    async def test_unstructured_error_body_uses_url_as_detail(self, status_code: int) -> None:
        """Without a structured body, the detail is the request URL."""
        handler = RecordingHandler(httpx.Response(status_code, text="<html>oops</html>"))
        executor = make_executor(handler)
        url = executor.api_url("/issue/PROJ-1")

        with pytest.raises((NotFound, ServerError)) as exc_info:
            await executor.get(url, CurrentUser)

        error = exc_info.value
        detail = error.resource if isinstance(error, NotFound) else error.detail
        assert detail == url

    @pytest.mark.asyncio
    async def test_structured_error_body_becomes_detail(self) -> None:
        handler = RecordingHandler(
            httpx.Response(404, json={"errorMessages": ["Issue does not exist"], "errors": {}})
        )
        executor = make_executor(handler)

        with pytest.raises(NotFound) as exc_info:
            await executor.get(executor.api_url("/issue/NOPE-1"), CurrentUser)

        assert exc_info.value.resource == "Issue does not exist"

    @pytest.mark.asyncio
    async def test_forbidden(self) -> None:
        handler = RecordingHandler(httpx.Response(403))
        executor = make_executor(handler)

        with pytest.raises(Forbidden):
            await executor.get(executor.api_url("/issue/PROJ-1"), CurrentUser)


class TestRetry:
    """Tests for the backoff loop."""

    @pytest.mark.asyncio
    async def test_unauthorized_is_never_retried(self) -> None:
        handler = RecordingHandler(httpx.Response(401))
        time = FakeTime()
        executor = make_executor(handler, time)

        with pytest.raises(Unauthorized):
            await executor.get(executor.api_url("/myself"), CurrentUser)

        assert len(handler.requests) == 1
        assert time.sleep_calls == []

    @pytest.mark.asyncio
    async def test_rate_limited_is_retried_twice_then_surfaces(self) -> None:
        handler = RecordingHandler(httpx.Response(429))
        time = FakeTime()
        executor = make_executor(handler, time)

        with pytest.raises(RateLimited):
            await executor.get(executor.api_url("/myself"), CurrentUser)

        assert len(handler.requests) == MAX_ATTEMPTS == 3
        assert time.sleep_calls == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_three_server_errors_exhaust_retries(self) -> None:
        """500 three times: three attempts, at least 3000ms of induced delay."""
        handler = RecordingHandler(httpx.Response(500))
        time = FakeTime()
        executor = make_executor(handler, time)

        with pytest.raises(ServerError) as exc_info:
            await executor.get(executor.api_url("/myself"), CurrentUser)

        assert len(handler.requests) == 3
        assert sum(time.sleep_calls) * 1000 >= 3000
        assert time.monotonic() >= 3.0
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self) -> None:
        handler = RecordingHandler(httpx.Response(503), httpx.Response(200, json=MYSELF))
        time = FakeTime()
        executor = make_executor(handler, time)

        user = await executor.get(executor.api_url("/myself"), CurrentUser)

        assert user.display_name == "Ada Lovelace"
        assert len(handler.requests) == 2
        assert time.sleep_calls == [1.0]

    @pytest.mark.asyncio
    async def test_network_failure_is_retried(self) -> None:
        handler = RecordingHandler(
            httpx.ConnectError("connection refused"),
            httpx.Response(200, json=MYSELF),
        )
        executor = make_executor(handler)

        user = await executor.get(executor.api_url("/myself"), CurrentUser)

        assert user.account_id == "abc"
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_timeout_becomes_network_failure(self) -> None:
        handler = RecordingHandler(httpx.ReadTimeout("timed out"))
        executor = make_executor(handler)

        with pytest.raises(NetworkFailure) as exc_info:
            await executor.get(executor.api_url("/myself"), CurrentUser)

        assert "timeout" in exc_info.value.detail
        assert len(handler.requests) == 3

    @pytest.mark.asyncio
    async def test_other_request_errors_are_network_failures(self) -> None:
        handler = RecordingHandler(httpx.TooManyRedirects("redirect loop"))
        executor = make_executor(handler)

        with pytest.raises(NetworkFailure) as exc_info:
            await executor.get(executor.api_url("/myself"), CurrentUser)

        assert "TooManyRedirects" in exc_info.value.detail
        assert len(handler.requests) == MAX_ATTEMPTS

    @pytest.mark.asyncio
    async def test_undecodable_body_is_invalid_response(self) -> None:
        handler = RecordingHandler(
            httpx.Response(
                200,
                headers={"Content-Encoding": "gzip"},
                stream=httpx.ByteStream(b"not gzip"),
            )
        )
        executor = make_executor(handler)

        with pytest.raises(InvalidResponse):
            await executor.get(executor.api_url("/myself"), CurrentUser)

        assert len(handler.requests) == 1


class TestAttemptDeadline:
    """The per-attempt timeout covers the whole exchange, not each read."""

    @pytest.mark.asyncio
    async def test_slow_response_is_cut_off(self) -> None:
        async def stall(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json=MYSELF)

        executor = RequestExecutor(
            base_url=BASE_URL,
            credential=Credential.from_secret("user@x.com", "tok"),
            time=FakeTime(),
            transport=httpx.MockTransport(stall),
            request_timeout=0.05,
        )

        with pytest.raises(NetworkFailure) as exc_info:
            await executor.send("POST", executor.api_url("/issue"), body={})

        assert exc_info.value.detail == f"timeout: {BASE_URL}/rest/api/3/issue"


class TestSend:
    """Tests for single-attempt writes."""

    @pytest.mark.asyncio
    async def test_sends_json_body(self) -> None:
        handler = RecordingHandler(httpx.Response(204))
        executor = make_executor(handler)

        result = await executor.send(
            "PUT", executor.api_url("/issue/PROJ-1"), body={"fields": {"summary": "x"}}
        )

        assert result is None
        request = handler.requests[0]
        assert request.method == "PUT"
        assert json.loads(request.content) == {"fields": {"summary": "x"}}

    @pytest.mark.asyncio
    async def test_writes_are_not_retried(self) -> None:
        handler = RecordingHandler(httpx.Response(500))
        time = FakeTime()
        executor = make_executor(handler, time)

        with pytest.raises(ServerError):
            await executor.send("POST", executor.api_url("/issue"), body={})

        assert len(handler.requests) == 1
        assert time.sleep_calls == []

    @pytest.mark.asyncio
    async def test_bad_request_is_update_failed(self) -> None:
        handler = RecordingHandler(
            httpx.Response(400, json={"errors": {"summary": "Field is required"}})
        )
        executor = make_executor(handler)

        with pytest.raises(UpdateFailed) as exc_info:
            await executor.send("PUT", executor.api_url("/issue/PROJ-1"), body={})

        assert exc_info.value.detail == "summary: Field is required"

    @pytest.mark.asyncio
    async def test_bad_transition_is_transition_failed(self) -> None:
        handler = RecordingHandler(httpx.Response(400, json={"errorMessages": ["Not allowed"]}))
        executor = make_executor(handler)

        with pytest.raises(TransitionFailed):
            await executor.send(
                "POST",
                executor.api_url("/issue/PROJ-1/transitions"),
                body={"transition": {"id": "31"}},
                transition=True,
            )

    @pytest.mark.asyncio
    async def test_forbidden_write_is_permission_denied(self) -> None:
        handler = RecordingHandler(httpx.Response(403))
        executor = make_executor(handler)

        with pytest.raises(PermissionDenied):
            await executor.send("PUT", executor.api_url("/issue/PROJ-1"), body={})


class TestValidateConnection:
    @pytest.mark.asyncio
    async def test_returns_current_user(self) -> None:
        handler = RecordingHandler(httpx.Response(200, json=MYSELF))
        executor = make_executor(handler)

        user = await executor.validate_connection()

        assert user.email_address == "ada@x.com"

    @pytest.mark.asyncio
    async def test_network_failure_becomes_connection_failed(self) -> None:
        handler = RecordingHandler(httpx.ConnectError("name resolution failed"))
        executor = make_executor(handler)

        with pytest.raises(ConnectionFailed) as exc_info:
            await executor.validate_connection()

        assert exc_info.value.detail.startswith(f"{BASE_URL}: ")

    @pytest.mark.asyncio
    async def test_unauthorized_passes_through(self) -> None:
        handler = RecordingHandler(httpx.Response(401))
        executor = make_executor(handler)

        with pytest.raises(Unauthorized):
            await executor.validate_connection()
