"""Tests for the Jamespot session client, driven through ``httpx.MockTransport``."""

import json
from typing import (
    Any,
    Dict,
    List,
)

import httpx
import pytest

from jamespot_agent.client.backend import (
    API_PATH,
    BackendError,
    JamespotClient,
    LoginError,
    split_operation,
)

BASE = "https://acme.jamespot.test"


class Recorder:
    """Mock transport handler that records requests and answers from a queue."""

    def __init__(self, responses: List[httpx.Response]) -> None:
        self.responses = responses
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)

    def body(self, index: int) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


def make_client(recorder: Recorder) -> JamespotClient:
    return JamespotClient(BASE + "/", transport=httpx.MockTransport(recorder))


def test_split_operation() -> None:
    assert split_operation("group.list") == ("group", "list")
    with pytest.raises(ValueError):
        split_operation("grouplist")
    with pytest.raises(ValueError):
        split_operation(".list")


@pytest.mark.asyncio
async def test_call_posts_operation_and_params() -> None:
    recorder = Recorder([httpx.Response(200, json={"error": 0, "result": [{"id": 1}]})])
    async with make_client(recorder) as client:
        result = await client.call("group.list", {"type": "spot", "public": None, "limit": 50})

    assert result.ok
    assert result.result == [{"id": 1}]
    request = recorder.requests[0]
    assert request.method == "POST"
    assert request.url.path == API_PATH
    assert request.headers["referer"] == f"{BASE}/ng/wall"
    # None values are not sent
    assert recorder.body(0) == {"o": "group", "f": "list", "type": "spot", "limit": 50}


@pytest.mark.asyncio
async def test_error_envelope_is_returned_not_raised() -> None:
    recorder = Recorder([httpx.Response(200, json={"error": 1, "errorMsg": "not found"})])
    async with make_client(recorder) as client:
        result = await client.call("group.getSpot", {"idSpot": 9})

    assert not result.ok
    assert result.error_msg == "not found"


@pytest.mark.asyncio
async def test_cookie_is_captured_and_replayed() -> None:
    recorder = Recorder(
        [
            httpx.Response(
                200,
                json={"error": 0, "result": {"id": 42, "firstname": "Ada", "lastname": "Lovelace"}},
                headers=[("set-cookie", "PHPSESSID=abc123; Path=/; HttpOnly"), ("set-cookie", "lang=fr; Path=/")],
            ),
            httpx.Response(200, json={"error": 0, "result": "tok"}),
        ]
    )
    async with make_client(recorder) as client:
        assert not client.has_session
        user = await client.login("ada@example.com", "secret")
        assert client.has_session
        token = await client.get_upload_token()

    assert user.id == 42
    assert user.display_name == "Ada Lovelace"
    assert token.result == "tok"
    assert "cookie" not in recorder.requests[0].headers
    assert recorder.requests[1].headers["cookie"] == "PHPSESSID=abc123;lang=fr"
    assert recorder.body(0) == {"o": "user", "f": "signIn", "login": "ada@example.com", "password": "secret"}
    assert recorder.body(1) == {"o": "network", "f": "token"}


@pytest.mark.asyncio
async def test_login_rejection_raises_login_error() -> None:
    recorder = Recorder([httpx.Response(200, json={"error": 7, "errorMsg": "bad credentials"})])
    async with make_client(recorder) as client:
        with pytest.raises(LoginError) as excinfo:
            await client.login("ada@example.com", "wrong")

    assert excinfo.value.code == 7
    assert excinfo.value.error_msg == "bad credentials"
    assert not client.has_session


@pytest.mark.asyncio
async def test_http_error_status_raises_backend_error() -> None:
    recorder = Recorder([httpx.Response(502, text="Bad Gateway")])
    async with make_client(recorder) as client:
        with pytest.raises(BackendError):
            await client.call("group.list")


@pytest.mark.asyncio
async def test_non_json_body_raises_backend_error() -> None:
    recorder = Recorder([httpx.Response(200, text="<html>maintenance</html>")])
    async with make_client(recorder) as client:
        with pytest.raises(BackendError, match="non-JSON"):
            await client.call("group.list")


@pytest.mark.asyncio
async def test_transport_failure_raises_backend_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with JamespotClient(BASE, transport=httpx.MockTransport(refuse)) as client:
        with pytest.raises(BackendError, match="connection refused"):
            await client.get_csrf_token()


@pytest.mark.asyncio
async def test_fetch_uses_the_same_session() -> None:
    recorder = Recorder(
        [
            httpx.Response(200, json={"error": 0, "result": {"id": 1}}, headers={"set-cookie": "sid=xyz; Path=/"}),
            httpx.Response(200, text="ok"),
        ]
    )
    async with make_client(recorder) as client:
        await client.login("a@b.c", "pw")
        response = await client.fetch("/", params={"action": "manageApps_install", "install": 1})

    assert response.text == "ok"
    request = recorder.requests[1]
    assert request.method == "GET"
    assert request.url.params["action"] == "manageApps_install"
    assert request.headers["cookie"] == "sid=xyz"
