"""Integration tests for the cookie round trip through a starlette application.

Tests that:
- Cookies sent by the browser are loaded into the jar and not re-sent.
- Changed cookies come back as ``Set-Cookie`` headers.
- Deleted cookies expire in the client.
- Flushing an application jar also writes the cookies of a child jar.
"""

from __future__ import annotations

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from fuel.common import CookieJar, ResponseTransport

# ---------------------------------------------------------------------------
# Minimal test app
# ---------------------------------------------------------------------------


async def visit(request: Request) -> PlainTextResponse:
    received = request.cookies
    visits = int(received.get("visits", "0")) + 1
    response = PlainTextResponse(str(visits))

    jar = CookieJar({"http_only": True}, received, ResponseTransport(response))
    jar.set("visits", visits)
    jar.flush()
    return response


async def peek(request: Request) -> PlainTextResponse:
    received = request.cookies
    response = PlainTextResponse(received.get("visits", "none"))
    CookieJar(data=received, transport=ResponseTransport(response)).flush()
    return response


async def logout(request: Request) -> PlainTextResponse:
    response = PlainTextResponse("bye")
    jar = CookieJar(data=request.cookies, transport=ResponseTransport(response))
    jar.delete("visits")
    jar.flush()
    return response


async def login(request: Request) -> PlainTextResponse:
    response = PlainTextResponse("welcome")
    transport = ResponseTransport(response)
    app_jar = CookieJar(transport=transport)
    session_jar = CookieJar({"expiration": 3600}, transport=transport).set_parent(app_jar)
    app_jar.set("theme", "dark")
    session_jar.set("session", "s-123")
    app_jar.flush()
    return response


_app = Starlette(
    routes=[
        Route("/visit", visit),
        Route("/peek", peek),
        Route("/logout", logout),
        Route("/login", login),
    ]
)


@pytest.fixture
def client() -> TestClient:
    return TestClient(_app)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


@pytest.mark.integration
def test_counter_round_trip(client: TestClient) -> None:
    """Each visit reads the previous value and sends the incremented one."""
    first = client.get("/visit")
    assert first.text == "1"
    header = first.headers["set-cookie"]
    assert header.startswith("visits=1")
    assert "HttpOnly" in header

    second = client.get("/visit")
    assert second.text == "2"
    assert client.cookies.get("visits") == "2"


@pytest.mark.integration
def test_unchanged_cookies_not_resent(client: TestClient) -> None:
    """A request that only reads cookies produces no Set-Cookie header."""
    client.get("/visit")
    resp = client.get("/peek")
    assert resp.text == "1"
    assert "set-cookie" not in resp.headers


@pytest.mark.integration
def test_delete_expires_cookie(client: TestClient) -> None:
    """Visit → logout → the next visit starts counting again."""
    client.get("/visit")
    client.get("/visit")

    resp = client.get("/logout")
    header = resp.headers["set-cookie"]
    assert header.startswith('visits=""')
    assert "Max-Age=0" in header
    assert client.cookies.get("visits") is None

    assert client.get("/visit").text == "1"


@pytest.mark.integration
def test_child_jar_flushed_with_parent(client: TestClient) -> None:
    """Flushing the application jar writes the session jar's cookies too."""
    resp = client.get("/login")
    headers = resp.headers.get_list("set-cookie")
    assert len(headers) == 2
    assert headers[0].startswith("theme=dark")
    assert headers[1].startswith("session=s-123")
    assert "Max-Age=3600" in headers[1]
    assert client.cookies.get("session") == "s-123"
