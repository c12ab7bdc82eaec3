"""Tests for Cookie: value, settings and the send lifecycle."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from fuel.common.config import CookieConfig
from fuel.common.cookie import Cookie, CookieStatus, StateError
from fuel.common.transport import HeaderTransport
from fuel.common.types import FuelError


class RecordingTransport:
    """Remembers every call and answers with a fixed verdict."""

    def __init__(self, ok: bool = True) -> None:
        self.ok = ok
        self.calls: list[tuple[Any, ...]] = []

    def __call__(
        self,
        name: str,
        value: str | None,
        expiration: int,
        path: str,
        domain: str | None,
        secure: bool,
        http_only: bool,
    ) -> bool:
        self.calls.append((name, value, expiration, path, domain, secure, http_only))
        return self.ok


# ── Construction ─────────────────────────────────────────────────────


class TestConstruction:
    def test_defaults(self) -> None:
        cookie = Cookie("id")
        assert cookie.name == "id"
        assert cookie.value is None
        assert cookie.config == CookieConfig()
        assert cookie.status is CookieStatus.NEW
        assert cookie.is_new is True
        assert cookie.is_deleted is False
        assert cookie.is_sent is False

    def test_value_stored_as_string(self) -> None:
        assert Cookie("n", value=42).value == "42"

    def test_config_dict(self) -> None:
        cookie = Cookie("id", {"path": "/app", "secure": True})
        assert cookie.path == "/app"
        assert cookie.secure is True
        assert cookie.expiration == 0

    def test_config_object_kept(self) -> None:
        cfg = CookieConfig(domain="example.com")
        assert Cookie("id", cfg).config is cfg

    def test_received(self) -> None:
        cookie = Cookie("id", value="abc", received=True)
        assert cookie.status is CookieStatus.RECEIVED
        assert cookie.is_new is False

    def test_default_transport_renders_headers(self) -> None:
        cookie = Cookie("id", value="abc")
        assert cookie.send() is True
        assert cookie.is_sent is True

    def test_repr(self) -> None:
        assert repr(Cookie("id", value="x")) == "Cookie(name='id', value='x', status=new)"


# ── Value ────────────────────────────────────────────────────────────


class TestValue:
    def test_set_value(self) -> None:
        cookie = Cookie("id", value="a", received=True)
        assert cookie.set_value("b") is cookie
        assert cookie.value == "b"
        assert cookie.is_new is True

    def test_property_setter(self) -> None:
        cookie = Cookie("id")
        cookie.value = "x"
        assert cookie.value == "x"

    def test_none_value(self) -> None:
        cookie = Cookie("id", value="a")
        cookie.set_value(None)
        assert cookie.value is None

    def test_set_after_send_raises(self) -> None:
        cookie = Cookie("id", value="a", transport=RecordingTransport())
        cookie.send()
        with pytest.raises(StateError, match="already been sent"):
            cookie.set_value("b")
        assert cookie.value == "a"

    def test_state_error_hierarchy(self) -> None:
        assert issubclass(StateError, FuelError)
        assert issubclass(StateError, RuntimeError)

    def test_set_value_undoes_delete(self) -> None:
        cookie = Cookie("id", value="a")
        cookie.delete()
        cookie.set_value("b")
        assert cookie.is_deleted is False
        assert cookie.is_new is True


# ── Settings ─────────────────────────────────────────────────────────


class TestSettings:
    def test_setters_replace_config(self) -> None:
        cookie = Cookie("id")
        original = cookie.config
        cookie.expiration = 120
        cookie.path = "/app"
        cookie.domain = "example.com"
        cookie.secure = True
        cookie.http_only = True
        assert cookie.config == CookieConfig(
            expiration=120, path="/app", domain="example.com", secure=True, http_only=True
        )
        assert original == CookieConfig()

    def test_shared_config_not_changed(self) -> None:
        cfg = CookieConfig()
        a = Cookie("a", cfg)
        b = Cookie("b", cfg)
        a.path = "/only-a"
        assert b.path == "/"

    def test_invalid_setting(self) -> None:
        cookie = Cookie("id")
        with pytest.raises(ValidationError):
            cookie.expiration = -5


# ── Lifecycle ────────────────────────────────────────────────────────


class TestLifecycle:
    def test_send_new(self) -> None:
        t = RecordingTransport()
        cookie = Cookie("id", {"expiration": 60, "http_only": True}, "abc", transport=t)
        assert cookie.send() is True
        assert t.calls == [("id", "abc", 60, "/", None, False, True)]
        assert cookie.status is CookieStatus.SENT
        assert cookie.is_new is False

    def test_send_twice_is_noop(self) -> None:
        t = RecordingTransport()
        cookie = Cookie("id", value="abc", transport=t)
        cookie.send()
        assert cookie.send() is True
        assert len(t.calls) == 1

    def test_delete(self) -> None:
        cookie = Cookie("id", value="abc")
        assert cookie.delete() is True
        assert cookie.is_deleted is True
        assert cookie.status is CookieStatus.DELETED

    def test_send_deleted(self) -> None:
        t = RecordingTransport()
        cookie = Cookie("id", {"domain": "example.com"}, "abc", transport=t)
        cookie.delete()
        assert cookie.send() is True
        assert t.calls == [("id", None, -86400, "/", "example.com", False, False)]
        assert cookie.is_sent is True
        assert cookie.is_deleted is True

    def test_delete_after_send(self) -> None:
        t = RecordingTransport()
        cookie = Cookie("id", value="abc", transport=t)
        cookie.send()
        assert cookie.delete() is True
        cookie.send()
        assert t.calls[-1][1] is None
        assert t.calls[-1][2] == -86400

    def test_received_not_sent(self) -> None:
        t = RecordingTransport()
        cookie = Cookie("id", value="abc", transport=t, received=True)
        assert cookie.send() is True
        assert t.calls == []
        assert cookie.status is CookieStatus.RECEIVED

    def test_received_then_changed_is_sent(self) -> None:
        t = RecordingTransport()
        cookie = Cookie("id", value="abc", transport=t, received=True)
        cookie.set_value("def")
        cookie.send()
        assert t.calls[0][:2] == ("id", "def")

    def test_failed_send_keeps_state(self) -> None:
        t = RecordingTransport(ok=False)
        cookie = Cookie("id", value="abc", transport=t)
        assert cookie.send() is False
        assert cookie.is_new is True
        assert cookie.is_sent is False
        t.ok = True
        assert cookie.send() is True
        assert cookie.is_sent is True

    def test_failed_send_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        cookie = Cookie("id", value="abc", transport=RecordingTransport(ok=False))
        with caplog.at_level("WARNING", logger="fuel.common.cookie"):
            cookie.send()
        assert "could not be sent" in caplog.text

    def test_header_transport_output(self) -> None:
        t = HeaderTransport()
        Cookie("theme", {"expiration": 10}, "dark", transport=t).send()
        assert t.headers[0].startswith("theme=dark")
        assert "Max-Age=10" in t.headers[0]
