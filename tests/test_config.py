"""Tests for CookieConfig and make_cookie_config."""

import pytest
from pydantic import ValidationError

from fuel.common.config import DELETE_EXPIRATION, CookieConfig, make_cookie_config


class TestCookieConfig:
    def test_defaults(self) -> None:
        cfg = CookieConfig()
        assert cfg.expiration == 0
        assert cfg.path == "/"
        assert cfg.domain is None
        assert cfg.secure is False
        assert cfg.http_only is False

    def test_custom(self) -> None:
        cfg = CookieConfig(expiration=3600, path="/app", domain="example.com", secure=True)
        assert cfg.expiration == 3600
        assert cfg.path == "/app"
        assert cfg.domain == "example.com"
        assert cfg.secure is True

    def test_frozen(self) -> None:
        cfg = CookieConfig()
        with pytest.raises(ValidationError):
            cfg.path = "/other"  # type: ignore[misc]

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CookieConfig(max_age=10)  # type: ignore[call-arg]

    def test_negative_expiration_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CookieConfig(expiration=-1)

    def test_equality(self) -> None:
        assert CookieConfig(path="/a") == CookieConfig(path="/a")
        assert CookieConfig(path="/a") != CookieConfig(path="/b")

    def test_delete_expiration_is_in_the_past(self) -> None:
        assert DELETE_EXPIRATION < 0


class TestMakeCookieConfig:
    def test_no_arguments(self) -> None:
        assert make_cookie_config() == CookieConfig()

    def test_from_dict(self) -> None:
        cfg = make_cookie_config({"domain": "example.com", "http_only": True})
        assert cfg.domain == "example.com"
        assert cfg.http_only is True
        assert cfg.path == "/"

    def test_overrides_on_config(self) -> None:
        base = CookieConfig(path="/app", secure=True)
        cfg = make_cookie_config(base, expiration=60)
        assert cfg.path == "/app"
        assert cfg.secure is True
        assert cfg.expiration == 60
        assert base.expiration == 0

    def test_overrides_beat_base(self) -> None:
        cfg = make_cookie_config({"path": "/a"}, path="/b")
        assert cfg.path == "/b"

    def test_invalid_override(self) -> None:
        with pytest.raises(ValidationError):
            make_cookie_config(colour="blue")

    def test_input_dict_untouched(self) -> None:
        base = {"path": "/a"}
        make_cookie_config(base, secure=True)
        assert base == {"path": "/a"}
