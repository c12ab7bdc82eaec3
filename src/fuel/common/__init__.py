"""Fuel Common: dot-path data containers, array helpers and a cookie jar."""

from fuel.common import arr
from fuel.common.config import CookieConfig, make_cookie_config
from fuel.common.container import DataContainer, NotFoundError, WriteDeniedError
from fuel.common.cookie import Cookie, CookieStatus, StateError
from fuel.common.cookie_jar import CookieJar
from fuel.common.log import FlushContextFilter, LogContext
from fuel.common.transport import (
    CookieTransport,
    HeaderTransport,
    ResponseTransport,
    parse_cookie_header,
)
from fuel.common.types import MISSING, FuelError, InvalidArgumentError

__all__ = [
    "MISSING",
    "Cookie",
    "CookieConfig",
    "CookieJar",
    "CookieStatus",
    "CookieTransport",
    "DataContainer",
    "FlushContextFilter",
    "FuelError",
    "HeaderTransport",
    "InvalidArgumentError",
    "LogContext",
    "NotFoundError",
    "ResponseTransport",
    "StateError",
    "WriteDeniedError",
    "arr",
    "make_cookie_config",
    "parse_cookie_header",
]
