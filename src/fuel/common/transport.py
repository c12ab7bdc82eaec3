"""Cookie transports: where a flushed cookie ends up.

A transport is any callable matching :class:`CookieTransport`. It returns
``True`` when the cookie was handed over, ``False`` otherwise; failures are
results, not exceptions, so a jar can keep flushing its other cookies.

- :class:`HeaderTransport` renders ``Set-Cookie`` header values and keeps
  them in a list. It is the default for new cookies.
- :class:`ResponseTransport` writes to a starlette ``Response``.
"""

from __future__ import annotations

import logging
from http.cookies import CookieError, SimpleCookie
from typing import Protocol

from starlette.requests import cookie_parser
from starlette.responses import Response

logger = logging.getLogger(__name__)


class CookieTransport(Protocol):
    """Callable that emits one cookie. A negative *expiration* means delete."""

    def __call__(
        self,
        name: str,
        value: str | None,
        expiration: int,
        path: str,
        domain: str | None,
        secure: bool,
        http_only: bool,
    ) -> bool: ...


class HeaderTransport:
    """Collects ``Set-Cookie`` header values in :attr:`headers`.

    ``expiration`` is in seconds: positive values set ``Max-Age`` and
    ``expires``, ``0`` gives a session cookie and negative values produce an
    already expired cookie, which browsers treat as a deletion.
    """

    def __init__(self) -> None:
        self.headers: list[str] = []

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
        jar: SimpleCookie = SimpleCookie()
        try:
            jar[name] = "" if value is None else value
        except CookieError:
            logger.warning("cannot render cookie with illegal name %r", name)
            return False

        morsel = jar[name]
        if expiration:
            morsel["expires"] = expiration
            morsel["max-age"] = max(expiration, 0)
        if path:
            morsel["path"] = path
        if domain:
            morsel["domain"] = domain
        if secure:
            morsel["secure"] = True
        if http_only:
            morsel["httponly"] = True

        self.headers.append(morsel.OutputString())
        return True

    def clear(self) -> None:
        self.headers.clear()

    def __repr__(self) -> str:
        return f"HeaderTransport(headers={len(self.headers)})"


class ResponseTransport:
    """Writes cookies onto a starlette :class:`~starlette.responses.Response`."""

    def __init__(self, response: Response) -> None:
        self._response = response

    @property
    def response(self) -> Response:
        return self._response

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
        if expiration < 0:
            self._response.delete_cookie(
                name, path=path, domain=domain, secure=secure, httponly=http_only
            )
        else:
            self._response.set_cookie(
                name,
                "" if value is None else value,
                max_age=expiration or None,
                path=path,
                domain=domain,
                secure=secure,
                httponly=http_only,
            )
        return True


def parse_cookie_header(header: str) -> dict[str, str]:
    """Parse a ``Cookie:`` request header into ``{name: value}``.

    Uses the same lenient parser as starlette's ``Request.cookies``: pairs
    that are not valid ``Set-Cookie`` syntax (spaces, JSON) are still kept.
    """
    return cookie_parser(header)
