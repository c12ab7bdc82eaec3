"""A single browser cookie with a small send lifecycle.

State machine (``CookieStatus``)::

    RECEIVED | NEW | DELETED  --set_value-->  NEW
    any                       --delete----->  DELETED
    NEW | DELETED             --send ok---->  SENT
    SENT                      --set_value-->  StateError

``RECEIVED`` cookies came in with the request and are not sent back unless
they change. A failed send leaves the state as it was.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from fuel.common.config import DELETE_EXPIRATION, CookieConfig, make_cookie_config
from fuel.common.log import add_flush_context
from fuel.common.transport import CookieTransport, HeaderTransport
from fuel.common.types import FuelError

logger = add_flush_context(logging.getLogger(__name__))


class StateError(FuelError, RuntimeError):
    """Raised when a cookie is changed after it has been sent."""


class CookieStatus(StrEnum):
    """Where a cookie is in its send lifecycle."""

    RECEIVED = "received"
    NEW = "new"
    DELETED = "deleted"
    SENT = "sent"


class Cookie:
    """A named cookie, its value, its settings and its send state.

    Args:
        name: Cookie name; fixed for the lifetime of the object.
        config: ``CookieConfig`` or a dict of overrides on the defaults.
        value: Initial value.
        transport: Where :meth:`send` delivers the cookie. Defaults to a
            fresh :class:`~fuel.common.transport.HeaderTransport`.
        received: The cookie came in with the request, so it starts out as
            ``RECEIVED`` instead of ``NEW``.
    """

    __slots__ = ("_config", "_deleted", "_name", "_status", "_transport", "_value")

    def __init__(
        self,
        name: str,
        config: CookieConfig | dict[str, Any] | None = None,
        value: Any = None,
        *,
        transport: CookieTransport | None = None,
        received: bool = False,
    ) -> None:
        self._name = name
        self._value: str | None = None if value is None else str(value)
        self._config = config if isinstance(config, CookieConfig) else make_cookie_config(config)
        self._transport: CookieTransport = transport if transport is not None else HeaderTransport()
        self._status = CookieStatus.RECEIVED if received else CookieStatus.NEW
        self._deleted = False

    # ── Identity and value ───────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> str | None:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self.set_value(value)

    def set_value(self, value: Any) -> Cookie:
        """Change the value and mark the cookie for sending.

        Clears a pending deletion.

        Raises:
            StateError: The cookie was already sent.
        """
        if self._status is CookieStatus.SENT:
            msg = f'Cookie "{self._name}" has already been sent, no point updating it'
            raise StateError(msg)
        self._value = None if value is None else str(value)
        self._status = CookieStatus.NEW
        self._deleted = False
        return self

    # ── Settings ─────────────────────────────────────────────────────

    @property
    def config(self) -> CookieConfig:
        return self._config

    def _update_config(self, **changes: Any) -> None:
        self._config = make_cookie_config(self._config, **changes)

    @property
    def expiration(self) -> int:
        return self._config.expiration

    @expiration.setter
    def expiration(self, seconds: int) -> None:
        self._update_config(expiration=seconds)

    @property
    def path(self) -> str:
        return self._config.path

    @path.setter
    def path(self, path: str) -> None:
        self._update_config(path=path)

    @property
    def domain(self) -> str | None:
        return self._config.domain

    @domain.setter
    def domain(self, domain: str | None) -> None:
        self._update_config(domain=domain)

    @property
    def secure(self) -> bool:
        return self._config.secure

    @secure.setter
    def secure(self, secure: bool) -> None:
        self._update_config(secure=secure)

    @property
    def http_only(self) -> bool:
        return self._config.http_only

    @http_only.setter
    def http_only(self, http_only: bool) -> None:
        self._update_config(http_only=http_only)

    # ── Lifecycle ────────────────────────────────────────────────────

    @property
    def status(self) -> CookieStatus:
        return self._status

    @property
    def is_new(self) -> bool:
        return self._status is CookieStatus.NEW

    @property
    def is_deleted(self) -> bool:
        return self._deleted

    @property
    def is_sent(self) -> bool:
        return self._status is CookieStatus.SENT

    def delete(self) -> bool:
        """Mark the cookie for deletion. Always succeeds."""
        self._deleted = True
        self._status = CookieStatus.DELETED
        return True

    def send(self) -> bool:
        """Hand the cookie to its transport if it has pending changes.

        A deletion is sent as an empty, already expired cookie. Cookies with
        nothing pending are skipped and count as a success.

        Returns:
            The transport's verdict, or ``True`` when there was nothing to send.
        """
        if self._status is CookieStatus.DELETED:
            value, expiration = None, DELETE_EXPIRATION
        elif self._status is CookieStatus.NEW:
            value, expiration = self._value, self._config.expiration
        else:
            return True

        cfg = self._config
        ok = self._transport(
            self._name, value, expiration, cfg.path, cfg.domain, cfg.secure, cfg.http_only
        )

        if not ok:
            logger.warning(
                "cookie %r could not be sent (status=%s)", self._name, self._status.value
            )
            return False
        self._status = CookieStatus.SENT
        return True

    def __repr__(self) -> str:
        return f"Cookie(name={self._name!r}, value={self._value!r}, status={self._status.value})"
