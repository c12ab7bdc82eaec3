"""Cookie configuration: per-cookie defaults shared by a jar."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DELETE_EXPIRATION = -86400
"""Expiration passed to the transport when a cookie is deleted (one day ago)."""


class CookieConfig(BaseModel):
    """Immutable cookie settings.

    Args:
        expiration: Lifetime in seconds; ``0`` makes a session cookie.
        path: Path the cookie is valid for.
        domain: Domain the cookie is valid for, ``None`` for the current host.
        secure: Only send the cookie over HTTPS.
        http_only: Hide the cookie from client-side scripts.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    expiration: int = Field(default=0, ge=0)
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    http_only: bool = False


def make_cookie_config(
    base: CookieConfig | dict[str, Any] | None = None, **overrides: Any
) -> CookieConfig:
    """Build a CookieConfig from a base config (or dict) plus keyword overrides.

    Overrides are validated like any other field; unknown names raise
    ``pydantic.ValidationError``.
    """
    if isinstance(base, CookieConfig):
        values = base.model_dump()
    else:
        values = dict(base or {})
    values.update(overrides)
    config = CookieConfig.model_validate(values)
    logger.debug("CookieConfig created path=%s domain=%s", config.path, config.domain)
    return config
