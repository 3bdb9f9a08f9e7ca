"""Shared-secret login and stateless session tokens.

Tokens are ``base64("<issued_at_ms>:<secret>")``. Verification recomputes
everything from the token itself and the configured secret, so nothing is
stored server-side. The encoding is reversible: it hides the secret from a
casual glance at the cookie and nothing more.
"""

from __future__ import annotations

import base64
import binascii
import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta

from ast_portal.common.errors import AuthError, InvalidRequestError
from ast_portal.common.logging import log_context
from ast_portal.common.time import to_epoch_ms, utc_now

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(hours=24)


def encode_secret(value: str) -> str:
    """Reversible encoding used for the password comparison. Not a hash."""

    return base64.b64encode(value.encode("utf-8")).decode("ascii")


class SessionGate:
    """Authenticate the shared secret and verify issued session tokens."""

    def __init__(
        self,
        *,
        secret: str,
        max_age: timedelta = DEFAULT_MAX_AGE,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("SessionGate requires a non-empty secret")
        self._secret = secret
        self._encoded_secret = encode_secret(secret)
        self._max_age = max_age
        self._clock = clock

    @property
    def max_age(self) -> timedelta:
        return self._max_age

    def check_password(self, candidate: str) -> bool:
        return secrets.compare_digest(encode_secret(candidate), self._encoded_secret)

    def issue_token(self) -> str:
        issued_at = to_epoch_ms(self._clock())
        raw = f"{issued_at}:{self._secret}"
        return base64.b64encode(raw.encode("utf-8")).decode("ascii")

    def authenticate(self, candidate: str | None) -> str:
        """Return a fresh session token for the right secret.

        Raises :class:`InvalidRequestError` for an empty candidate and
        :class:`AuthError` for a wrong one.
        """
        if not candidate:
            raise InvalidRequestError("Password is required")
        if not self.check_password(candidate):
            logger.warning("auth.login.rejected")
            raise AuthError("Invalid password")
        logger.info("auth.login.success")
        return self.issue_token()

    def verify(self, token: str | None) -> bool:
        """Return ``True`` only for a well-formed, unexpired token carrying the secret.

        Decode problems of any kind count as invalid and never raise.
        """
        if not token:
            return False
        try:
            decoded = base64.b64decode(token, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError, ValueError):
            return False

        issued_raw, sep, secret = decoded.partition(":")
        if not sep or not issued_raw or not secret:
            return False
        if not issued_raw.isascii() or not issued_raw.isdigit():
            return False

        age_ms = to_epoch_ms(self._clock()) - int(issued_raw)
        if age_ms > self._max_age.total_seconds() * 1000:
            logger.debug("auth.token.expired", extra=log_context(age_ms=age_ms))
            return False

        return secrets.compare_digest(secret.encode("utf-8"), self._secret.encode("utf-8"))


__all__ = ["DEFAULT_MAX_AGE", "SessionGate", "encode_secret"]
