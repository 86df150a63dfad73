# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from itsdangerous import BadData, URLSafeTimedSerializer

from examapp.config import DEFAULT_SESSION_MAX_AGE
from examapp.errors import MissingSecretError

COOKIE_NAME = "RJ_session"
COOKIE_PATH = "/"
COOKIE_SAMESITE = "lax"
_EPOCH = "Thu, 01 Jan 1970 00:00:00 GMT"


@dataclass(frozen=True)
class CookieDirective:
    """A ``Set-Cookie`` the HTTP layer must emit."""

    value: str
    max_age: int
    name: str = COOKIE_NAME
    path: str = COOKIE_PATH
    httponly: bool = True
    secure: bool = True
    samesite: str = COOKIE_SAMESITE
    expires: Optional[str] = field(default=None)

    @property
    def clears(self) -> bool:
        return self.max_age <= 0

    def apply(self, response) -> None:
        response.set_cookie(
            self.name,
            self.value,
            max_age=self.max_age,
            expires=self.expires,
            path=self.path,
            httponly=self.httponly,
            secure=self.secure,
            samesite=self.samesite,
        )


class SessionCodec:
    """Mints, parses and clears the signed session cookie.

    Sessions live only in the cookie: the token carries the user id and the
    issue timestamp, signed with the configured secret(s). Anything that does
    not verify (tampered, truncated, expired, signed with an unknown secret)
    parses as "no session".
    """

    def __init__(
        self,
        secrets: Sequence[str],
        *,
        salt: str = "examapp.session.v1",
        max_age: int = DEFAULT_SESSION_MAX_AGE,
        secure: bool = True,
    ) -> None:
        keys = [s for s in (secrets or ()) if s]
        if not keys:
            raise MissingSecretError("EXAMAPP_SESSION_SECRET (or SECRET_KEY) is not set")
        # itsdangerous signs with the last key and accepts any of them.
        self._serializer = URLSafeTimedSerializer(secret_key=keys, salt=salt)
        self.max_age = int(max_age)
        self.secure = secure

    def mint(self, user_id) -> CookieDirective:
        uid = str(user_id).strip()
        if not uid:
            raise ValueError("Empty user id")
        token = self._serializer.dumps({"uid": uid})
        return CookieDirective(value=token, max_age=self.max_age, secure=self.secure)

    def parse(self, token: Optional[str]) -> Optional[str]:
        if not token or not isinstance(token, str):
            return None
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except BadData:
            return None
        if not isinstance(data, dict):
            return None
        uid = data.get("uid")
        if not isinstance(uid, str) or not uid.strip():
            return None
        return uid.strip()

    def destroy(self, token: Optional[str] = None) -> CookieDirective:
        # Nothing is stored server-side, so the prior value needs no lookup.
        return CookieDirective(value="", max_age=0, expires=_EPOCH, secure=self.secure)
