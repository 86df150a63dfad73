# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import Request

from examapp.auth.flow import RedirectInstruction
from examapp.auth.session import COOKIE_NAME, SessionCodec
from examapp.errors import RedirectRequired, StoreError
from examapp.infra.models import User
from examapp.infra.user_store import CredentialStore

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


def login_url(redirect_to: str) -> str:
    return f"{LOGIN_PATH}?{urlencode({'redirectTo': redirect_to})}"


class RequestGuard:
    """Resolves the logged-in user of a request from its session cookie."""

    def __init__(self, codec: SessionCodec, store: CredentialStore) -> None:
        self.codec = codec
        self.store = store

    def get_user_id(self, request: Request) -> Optional[str]:
        return self.codec.parse(request.cookies.get(COOKIE_NAME, ""))

    def require_user_id(self, request: Request, redirect_to: Optional[str] = None) -> str:
        uid = self.get_user_id(request)
        if uid:
            return uid
        raise RedirectRequired(login_url(redirect_to or request.url.path))

    def get_user(self, request: Request) -> Optional[User]:
        uid = self.get_user_id(request)
        if uid is None:
            return None
        try:
            user_id = int(uid)
        except ValueError:
            return None
        try:
            return self.store.find_user_by_id(user_id)
        except StoreError:
            # Can't tell whether this session is still good: log the user out.
            logger.exception("User lookup failed for session user id=%s; forcing logout", user_id)
            raise RedirectRequired(LOGIN_PATH, cookie=self.codec.destroy(request.cookies.get(COOKIE_NAME))) from None

    def require_user(self, request: Request) -> User:
        self.require_user_id(request)
        user = self.get_user(request)
        if user is None:
            # Signed session for an account that no longer exists.
            logger.info("Session user id=%s not found; forcing logout", self.get_user_id(request))
            raise RedirectRequired(
                login_url(request.url.path),
                cookie=self.codec.destroy(request.cookies.get(COOKIE_NAME)),
            )
        return user

    def logout(self, request: Request) -> RedirectInstruction:
        return RedirectInstruction(
            location=LOGIN_PATH,
            set_cookie=self.codec.destroy(request.cookies.get(COOKIE_NAME)),
        )


def current_guard(request: Request) -> RequestGuard:
    return request.app.state.guard


def current_user_optional(request: Request) -> Optional[User]:
    return current_guard(request).get_user(request)


def require_user(request: Request) -> User:
    """FastAPI dependency for pages that need a logged-in user."""
    return current_guard(request).require_user(request)
