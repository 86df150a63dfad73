# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Login/registration submission handling.

One controller serves both the login and the register radio of the auth form:
it validates the submission, checks credentials or creates the account, and
mints the session cookie to send back with the redirect.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional

from argon2 import PasswordHasher
from pydantic import BaseModel, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from examapp.auth import passwords
from examapp.auth.session import CookieDirective, SessionCodec
from examapp.errors import AuthErrorKind, AuthFormError, ConflictError, StoreError
from examapp.infra.models import User
from examapp.infra.user_store import CredentialStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
MIN_EMAIL_LENGTH = 3
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthType(str, Enum):
    LOGIN = "login"
    REGISTER = "register"


@dataclass(frozen=True)
class AuthSubmission:
    auth_type: str
    email: str
    password: str
    redirect_to: str = "/"

    @classmethod
    def from_form(cls, form: Mapping[str, object]) -> "AuthSubmission":
        """Read the posted fields. ``loginType`` is accepted as an alias of ``authType``."""
        auth_type = form.get("authType")
        if auth_type is None:
            auth_type = form.get("loginType")
        return cls(
            auth_type=_text(auth_type),
            email=_text(form.get("email")),
            password=_text(form.get("password")),
            redirect_to=_text(form.get("redirectTo")) or "/",
        )


@dataclass(frozen=True)
class RedirectInstruction:
    location: str
    set_cookie: CookieDirective


class Credentials(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v):
        email = _text(v).strip().lower()
        if not email:
            raise PydanticCustomError("email_required", "Email is required")
        if len(email) < MIN_EMAIL_LENGTH or not _EMAIL_RE.match(email):
            raise PydanticCustomError("email_invalid", "Invalid email")
        return email

    @field_validator("password", mode="before")
    @classmethod
    def _check_password(cls, v):
        password = _text(v)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "password_too_short",
                "Password must be at least {min_length} characters long",
                {"min_length": MIN_PASSWORD_LENGTH},
            )
        return password


def _text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def safe_redirect(target: Optional[str]) -> str:
    """Only local absolute paths are followed; anything else goes home."""
    t = (target or "").strip()
    if not t.startswith("/") or t.startswith("//") or "\\" in t:
        return "/"
    return t


class AuthFlowController:
    def __init__(
        self,
        store: CredentialStore,
        codec: SessionCodec,
        *,
        hasher: Optional[PasswordHasher] = None,
    ) -> None:
        self.store = store
        self.codec = codec
        self.hasher = hasher or passwords.make_hasher()

    def handle_submission(self, form: Mapping[str, object]) -> RedirectInstruction:
        """Process one auth form post.

        Returns where to redirect and the session cookie to set, or raises
        AuthFormError describing what to show on the re-rendered form.
        """
        sub = form if isinstance(form, AuthSubmission) else AuthSubmission.from_form(form)
        echoed = {"authType": sub.auth_type, "email": sub.email, "redirectTo": sub.redirect_to}

        try:
            auth_type = AuthType(sub.auth_type)
        except ValueError:
            raise AuthFormError(
                AuthErrorKind.INVALID_AUTH_TYPE,
                "Login type invalid",
                fields=echoed,
            ) from None

        creds = self._validate(sub, echoed)
        echoed["email"] = creds.email

        if auth_type is AuthType.LOGIN:
            user = self.login(creds.email, creds.password, fields=echoed)
        else:
            user = self.register(creds.email, creds.password, fields=echoed)

        return RedirectInstruction(
            location=safe_redirect(sub.redirect_to),
            set_cookie=self.codec.mint(user.id),
        )

    def login(self, email: str, password: str, *, fields: Optional[Dict[str, str]] = None) -> User:
        user = self.store.find_user_by_email(email)
        if user is None:
            passwords.burn_verification(password, hasher=self.hasher)
            ok = False
        else:
            ok = passwords.verify_password(user.password_hash, password, hasher=self.hasher)
        if not ok:
            logger.info("Login failed")
            raise AuthFormError(
                AuthErrorKind.INVALID_CREDENTIALS,
                "Email/Password combination is incorrect",
                fields=fields,
            )
        return user

    def register(self, email: str, password: str, *, fields: Optional[Dict[str, str]] = None) -> User:
        if self.store.find_user_by_email(email) is not None:
            raise _email_taken(email, fields)
        digest = passwords.hash_password(password, hasher=self.hasher)
        try:
            user = self.store.create_user(email, digest)
        except ConflictError:
            # Lost a race with a concurrent registration of the same email.
            raise _email_taken(email, fields) from None
        except StoreError:
            logger.exception("Could not create user")
            raise AuthFormError(
                AuthErrorKind.REGISTRATION_FAILED,
                "Something went wrong trying to create a new user.",
                fields=fields,
            ) from None
        logger.info("Registered user id=%s", user.id)
        return user

    def _validate(self, sub: AuthSubmission, echoed: Dict[str, str]) -> Credentials:
        try:
            return Credentials.model_validate({"email": sub.email, "password": sub.password})
        except ValidationError as e:
            field_errors: Dict[str, str] = {}
            for err in e.errors():
                name = str(err["loc"][0]) if err.get("loc") else "__all__"
                field_errors.setdefault(name, err["msg"])
            raise AuthFormError(
                AuthErrorKind.FIELD_INVALID,
                "Fields invalid",
                field_errors=field_errors,
                fields=echoed,
            ) from None


def _email_taken(email: str, fields: Optional[Dict[str, str]]) -> AuthFormError:
    msg = f"User with email {email} already exists"
    return AuthFormError(
        AuthErrorKind.EMAIL_TAKEN,
        msg,
        field_errors={"email": msg},
        fields=fields,
    )
