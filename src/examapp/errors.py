# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy shared by the store, the session codec and the auth flow."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from examapp.auth.session import CookieDirective


class MissingSecretError(RuntimeError):
    """No session signing secret configured. Fatal at startup."""


class StoreError(RuntimeError):
    """The credential store could not complete an operation."""


class ConflictError(StoreError):
    """Insert rejected by the store's uniqueness constraint on email."""


class AuthErrorKind(str, Enum):
    INVALID_AUTH_TYPE = "invalid_auth_type"
    FIELD_INVALID = "field_invalid"
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_TAKEN = "email_taken"
    REGISTRATION_FAILED = "registration_failed"


class AuthFormError(Exception):
    """A login/registration submission that must be shown back to the user.

    ``field_errors`` maps form field name to message. ``fields`` holds the
    submitted values to re-fill the form with; it never contains the password.
    """

    def __init__(
        self,
        kind: AuthErrorKind,
        message: str,
        *,
        field_errors: Optional[Dict[str, str]] = None,
        fields: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.field_errors: Dict[str, str] = dict(field_errors or {})
        self.fields: Dict[str, str] = {k: v for k, v in (fields or {}).items() if k != "password"}


class RedirectRequired(Exception):
    """Control transfer: the HTTP layer must answer with a redirect.

    Not a failure. Raised by the request guard when a page needs a logged-in
    user, or when the session has to be dropped.
    """

    def __init__(self, location: str, *, cookie: Optional["CookieDirective"] = None) -> None:
        super().__init__(location)
        self.location = location
        self.cookie = cookie
