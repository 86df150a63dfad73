# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_SESSION_MAX_AGE = 60 * 60 * 24 * 30  # 30 days

_TRUE = {"1", "true", "yes", "y"}


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE


def _int_or_none(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


def _secrets_from_env() -> Tuple[str, ...]:
    raw = os.getenv("EXAMAPP_SESSION_SECRET") or os.getenv("SECRET_KEY") or ""
    return tuple(s.strip() for s in raw.split(",") if s.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///data/examapp.sqlite3"
    # Oldest first; the last secret signs new sessions.
    session_secrets: Tuple[str, ...] = ()
    session_salt: str = "examapp.session.v1"
    session_max_age: int = DEFAULT_SESSION_MAX_AGE
    cookie_secure: bool = True
    argon2_time_cost: Optional[int] = None
    argon2_memory_cost: Optional[int] = None
    argon2_parallelism: Optional[int] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("EXAMAPP_DATABASE_URL", cls.database_url),
            session_secrets=_secrets_from_env(),
            session_salt=os.getenv("EXAMAPP_SESSION_SALT", cls.session_salt),
            session_max_age=int(os.getenv("EXAMAPP_SESSION_MAX_AGE", str(DEFAULT_SESSION_MAX_AGE))),
            cookie_secure=_flag("EXAMAPP_COOKIE_SECURE", "true"),
            argon2_time_cost=_int_or_none("EXAMAPP_ARGON2_TIME_COST"),
            argon2_memory_cost=_int_or_none("EXAMAPP_ARGON2_MEMORY_COST"),
            argon2_parallelism=_int_or_none("EXAMAPP_ARGON2_PARALLELISM"),
        )
