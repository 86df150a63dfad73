# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_PH = PasswordHasher()


def make_hasher(
    *,
    time_cost: Optional[int] = None,
    memory_cost: Optional[int] = None,
    parallelism: Optional[int] = None,
) -> PasswordHasher:
    """Build a hasher; unset parameters keep argon2-cffi's defaults."""
    kwargs = {}
    if time_cost is not None:
        kwargs["time_cost"] = time_cost
    if memory_cost is not None:
        kwargs["memory_cost"] = memory_cost
    if parallelism is not None:
        kwargs["parallelism"] = parallelism
    return PasswordHasher(**kwargs) if kwargs else _PH


def hash_password(plain: str, *, hasher: PasswordHasher = _PH) -> str:
    if not plain:
        raise ValueError("Empty password")
    return hasher.hash(plain)


def verify_password(hash_value: str, plain: str, *, hasher: PasswordHasher = _PH) -> bool:
    # argon2 compares digests in constant time; a malformed stored digest
    # counts as a failed verification.
    if not hash_value or not plain:
        return False
    try:
        return hasher.verify(hash_value, plain)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hash_value: str, *, hasher: PasswordHasher = _PH) -> bool:
    if not hash_value:
        return True
    try:
        return hasher.check_needs_rehash(hash_value)
    except InvalidHashError:
        return True


@lru_cache(maxsize=8)
def _dummy_hash(hasher: PasswordHasher) -> str:
    return hasher.hash("examapp-dummy-password")


def burn_verification(plain: str, *, hasher: PasswordHasher = _PH) -> None:
    """Spend one verification's worth of work for an account that does not exist."""
    verify_password(_dummy_hash(hasher), plain or "x", hasher=hasher)
