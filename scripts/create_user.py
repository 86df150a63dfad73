#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from examapp.auth.passwords import hash_password, make_hasher
from examapp.config import Settings
from examapp.errors import ConflictError
from examapp.infra.database import build_engine, init_db
from examapp.infra.user_store import SqlCredentialStore


def main() -> None:
    settings = Settings.from_env()
    engine = build_engine(settings.database_url)
    init_db(engine)
    store = SqlCredentialStore(engine)

    email = input("Email: ").strip().lower()
    if not email:
        raise SystemExit("Email is required")

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    hasher = make_hasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )
    try:
        user = store.create_user(email, hash_password(pw1, hasher=hasher))
    except ConflictError:
        raise SystemExit(f"User with email {email} already exists")
    print(f"OK -> user id {user.id} ({settings.database_url})")


if __name__ == "__main__":
    main()
