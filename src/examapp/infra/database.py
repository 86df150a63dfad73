# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Engine construction and schema bootstrap for the credential store."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy.engine import Engine, make_url
from sqlmodel import SQLModel, create_engine

from examapp.infra import models  # noqa: F401  (registers the tables)


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return
    database = url.database
    if not database or database == ":memory:":
        return
    Path(database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def build_engine(database_url: str) -> Engine:
    _ensure_sqlite_directory(database_url)
    connect_args: dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """Create missing tables. Existing ones are left untouched."""
    SQLModel.metadata.create_all(engine)
