#!/usr/bin/env python3
from __future__ import annotations

from datetime import datetime

from examapp.config import Settings
from examapp.infra.database import build_engine, init_db


def main() -> None:
    settings = Settings.from_env()
    print("schema init started", datetime.now().isoformat())
    init_db(build_engine(settings.database_url))
    print("schema init finished", datetime.now().isoformat())


if __name__ == "__main__":
    main()
