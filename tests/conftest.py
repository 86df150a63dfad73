import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path
from typing import List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from examapp.app import create_app
from examapp.auth.passwords import make_hasher
from examapp.auth.session import SessionCodec
from examapp.config import Settings
from examapp.errors import ConflictError
from examapp.infra.database import build_engine, init_db
from examapp.infra.models import User
from examapp.infra.user_store import CredentialStore, SqlCredentialStore

TEST_SECRET = "test-session-secret"


class MemoryCredentialStore(CredentialStore):
    """In-memory stand-in for the SQL store. Records every call."""

    def __init__(self) -> None:
        self.users: List[User] = []
        self.calls: List[Tuple[str, object]] = []

    def create_user(self, email: str, password_hash: str) -> User:
        self.calls.append(("create_user", email))
        if any(u.email == email for u in self.users):
            raise ConflictError(email)
        user = User(id=len(self.users) + 1, email=email, password_hash=password_hash)
        self.users.append(user)
        return user

    def find_user_by_email(self, email: str) -> Optional[User]:
        self.calls.append(("find_user_by_email", email))
        return next((u for u in self.users if u.email == email), None)

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        self.calls.append(("find_user_by_id", user_id))
        return next((u for u in self.users if u.id == user_id), None)


@pytest.fixture()
def hasher():
    # Minimum argon2 cost keeps the suite fast.
    return make_hasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture()
def codec() -> SessionCodec:
    return SessionCodec([TEST_SECRET])


@pytest.fixture()
def memory_store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'auth.sqlite3'}"


@pytest.fixture()
def sql_store(db_url: str) -> SqlCredentialStore:
    engine = build_engine(db_url)
    init_db(engine)
    return SqlCredentialStore(engine)


@pytest.fixture()
def settings(db_url: str) -> Settings:
    return Settings(database_url=db_url, session_secrets=(TEST_SECRET,))


@pytest.fixture()
def client(settings, hasher):
    app = create_app(settings, hasher=hasher)
    # Secure cookies are only sent back over https.
    with TestClient(app, base_url="https://testserver") as c:
        yield c
