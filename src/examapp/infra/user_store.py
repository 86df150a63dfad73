# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session, select

from examapp.errors import ConflictError, StoreError
from examapp.infra.models import User


class CredentialStore(ABC):
    """Data access for user records. Insert and lookups only."""

    @abstractmethod
    def create_user(self, email: str, password_hash: str) -> User:
        """Insert a user. Raises ConflictError if the email is already taken."""

    @abstractmethod
    def find_user_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_user_by_id(self, user_id: int) -> Optional[User]:
        ...


class SqlCredentialStore(CredentialStore):
    """CredentialStore over a SQLAlchemy engine.

    The unique index on ``users.email`` is what decides concurrent
    registrations for the same address; the loser gets ConflictError.
    Any other database failure surfaces as StoreError.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, class_=Session, expire_on_commit=False)

    def create_user(self, email: str, password_hash: str) -> User:
        if not password_hash:
            raise ValueError("password_hash is required")
        user = User(email=email, password_hash=password_hash)
        with self._sessions() as session:
            try:
                session.add(user)
                session.commit()
                session.refresh(user)
            except IntegrityError as e:
                session.rollback()
                raise ConflictError(f"Email already registered: {email}") from e
            except SQLAlchemyError as e:
                session.rollback()
                raise StoreError("Could not insert user") from e
        return user

    def find_user_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        return self._first(select(User).where(User.email == email))

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        with self._sessions() as session:
            try:
                return session.get(User, user_id)
            except SQLAlchemyError as e:
                raise StoreError(f"Could not load user {user_id}") from e

    def _first(self, statement) -> Optional[User]:
        with self._sessions() as session:
            try:
                return session.exec(statement).first()
            except SQLAlchemyError as e:
                raise StoreError("User lookup failed") from e
