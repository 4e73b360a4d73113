from __future__ import annotations
from pathlib import Path
from typing import Iterable
import sqlalchemy as db
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from tasktracker.adapters.sql.schema import build_engine, users
from tasktracker.domain.enums import UserRole
from tasktracker.domain.errors import TaskStorageError, UserAlreadyExistsError, UserNotFoundError
from tasktracker.domain.task import User, UserId


class SqlUserDirectory:
    def __init__(self, url: str | Path | db.Engine) -> None:
        self.engine = url if isinstance(url, db.Engine) else build_engine(url)
        self.users = users

    def _from_row(self, row) -> User:
        return User(
            user_id=UserId(row["user_id"]),
            name=row["name"],
            email=row["email"],
            role=UserRole(row["role"]),
        )

    def add(self, user: User) -> None:
        stmt = db.insert(self.users).values(
            user_id=str(user.user_id),
            name=user.name,
            email=user.email.lower(),
            role=str(user.role),
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except IntegrityError:
            raise UserAlreadyExistsError(user.email)
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e

    def remove(self, user_id: UserId) -> None:
        stmt = db.delete(self.users).where(self.users.c.user_id == str(user_id))
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e
        if result.rowcount == 0:
            raise UserNotFoundError(user_id)

    def get_many(self, user_ids: Iterable[UserId]) -> dict[UserId, User]:
        wanted = sorted({str(uid) for uid in user_ids})
        if not wanted:
            return {}
        stmt = db.select(self.users).where(self.users.c.user_id.in_(wanted))
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e
        return {UserId(r["user_id"]): self._from_row(r) for r in rows}

    def find_by_email(self, email: str) -> User | None:
        stmt = db.select(self.users).where(self.users.c.email == email.strip().lower())
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e
        return self._from_row(row) if row is not None else None

    def list_all(self) -> list[User]:
        stmt = db.select(self.users).order_by(self.users.c.name.asc(), self.users.c.user_id.asc())
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e
        return [self._from_row(r) for r in rows]
