from __future__ import annotations
import logging
import uuid
from pathlib import Path
import sqlalchemy as db
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from tasktracker.adapters.sql.schema import build_engine, tasks
from tasktracker.ports.task_repository import TaskRepository
from tasktracker.domain.task import Task, TaskId, UserId
from tasktracker.domain.enums import SortMode, TaskPriority, TaskStatus
from tasktracker.domain.query import TaskFilter
from datetime import datetime, timezone
from tasktracker.domain.errors import (
    MalformedTaskIdError,
    TaskAlreadyExistsError,
    TaskNotFoundError,
    TaskStorageError,
    TaskValidationError,
)

logger = logging.getLogger(__name__)

NATIVE_SORTS = frozenset({SortMode.CREATED_AT_DESC, SortMode.DUE_DATE})


class SqlTaskRepository(TaskRepository):
    def __init__(self, url: str | Path | db.Engine) -> None:
        """
        url: 'sqlite:///data/tasks.db', a Path to a file, or an existing Engine
        (shared with SqlUserDirectory).
        """
        self.engine = url if isinstance(url, db.Engine) else build_engine(url)
        self.tasks = tasks

    def _key(self, task_id: TaskId) -> str:
        # ids are UUIDs; anything else never reaches the database
        try:
            return str(uuid.UUID(str(task_id)))
        except ValueError:
            raise MalformedTaskIdError(task_id)

    def _encode_dt(self, dt: datetime) -> str:
        # ISO 8601 UTC, fixed microseconds, 'Z' suffix
        return dt.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")

    def _decode_dt(self, s: str) -> datetime:
        # '...Z' -> aware UTC
        return datetime.fromisoformat(s.replace("Z", "+00:00")).astimezone(timezone.utc)

    def _to_row(self, task: Task) -> dict:
        return {
            'task_id': self._key(task.task_id),
            'title': task.title,
            'description': task.description,
            'due_date': task.due_date,
            'priority': str(task.priority),
            'status': str(task.status),
            'assigned_to': str(task.assigned_to),
            'created_by': str(task.created_by),
            'created_at': self._encode_dt(task.created_at),
        }

    def _from_row(self, row) -> Task:
        return Task(
            task_id=TaskId(row["task_id"]),
            title=row["title"],
            description=row["description"],
            due_date=row["due_date"],
            priority=TaskPriority(row["priority"]),
            status=TaskStatus(row["status"]),
            assigned_to=UserId(row["assigned_to"]),
            created_by=UserId(row["created_by"]),
            created_at=self._decode_dt(row["created_at"]),
        )

    def _where(self, predicate: TaskFilter) -> list:
        c = self.tasks.c
        clauses = []
        if predicate.status is not None:
            clauses.append(c.status == str(predicate.status))
        if predicate.priority is not None:
            clauses.append(c.priority == str(predicate.priority))
        if predicate.assigned_to is not None:
            clauses.append(c.assigned_to == str(predicate.assigned_to))
        if predicate.from_date is not None:
            clauses.append(c.due_date >= predicate.from_date)
        if predicate.to_date is not None:
            clauses.append(c.due_date <= predicate.to_date)
        return clauses

    def add(self, task: Task) -> None:
        stmt = db.insert(self.tasks).values(**self._to_row(task))
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except IntegrityError:
            # PK conflict
            raise TaskAlreadyExistsError(task.task_id)
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e

    def get(self, task_id: TaskId) -> Task | None:
        stmt = db.select(self.tasks).where(self.tasks.c.task_id == self._key(task_id))
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e
        return self._from_row(row) if row is not None else None

    def update(self, task: Task) -> None:
        rec = self._to_row(task)
        stmt = (
            db.update(self.tasks)
            .where(self.tasks.c.task_id == rec["task_id"])
            .values(**rec)
        )
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e
        if result.rowcount == 0:
            raise TaskNotFoundError(task.task_id)

    def remove(self, task_id: TaskId) -> None:
        stmt = db.delete(self.tasks).where(self.tasks.c.task_id == self._key(task_id))
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e
        if result.rowcount == 0:
            raise TaskNotFoundError(task_id)

    def supports_sort(self, sort: SortMode) -> bool:
        return sort in NATIVE_SORTS

    def count(self, predicate: TaskFilter) -> int:
        stmt = db.select(db.func.count()).select_from(self.tasks)
        clauses = self._where(predicate)
        if clauses:
            stmt = stmt.where(*clauses)
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e

    def find(
        self,
        predicate: TaskFilter,
        *,
        sort: SortMode = SortMode.CREATED_AT_DESC,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Task]:
        if not self.supports_sort(sort):
            raise TaskValidationError("sort", f"Unsupported sort: {sort}")

        # stable ordering: primary key + tie-breaker on task_id
        if sort is SortMode.DUE_DATE:
            ordering = (self.tasks.c.due_date.asc(), self.tasks.c.task_id.asc())
        else:
            ordering = (self.tasks.c.created_at.desc(), self.tasks.c.task_id.asc())

        stmt = db.select(self.tasks)
        clauses = self._where(predicate)
        if clauses:
            stmt = stmt.where(*clauses)
        stmt = stmt.order_by(*ordering)
        if offset and offset > 0:
            stmt = stmt.offset(int(offset))
        if limit is not None:
            if limit <= 0:
                return []
            stmt = stmt.limit(int(limit))

        logger.debug("find sort=%s offset=%s limit=%s", sort, offset, limit)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            raise TaskStorageError(str(e)) from e
        return [self._from_row(r) for r in rows]
