from typing import NewType
from datetime import date, datetime
from dataclasses import dataclass, field

from tasktracker.domain.enums import TaskPriority, TaskStatus, UserRole

TaskId = NewType("TaskId", str)
UserId = NewType("UserId", str)


@dataclass(frozen=True)
class Task():
    """
    Stored task; immutable; priority/status from closed enumerations;
    `assigned_to` and `created_by` are bare user ids, never denormalized users.
    `created_at` (UTC) is supplied by the service clock.
    """
    task_id: TaskId
    title: str
    description: str
    due_date: date
    assigned_to: UserId
    created_by: UserId
    created_at: datetime
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING


@dataclass(frozen=True)
class User():
    """Referenced user; owned by the user directory, not by the task core."""
    user_id: UserId
    name: str
    email: str
    role: UserRole = UserRole.USER


@dataclass(frozen=True)
class UserRef():
    """Display subset of a user used in read responses."""
    id: UserId
    name: str | None = None
    email: str | None = None

    @classmethod
    def of(cls, user: User) -> "UserRef":
        return cls(id=user.user_id, name=user.name, email=user.email)


@dataclass(frozen=True)
class Principal():
    """Authenticated caller. Every service call takes it explicitly."""
    id: UserId
    name: str | None = None


@dataclass(frozen=True)
class TaskView():
    """Task with `assigned_to`/`created_by` expanded to `UserRef`."""
    task_id: TaskId
    title: str
    description: str
    due_date: date
    priority: TaskPriority
    status: TaskStatus
    assigned_to: UserRef
    created_by: UserRef
    created_at: datetime


@dataclass(frozen=True)
class TaskPage():
    tasks: list[TaskView]
    total_pages: int
    current_page: int
    total: int
    limit: int = 10


@dataclass(frozen=True)
class TaskRemoved():
    task_id: TaskId
    message: str = "Task removed"


@dataclass(frozen=True)
class PriorityBoard():
    """All visible tasks split into priority columns (high, medium, low), with status totals."""
    columns: dict[TaskPriority, list[TaskView]] = field(default_factory=dict)
    total: int = 0
    pending: int = 0
    completed: int = 0

    def column(self, priority: TaskPriority) -> list[TaskView]:
        return self.columns.get(priority, [])
