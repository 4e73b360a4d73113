import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

from tasktracker.adapters.memory.task_repo import InMemoryTaskRepository
from tasktracker.adapters.memory.user_directory import InMemoryUserDirectory
from tasktracker.adapters.sql.schema import build_engine
from tasktracker.adapters.sql.task_repo import SqlTaskRepository
from tasktracker.adapters.sql.user_directory import SqlUserDirectory
from tasktracker.domain.enums import UserRole
from tasktracker.domain.task import Principal, User, UserId
from tasktracker.services.task_service import TaskService
from tasktracker.services.user_service import UserService


class FakeIdProvider:
    """Deterministic ids that are still valid UUIDs (the SQL store checks the format)."""
    def __init__(self, start: int = 0):
        self.counter = start
    def new_id(self) -> str:
        self.counter += 1
        return str(uuid.UUID(int=self.counter))


class FakeClock:
    def __init__(self, fixed: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        # every call moves forward by `step`, so created_at is strictly increasing
        self.current = fixed or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.step = step
    def now(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


U1 = User(user_id=UserId(str(uuid.UUID(int=1001))), name="John Doe", email="john@example.com", role=UserRole.ADMIN)
U2 = User(user_id=UserId(str(uuid.UUID(int=1002))), name="Jane Smith", email="jane@example.com")
U3 = User(user_id=UserId(str(uuid.UUID(int=1003))), name="Bob Johnson", email="bob@example.com")

DUE = date(2025, 2, 1)


def as_principal(user: User) -> Principal:
    return Principal(id=user.user_id, name=user.name)


@pytest.fixture
def creator() -> Principal:
    return as_principal(U1)


@pytest.fixture
def assignee() -> Principal:
    return as_principal(U2)


@pytest.fixture
def outsider() -> Principal:
    return as_principal(U3)


@pytest.fixture
def service() -> TaskService:
    users = InMemoryUserDirectory([U1, U2, U3])
    return TaskService(InMemoryTaskRepository(), users, FakeIdProvider(), FakeClock())


@pytest.fixture
def sql_service(tmp_path) -> TaskService:
    engine = build_engine(tmp_path / "tasks.db")
    users = SqlUserDirectory(engine)
    for u in (U1, U2, U3):
        users.add(u)
    return TaskService(SqlTaskRepository(engine), users, FakeIdProvider(), FakeClock())


@pytest.fixture(params=["memory", "sql"])
def any_service(request) -> TaskService:
    """Runs a test against both storage adapters."""
    return request.getfixturevalue("service" if request.param == "memory" else "sql_service")


@pytest.fixture(params=["memory", "sql"])
def user_service(request, tmp_path) -> UserService:
    """Admin use cases against both user directories, seeded with John (admin), Jane and Bob."""
    if request.param == "memory":
        users = InMemoryUserDirectory([U1, U2, U3])
    else:
        users = SqlUserDirectory(tmp_path / "users.db")
        for u in (U1, U2, U3):
            users.add(u)
    return UserService(users, FakeIdProvider(start=2000))
