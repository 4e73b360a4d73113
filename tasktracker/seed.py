import logging
from datetime import timedelta

from tasktracker.domain.enums import TaskPriority, TaskStatus, UserRole
from tasktracker.domain.task import Task, TaskId, User, UserId
from tasktracker.ports.clock import Clock
from tasktracker.ports.id_provider import IdProvider
from tasktracker.ports.task_repository import TaskRepository
from tasktracker.ports.user_directory import UserDirectory

logger = logging.getLogger(__name__)

# (name, email, role)
SEED_USERS = [
    ("John Doe", "john@example.com", UserRole.ADMIN),
    ("Jane Smith", "jane@example.com", UserRole.USER),
    ("Bob Johnson", "bob@example.com", UserRole.USER),
]

# (title, description, days until due, priority, status, assignee idx, creator idx)
SEED_TASKS = [
    ("Complete project documentation", "Write comprehensive documentation for the new feature",
     7, TaskPriority.HIGH, TaskStatus.PENDING, 1, 0),
    ("Review pull requests", "Review and merge pending pull requests",
     3, TaskPriority.MEDIUM, TaskStatus.PENDING, 0, 0),
    ("Update dependencies", "Update all packages to latest versions",
     14, TaskPriority.LOW, TaskStatus.COMPLETED, 2, 1),
    ("Fix authentication bug", "Resolve the issue with token expiration",
     2, TaskPriority.HIGH, TaskStatus.PENDING, 1, 0),
    ("Design new landing page", "Create mockups for the new landing page",
     10, TaskPriority.MEDIUM, TaskStatus.PENDING, 2, 1),
]


def seed(
    repo: TaskRepository,
    users: UserDirectory,
    id_provider: IdProvider,
    clock: Clock,
) -> tuple[list[User], list[Task]]:
    """
    Loads demo users and tasks. Due dates are relative to `clock.now()`.

    :return: (users, tasks) that were inserted.
    """
    now = clock.now()
    created_users = []
    for name, email, role in SEED_USERS:
        user = User(user_id=UserId(id_provider.new_id()), name=name, email=email, role=role)
        users.add(user)
        created_users.append(user)

    created_tasks = []
    for offset, (title, desc, days, priority, status, assignee, creator) in enumerate(SEED_TASKS):
        task = Task(
            task_id=TaskId(id_provider.new_id()),
            title=title,
            description=desc,
            due_date=(now + timedelta(days=days)).date(),
            priority=priority,
            status=status,
            assigned_to=created_users[assignee].user_id,
            created_by=created_users[creator].user_id,
            # one second apart so "newest first" is well defined
            created_at=now + timedelta(seconds=offset),
        )
        repo.add(task)
        created_tasks.append(task)

    logger.info("seeded %d users and %d tasks", len(created_users), len(created_tasks))
    return created_users, created_tasks
