from typing import Iterable

from tasktracker.domain.task import Task, TaskView, UserId, UserRef
from tasktracker.ports.user_directory import UserDirectory


def expand_tasks(tasks: Iterable[Task], users: UserDirectory) -> list[TaskView]:
    """
    Replaces `assigned_to`/`created_by` ids with `UserRef(id, name, email)`.

    One batch lookup per call, however many tasks there are. A reference to a
    user missing from the directory keeps its id with empty name/email.

    :param tasks: Tasks in the order they should be returned.
    :param users: User directory to join against.
    :return: `TaskView` objects in the same order.
    """
    tasks = list(tasks)
    wanted: set[UserId] = set()
    for t in tasks:
        wanted.add(t.assigned_to)
        wanted.add(t.created_by)
    found = users.get_many(wanted) if wanted else {}

    def ref(user_id: UserId) -> UserRef:
        user = found.get(user_id)
        return UserRef.of(user) if user is not None else UserRef(id=user_id)

    return [
        TaskView(
            task_id=t.task_id,
            title=t.title,
            description=t.description,
            due_date=t.due_date,
            priority=t.priority,
            status=t.status,
            assigned_to=ref(t.assigned_to),
            created_by=ref(t.created_by),
            created_at=t.created_at,
        )
        for t in tasks
    ]


def expand_task(task: Task, users: UserDirectory) -> TaskView:
    return expand_tasks([task], users)[0]
