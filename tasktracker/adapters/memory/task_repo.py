from tasktracker.domain.enums import SortMode
from tasktracker.domain.task import Task, TaskId
from tasktracker.domain.errors import TaskAlreadyExistsError, TaskNotFoundError, TaskValidationError
from tasktracker.domain.query import TaskFilter
from typing import Iterable, Optional

### COMMENTS
# ==========================================================
# In-memory adapter for the task repository (adapters/memory/task_repo.py).
# ==========================================================
# Implements the `TaskRepository` port in memory.
#
# - Used for tests, the demo and the CLI when no database is configured.
# - Data lives in `_data: dict[TaskId, Task]` (insertion order = natural order).
# - Contract:
#     * `add`    -> `TaskAlreadyExistsError` if the ID exists,
#     * `update` -> `TaskNotFoundError` if the ID does not exist,
#     * `remove` -> deletes or raises `TaskNotFoundError`,
#     * `find`   -> filter, sort (created_at DESC / due_date ASC, tiebreaker task_id), slice,
#     * `count`  -> size of the filtered set, for paging.
# - Priority is not a native ordering here; the listing resolver sorts it itself.

NATIVE_SORTS = frozenset({SortMode.CREATED_AT_DESC, SortMode.DUE_DATE})


class InMemoryTaskRepository:
    """
        Repository with an optional collection of seed tasks.
        :param initial: Iterable of Task objects to preload.
        Duplicate task_id while seeding: last one wins (seed only, not API).
    """
    def __init__(self, initial: Iterable[Task] | None = None) -> None:
        self._data: dict[TaskId, Task] = {}
        for t in (initial or []):
            self._data[t.task_id] = t

    def add(self, task: Task) -> None:
        """
            Adds a new task.

            :param task: Task to store.
            :raises TaskAlreadyExistsError: If a task with the same `task_id` exists.
        """
        if task.task_id in self._data:
            raise TaskAlreadyExistsError(task.task_id)
        self._data[task.task_id] = task

    def get(self, task_id: TaskId) -> Optional[Task]:
        """Returns the task or `None`; absence is the service's decision to make."""
        return self._data.get(task_id)

    def update(self, task: Task) -> None:
        """
            Replaces the record with the same `task_id` as a whole.

            :raises TaskNotFoundError: When the record does not exist.
        """
        if task.task_id not in self._data:
            raise TaskNotFoundError(task.task_id)
        self._data[task.task_id] = task

    def remove(self, task_id: TaskId) -> None:
        """:raises TaskNotFoundError: When there is no such task."""
        if task_id not in self._data:
            raise TaskNotFoundError(task_id)
        del self._data[task_id]

    def supports_sort(self, sort: SortMode) -> bool:
        return sort in NATIVE_SORTS

    def find(
        self,
        predicate: TaskFilter,
        *,  # keyword-only from here: repo.find(f, sort=..., offset=5, limit=10)
        sort: SortMode = SortMode.CREATED_AT_DESC,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[Task]:
        """
        Filters, sorts and slices the stored tasks.

        :param predicate: Conjunctive filter.
        :param sort: CREATED_AT_DESC or DUE_DATE.
        :param offset: Rows to skip after sorting.
        :param limit: Max rows (None = no limit).
        :raises TaskValidationError: On an unsupported sort or negative paging values.
        :return: List of `Task` after sorting and paging.
        """
        if not self.supports_sort(sort):
            raise TaskValidationError("sort", f"Unsupported sort: {sort}")
        if offset < 0 or (limit is not None and limit < 0):
            raise TaskValidationError("pagination", "offset >= 0, limit >= 0")

        tasks = [t for t in self._data.values() if predicate.matches(t)]

        # tiebreaker first, then the stable primary sort
        tasks.sort(key=lambda t: t.task_id)
        if sort is SortMode.DUE_DATE:
            tasks.sort(key=lambda t: t.due_date)
        else:
            tasks.sort(key=lambda t: t.created_at, reverse=True)

        if limit is not None:
            return tasks[offset : offset + limit]
        return tasks[offset:]

    def count(self, predicate: TaskFilter) -> int:
        return sum(1 for t in self._data.values() if predicate.matches(t))
