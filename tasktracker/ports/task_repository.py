from typing import Protocol, Optional
from tasktracker.domain.enums import SortMode
from tasktracker.domain.query import TaskFilter
from tasktracker.domain.task import Task, TaskId


### COMMENTS
# ==========================================================
# Task repository contract (ports/task_repository.py).
# ==========================================================
# Protocol for the task persistence layer.
# - Technology agnostic (memory, SQL).
# - Adapters map technical errors onto domain errors
#  (UNIQUE -> TaskAlreadyExistsError, missing row -> TaskNotFoundError,
#   id in the wrong format -> MalformedTaskIdError, driver failure -> TaskStorageError).
# - No business logic here (validation and authorization live in the service).
# - `supports_sort` tells the listing resolver which orderings the store can run natively.


class TaskRepository(Protocol):
    """Repository interface for storing and querying `Task` objects.

    Adapters must:
    - keep writes atomic,
    - map technical errors onto domain errors,
    - apply `TaskFilter` as a conjunction of all its set predicates,
    - order natively supported sorts deterministically (tiebreaker on `task_id`).
    """

    def add(self, task: Task) -> None:
        """Inserts a new `Task`.

        Domain errors:
            TaskAlreadyExistsError: When `task_id` is already stored.
        """

    def get(self, task_id: TaskId) -> Optional[Task]:
        """Returns the task or `None` when absent.

        Domain errors:
            MalformedTaskIdError: When `task_id` is not a valid id for this store.
        """

    def update(self, task: Task) -> None:
        """Replaces the stored record with the same `task_id`.

        Domain errors:
            TaskNotFoundError: When the record does not exist.

        Notes:
            The repository does not merge fields, it writes the whole object.
        """

    def remove(self, task_id: TaskId) -> None:
        """Hard delete.

        Domain errors:
            TaskNotFoundError: When the record does not exist.
            MalformedTaskIdError: When `task_id` is not a valid id for this store.
        """

    def supports_sort(self, sort: SortMode) -> bool:
        """`True` when `find` can apply `sort` itself."""

    def find(
        self,
        predicate: TaskFilter,
        *,
        sort: SortMode = SortMode.CREATED_AT_DESC,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[Task]:
        """Returns matching tasks, sorted, then sliced.

        Parameters:
            predicate: Filter applied before sorting.
            sort: A mode for which `supports_sort` is `True`.
            offset: Number of sorted rows to skip.
            limit: Page size; `None` means every matching row.

        Sorting:
            - CREATED_AT_DESC: newest first, tiebreaker `task_id` ASC.
            - DUE_DATE: earliest first, tiebreaker `task_id` ASC.

        Paging:
            - ALWAYS after sorting.
        """

    def count(self, predicate: TaskFilter) -> int:
        """Number of tasks matching `predicate` (for paging)."""
