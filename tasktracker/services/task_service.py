import logging
from datetime import date

from tasktracker.domain.authorization import authorize_delete, authorize_update
from tasktracker.domain.enums import ListScope, SortMode, TaskPriority, TaskStatus
from tasktracker.domain.errors import (
    MalformedTaskIdError,
    TaskForbiddenError,
    TaskNotFoundError,
    TaskValidationError,
)
from tasktracker.domain.parsing import allowed_values, is_supplied, parse_date, parse_enum
from tasktracker.domain.patch import UNSET, TaskPatch
from tasktracker.domain.query import DEFAULT_LIMIT, TaskFilter, build_query_plan
from tasktracker.domain.task import (
    Principal,
    PriorityBoard,
    Task,
    TaskId,
    TaskPage,
    TaskRemoved,
    TaskView,
    UserId,
)
from tasktracker.ports.clock import Clock
from tasktracker.ports.id_provider import IdProvider
from tasktracker.ports.task_repository import TaskRepository
from tasktracker.ports.user_directory import UserDirectory
from tasktracker.services.expansion import expand_task, expand_tasks
from tasktracker.services.listing import ListingResolver

logger = logging.getLogger(__name__)


### COMMENTS
# ==========================================================
# Service layer (services/task_service.py): use cases.
# ==========================================================
# Role:
# - Orchestrates create / get / update / delete and both listings over the ports.
# - Validates input (required fields, enums, assignee exists).
# - Authorizes every write against the stored task before touching it.
#
# Rules:
# - The principal is always an explicit argument.
# - Domain errors:
#     * validation -> `TaskValidationError` (every bad field at once),
#     * missing or malformed id -> `TaskNotFoundError`,
#     * ownership rule broken -> `TaskForbiddenError`.
# - Tasks are immutable (`frozen=True`): a change = new instance + `repo.update`.
# - Every returned task goes through referential expansion.


class TaskService:
    """
    Use-case service for tasks.

    :param repo: TaskRepository implementation.
    :param users: UserDirectory implementation (referential expansion, assignee checks).
    :param id_provider: Source of new task ids.
    :param clock: Source of `created_at`.
    :param default_limit: Page size when the caller sends none (or garbage).
    """
    def __init__(
        self,
        repo: TaskRepository,
        users: UserDirectory,
        id_provider: IdProvider,
        clock: Clock,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        self.repo = repo
        self.users = users
        self.id_provider = id_provider
        self.clock = clock
        self.default_limit = default_limit
        self.listing = ListingResolver(repo, users)

    def create_task(
        self,
        principal: Principal,
        title: str | None,
        description: str | None,
        due_date: str | date | None,
        priority: str | TaskPriority | None = None,
        assigned_to: str | None = None,
    ) -> TaskView:
        """
            Creates a task owned by `principal`.

            - `title`, `description`, `due_date` are required and non-empty; every
              missing one is reported in a single `TaskValidationError`.
            - `priority` defaults to "medium", `assigned_to` to the principal.
            - `created_by` is always the principal.

            :return: The stored task, expanded.
            :raises TaskValidationError: On any invalid field; nothing is written.
        """
        errors: list[tuple[str, str]] = []
        if not is_supplied(title):
            errors.append(("title", "Title is required"))
        if not is_supplied(description):
            errors.append(("description", "Description is required"))

        due_value = None
        if not is_supplied(due_date):
            errors.append(("due_date", "Due date is required"))
        else:
            try:
                due_value = parse_date(due_date)
            except ValueError:
                errors.append(("due_date", "Expected an ISO date (YYYY-MM-DD)"))

        priority_value = TaskPriority.MEDIUM
        if is_supplied(priority):
            try:
                priority_value = parse_enum(TaskPriority, priority)
            except ValueError:
                errors.append(("priority", f"Expected one of: {allowed_values(TaskPriority)}"))

        assignee = UserId(str(assigned_to).strip()) if is_supplied(assigned_to) else principal.id
        if assignee != principal.id:
            errors.extend(self._check_assignee(assignee))

        if errors:
            raise TaskValidationError(errors)

        task = Task(
            task_id=TaskId(self.id_provider.new_id()),
            title=title,
            description=description,
            due_date=due_value,
            priority=priority_value,
            assigned_to=assignee,
            created_by=principal.id,
            created_at=self.clock.now(),
        )
        self.repo.add(task)
        logger.info("task %s created by %s (assigned to %s)", task.task_id, principal.id, assignee)
        return expand_task(task, self.users)

    def get_task(self, principal: Principal, task_id: TaskId) -> TaskView:
        """
            Returns one task, expanded.

            :raises TaskNotFoundError: When the id is unknown or malformed.
        """
        return expand_task(self._load(task_id), self.users)

    def update_task(self, principal: Principal, task_id: TaskId, patch: TaskPatch | None = None) -> TaskView:
        """
            Applies a partial update.

            - Loads the task (`TaskNotFoundError` if missing/malformed).
            - Authorizes each touched field group against the stored state.
            - Validates the present values, then writes the whole new Task.
            - An empty patch writes nothing and returns the task unchanged.

            :raises TaskForbiddenError: When a touched group is not allowed.
            :raises TaskValidationError: When a present value is invalid.
        """
        patch = patch or TaskPatch()
        task = self._load(task_id)
        try:
            groups = authorize_update(principal, task, patch)
        except TaskForbiddenError:
            logger.warning("update of task %s denied for %s", task.task_id, principal.id)
            raise
        if not groups:
            return expand_task(task, self.users)

        patch.validate()
        if patch.assigned_to is not UNSET and patch.assigned_to != task.assigned_to:
            errors = self._check_assignee(patch.assigned_to)
            if errors:
                raise TaskValidationError(errors)

        updated = patch.apply_to(task)
        self.repo.update(updated)
        logger.info(
            "task %s updated by %s (fields: %s)",
            task.task_id, principal.id, ", ".join(sorted(patch.present_fields())),
        )
        return expand_task(updated, self.users)

    def remove_task(self, principal: Principal, task_id: TaskId) -> TaskRemoved:
        """
            Deletes a task; creator only.

            :raises TaskNotFoundError: When the task does not exist.
            :raises TaskForbiddenError: When the principal is not the creator.
            :return: Confirmation, not the deleted entity.
        """
        task = self._load(task_id)
        try:
            authorize_delete(principal, task)
        except TaskForbiddenError:
            logger.warning("delete of task %s denied for %s", task.task_id, principal.id)
            raise
        self.repo.remove(task.task_id)
        logger.info("task %s removed by %s", task.task_id, principal.id)
        return TaskRemoved(task_id=task.task_id)

    def list_own(
        self,
        principal: Principal,
        status: str | None = None,
        priority: str | None = None,
        page: object = None,
        limit: object = None,
    ) -> TaskPage:
        """Tasks assigned to the principal, newest first."""
        plan = build_query_plan(
            principal,
            ListScope.OWN,
            status=status,
            priority=priority,
            page=page,
            limit=limit,
            default_limit=self.default_limit,
        )
        return self.listing.resolve(plan)

    def list_all(
        self,
        principal: Principal,
        status: str | None = None,
        priority: str | None = None,
        assigned_to: str | None = None,
        from_date: str | date | None = None,
        to_date: str | date | None = None,
        sort_by: str | SortMode | None = None,
        page: object = None,
        limit: object = None,
    ) -> TaskPage:
        """
        All tasks, filtered and paged.

        :param sort_by: "priority" (high first), "dueDate" (earliest first) or None (newest first).
        :raises TaskValidationError: On unknown filter values or unparsable dates.
        """
        plan = build_query_plan(
            principal,
            ListScope.ALL,
            status=status,
            priority=priority,
            assigned_to=assigned_to,
            from_date=from_date,
            to_date=to_date,
            sort_by=sort_by,
            page=page,
            limit=limit,
            default_limit=self.default_limit,
        )
        return self.listing.resolve(plan)

    def board(self, principal: Principal) -> PriorityBoard:
        """Every task grouped into high / medium / low columns, newest first in each, plus status totals."""
        tasks = expand_tasks(self.repo.find(TaskFilter(), sort=SortMode.CREATED_AT_DESC), self.users)
        columns = {p: [t for t in tasks if t.priority is p] for p in TaskPriority}
        completed = sum(1 for t in tasks if t.status is TaskStatus.COMPLETED)
        return PriorityBoard(
            columns=columns,
            total=len(tasks),
            pending=len(tasks) - completed,
            completed=completed,
        )

    def _load(self, task_id: TaskId) -> Task:
        try:
            task = self.repo.get(task_id)
        except MalformedTaskIdError:
            raise TaskNotFoundError(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def _check_assignee(self, user_id: UserId) -> list[tuple[str, str]]:
        if user_id in self.users.get_many([user_id]):
            return []
        return [("assigned_to", f"Unknown user: {user_id}")]
