import logging
from math import ceil

from tasktracker.domain.enums import SortMode
from tasktracker.domain.query import QueryPlan
from tasktracker.domain.task import Task, TaskPage
from tasktracker.ports.task_repository import TaskRepository
from tasktracker.ports.user_directory import UserDirectory
from tasktracker.services.expansion import expand_tasks

logger = logging.getLogger(__name__)

# orderings the stores cannot run natively; stable, so ties keep the default order
IN_MEMORY_SORTS = {
    SortMode.PRIORITY: lambda t: t.priority.rank,
}


### COMMENTS
# ==========================================================
# Listing resolver (services/listing.py)
# ==========================================================
# - Native path: filter + sort + offset/limit run in the store; total = repo.count().
# - Fallback path (sort the store cannot express, i.e. priority):
#     every matching task in default order -> stable sort in memory -> slice.
#     total = size of the whole matched set. Cost grows with the matched set.
# - Callers only see `resolve(plan)`; both paths return the same TaskPage shape.


class ListingResolver:
    """
    Executes a QueryPlan against the task repository.

    :param repo: TaskRepository implementation.
    :param users: UserDirectory used for referential expansion.
    """
    def __init__(self, repo: TaskRepository, users: UserDirectory) -> None:
        self.repo = repo
        self.users = users

    def resolve(self, plan: QueryPlan) -> TaskPage:
        if self.repo.supports_sort(plan.sort):
            items, total = self._native(plan)
        else:
            items, total = self._in_memory(plan)

        return TaskPage(
            tasks=expand_tasks(items, self.users),
            total_pages=ceil(total / plan.limit),
            current_page=plan.page,
            total=total,
            limit=plan.limit,
        )

    def _native(self, plan: QueryPlan) -> tuple[list[Task], int]:
        items = self.repo.find(plan.predicate, sort=plan.sort, offset=plan.offset, limit=plan.limit)
        total = self.repo.count(plan.predicate)
        return items, total

    def _in_memory(self, plan: QueryPlan) -> tuple[list[Task], int]:
        matched = self.repo.find(plan.predicate, sort=SortMode.CREATED_AT_DESC)
        logger.debug("in-memory %s sort over %d tasks", plan.sort, len(matched))
        matched.sort(key=IN_MEMORY_SORTS[plan.sort])
        return matched[plan.offset : plan.offset + plan.limit], len(matched)

