from enum import Enum


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"

    def __str__(self):
        return self.value


class TaskPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """high=1, medium=2, low=3; lower rank sorts first."""
        return _PRIORITY_RANK[self]

    def __str__(self):
        return self.value


_PRIORITY_RANK = {
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"

    def __str__(self):
        return self.value


class SortMode(str, Enum):
    """Ordering of a task listing.

    CREATED_AT_DESC is the default (newest first); DUE_DATE is ascending.
    """
    CREATED_AT_DESC = "createdAt"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"

    def __str__(self):
        return self.value


class ListScope(str, Enum):
    OWN = "own"
    ALL = "all"
