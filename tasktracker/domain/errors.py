

### COMMENTS
# ============================================
# Domain error conventions
# ============================================
# - Repositories (adapters):
#     * detect duplicates and missing records
#     * map technical errors (IntegrityError, SQLAlchemyError, bad UUID) onto DomainError
#
# - Services:
#     * validate user input and raise TaskValidationError (with every bad field)
#     * repo.get() returning None for a required task -> TaskNotFoundError
#     * MalformedTaskIdError from a repo -> TaskNotFoundError (never leaked upwards)
#     * failed ownership checks -> TaskForbiddenError
#     * user management by a non-admin -> AdminRequiredError
#
# - UI (CLI):
#     * catches DomainError subclasses and prints a friendly message
#     * TaskStorageError and anything else is an internal error (logged, generic message)


class DomainError(Exception):
    """Base class for business errors.
    Lets the UI tell domain failures (application logic) apart from technical ones.
    Not raised directly; use the subclasses.
    """


class TaskAlreadyExistsError(DomainError):
    """Raised when inserting a task whose `task_id` is already stored.
    Raised by adapters implementing `TaskRepository.add()`.
    """
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(self.__str__())
    def __str__(self):
        return f"Task with ID {self.task_id} already exists."


class ValidationError(DomainError):
    """Raised when input data breaks the business rules.

    Collects every violated field rather than stopping at the first one.
    `errors` is a list of `(field, message)` pairs in the order they were found.
    `field` and `message` mirror the first pair for single-error callers.
    """
    def __init__(self, field: str | list[tuple[str, str]], message: str | None = None):
        if isinstance(field, list):
            self.errors = list(field)
        else:
            self.errors = [(field, message or "")]
        self.field, self.message = self.errors[0]
        super().__init__(self.__str__())

    @property
    def fields(self) -> list[str]:
        return [f for f, _ in self.errors]

    def __str__(self):
        return "; ".join(f"Invalid field '{f}': {m}" for f, m in self.errors)


class TaskValidationError(ValidationError):
    """Task input breaks the business rules:
    - title / description / due date missing on create,
    - status or priority outside the allowed values,
    - an unparsable date filter or an unknown assignee.
    """


class UserValidationError(ValidationError):
    """User input breaks the rules (blank name, e-mail without '@', unknown role)."""


class TaskNotFoundError(DomainError):
    """Raised when the requested task does not exist.
    Also covers malformed identifiers, so storage details never reach the caller.
    """
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(self.__str__())
    def __str__(self):
        return f"Task with ID {self.task_id} not found."


class ForbiddenError(DomainError):
    """Raised when the principal may not perform the requested action.

    :param reason: Human readable rule that was violated.
    """
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(self.__str__())
    def __str__(self):
        return self.reason


class TaskForbiddenError(ForbiddenError):
    """Raised when the principal may not change or delete a task.

    :param task_id: Task the caller tried to change.
    :param reason: Human readable rule that was violated.
    """
    def __init__(self, task_id: str, reason: str):
        self.task_id = task_id
        super().__init__(reason)


class AdminRequiredError(ForbiddenError):
    """User management is reserved for admins."""
    def __init__(self, reason: str = "Admin role required"):
        super().__init__(reason)


class MalformedTaskIdError(DomainError):
    """Store-level signal: the identifier does not have the store's id format.
    Services remap it to `TaskNotFoundError`.
    """
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Malformed task id: {task_id!r}")


class TaskStorageError(DomainError):
    """The store failed for a technical reason (unavailable, driver error)."""


class UserNotFoundError(DomainError):
    def __init__(self, user_ref: str):
        self.user_ref = user_ref
        super().__init__(self.__str__())
    def __str__(self):
        return f"User {self.user_ref} not found."


class UserAlreadyExistsError(DomainError):
    """Raised when a user with the same e-mail (or id) is already stored."""
    def __init__(self, user_ref: str):
        self.user_ref = user_ref
        super().__init__(self.__str__())
    def __str__(self):
        return f"User {self.user_ref} already exists."
