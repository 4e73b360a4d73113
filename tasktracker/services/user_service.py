import logging

from tasktracker.domain.enums import UserRole
from tasktracker.domain.errors import AdminRequiredError, UserNotFoundError, UserValidationError
from tasktracker.domain.parsing import allowed_values, is_supplied, parse_enum
from tasktracker.domain.task import Principal, User, UserId
from tasktracker.ports.id_provider import IdProvider
from tasktracker.ports.user_directory import UserDirectory

logger = logging.getLogger(__name__)


### COMMENTS
# ==========================================================
# User management (services/user_service.py)
# ==========================================================
# - Anyone may list users (assignee candidates).
# - Adding and removing users is admin only; the role is read from the
#   directory, never trusted from the principal.
# - Removing a user leaves its tasks alone; expansion then shows the bare id.


class UserService:
    """
    Admin use cases over the user directory.

    :param users: UserDirectory implementation.
    :param id_provider: Source of new user ids.
    """
    def __init__(self, users: UserDirectory, id_provider: IdProvider) -> None:
        self.users = users
        self.id_provider = id_provider

    def list_users(self) -> list[User]:
        return self.users.list_all()

    def add_user(
        self,
        principal: Principal,
        name: str | None,
        email: str | None,
        role: str | UserRole | None = None,
    ) -> User:
        """
        Registers a user.

        :param role: "admin" or "user" (default).
        :raises AdminRequiredError: When the principal is not an admin.
        :raises UserValidationError: On a blank name, an e-mail without '@' or an unknown role.
        :raises UserAlreadyExistsError: When the e-mail is taken.
        """
        self._require_admin(principal, "add a user")

        errors: list[tuple[str, str]] = []
        if not is_supplied(name):
            errors.append(("name", "Name is required"))
        if not is_supplied(email) or "@" not in email:
            errors.append(("email", "A valid e-mail is required"))
        role_value = UserRole.USER
        if is_supplied(role):
            try:
                role_value = parse_enum(UserRole, role)
            except ValueError:
                errors.append(("role", f"Expected one of: {allowed_values(UserRole)}"))
        if errors:
            raise UserValidationError(errors)

        user = User(
            user_id=UserId(self.id_provider.new_id()),
            name=name.strip(),
            email=email.strip().lower(),
            role=role_value,
        )
        self.users.add(user)
        logger.info("user %s (%s) added by %s", user.user_id, user.role, principal.id)
        return user

    def remove_user(self, principal: Principal, user_id: UserId) -> None:
        """
        :raises AdminRequiredError: When the principal is not an admin.
        :raises UserNotFoundError: When the user does not exist.
        """
        self._require_admin(principal, "remove a user")
        self.users.remove(user_id)
        logger.info("user %s removed by %s", user_id, principal.id)

    def _require_admin(self, principal: Principal, action: str) -> None:
        found = self.users.get_many([principal.id])
        if principal.id not in found:
            raise UserNotFoundError(principal.id)
        if found[principal.id].role is not UserRole.ADMIN:
            logger.warning("%s tried to %s without the admin role", principal.id, action)
            raise AdminRequiredError()
