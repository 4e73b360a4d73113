from typing import Iterable, Optional, Protocol
from tasktracker.domain.task import User, UserId


class UserDirectory(Protocol):
    """Users referenced by tasks.

    The task core never owns users; it only joins on them at the read boundary.
    E-mails are unique and compared case-insensitively.
    """

    def add(self, user: User) -> None:
        """Inserts a user.

        Domain errors:
            UserAlreadyExistsError: When the id or the e-mail is already stored.
        """

    def remove(self, user_id: UserId) -> None:
        """Deletes a user; tasks that reference it keep the bare id.

        Domain errors:
            UserNotFoundError: When the user does not exist.
        """

    def get_many(self, user_ids: Iterable[UserId]) -> dict[UserId, User]:
        """Batch lookup; unknown ids are simply missing from the result."""

    def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup used to resolve a principal."""

    def list_all(self) -> list[User]:
        """All users ordered by name."""
