from tasktracker.domain.errors import UserAlreadyExistsError, UserNotFoundError
from tasktracker.domain.task import User, UserId
from typing import Iterable, Optional


class InMemoryUserDirectory:
    """Dictionary-backed user directory, keyed by `user_id`; e-mails are unique."""

    def __init__(self, initial: Iterable[User] | None = None) -> None:
        self._data: dict[UserId, User] = {}
        for u in (initial or []):
            self.add(u)

    def add(self, user: User) -> None:
        if user.user_id in self._data:
            raise UserAlreadyExistsError(user.user_id)
        if self.find_by_email(user.email) is not None:
            raise UserAlreadyExistsError(user.email)
        self._data[user.user_id] = user

    def remove(self, user_id: UserId) -> None:
        if user_id not in self._data:
            raise UserNotFoundError(user_id)
        del self._data[user_id]

    def get_many(self, user_ids: Iterable[UserId]) -> dict[UserId, User]:
        return {uid: self._data[uid] for uid in set(user_ids) if uid in self._data}

    def find_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self._data.values():
            if user.email.lower() == wanted:
                return user
        return None

    def list_all(self) -> list[User]:
        return sorted(self._data.values(), key=lambda u: (u.name, u.user_id))
