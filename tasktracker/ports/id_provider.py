from typing import Protocol

class IdProvider(Protocol):
    """Generates new task/user identifiers (the SQL store expects UUID strings)."""
    def new_id(self) -> str:
        pass
