from typing import Protocol
from datetime import datetime

class Clock(Protocol):
    """Time source for `created_at` and seed due dates. Returns aware UTC datetimes."""
    def now(self) -> datetime:
        pass
