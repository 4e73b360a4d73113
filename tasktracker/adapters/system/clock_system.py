from tasktracker.ports.clock import Clock
from datetime import datetime, timezone

class SystemClock(Clock):
    """System adapter backed by the current UTC time."""

    def now(self) -> datetime:
        """Current time, aware, in UTC."""
        return datetime.now(timezone.utc)
