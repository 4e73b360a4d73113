from datetime import date, datetime
from enum import Enum
from typing import TypeVar

E = TypeVar("E", bound=Enum)


def is_supplied(value: object) -> bool:
    """Transport rule: None and blank strings mean "not supplied"."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def parse_date(value: str | date | datetime) -> date:
    """
    Accepts a `date`, a `datetime` (its date part is used) or an ISO string
    (`YYYY-MM-DD` or a full ISO timestamp).

    :raises ValueError: When the string is not ISO 8601.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def parse_enum(enum_cls: type[E], value: str | E) -> E:
    """
    :raises ValueError: When `value` is not one of the enum values.
    """
    if isinstance(value, enum_cls):
        return value
    return enum_cls(str(value).strip().lower())


def allowed_values(enum_cls: type[Enum]) -> str:
    return ", ".join(str(m.value) for m in enum_cls)


def parse_positive_int(value: object, default: int) -> int:
    """Page/limit rule: anything non-numeric or below 1 falls back to `default`."""
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default
