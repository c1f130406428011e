"""Helpers and utilities."""

from typing import Any, Callable, Iterable, List, Optional, Union
from datetime import datetime

from dateutil.parser import parse as parse_date
from pytz import UTC

TRUTHY = {'true', 'on', '1', 'yes'}


def get_tzaware_utc_now() -> datetime:
    """Generate a datetime for the current moment in UTC."""
    return datetime.now(UTC)


def list_coerce(factory: Callable[..., Any], data: Iterable) -> List[Any]:
    """Build ``factory`` instances from any dicts in ``data``."""
    return [factory(**value) if isinstance(value, dict) else value
            for value in data]


def coerce_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse ISO-8601 strings; datetimes and ``None`` pass through."""
    if isinstance(value, str):
        return parse_date(value)
    return value


def coerce_bool(value: Any) -> bool:
    """Interpret form-ish values (``"true"``, ``"on"``, ...) as booleans."""
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)


def coerce_text(value: Any) -> Optional[str]:
    """Render client-supplied values as text; lists are comma-joined."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ', '.join(str(item) for item in value if item is not None)
    return str(value)
