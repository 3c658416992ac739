"""Column types and write-time value coercion.

Tables do not reject badly typed values. Every value written to a record,
and every filter value compared against one, is coerced to the column type:

- number: parsed as float; anything unparseable (or non-finite) becomes 0
- boolean: booleans pass through; "true", "1" and numeric 1 are true
- date: datetimes, ISO 8601 strings and epoch milliseconds; invalid input
  becomes the current time
- string: everything is stringified; None becomes ""
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ColumnType(str, Enum):
    """Supported column types."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"

    @classmethod
    def values(cls) -> list[str]:
        """Get all column type values."""
        return [t.value for t in cls]

    @classmethod
    def parse(cls, value: str | None) -> "ColumnType":
        """Resolve a stored type name, falling back to string for unknown names."""
        try:
            return cls(value)
        except ValueError:
            return cls.STRING


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_datetime(value: datetime) -> str:
    """Render a datetime in the storage format (UTC, millisecond precision).

    A fixed width keeps stored dates comparable as plain strings.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds")


def parse_datetime(value: Any) -> datetime | None:
    """Parse a datetime from a datetime, ISO string or epoch milliseconds.

    Returns:
        An aware datetime, or None if the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    return None


class ValueCoercer:
    """Coerces raw values to column types.

    Coercion never fails: a value that cannot be interpreted falls back to
    a type-specific substitute.
    """

    TRUE_STRINGS = frozenset({"true", "1"})

    @classmethod
    def to_number(cls, value: Any) -> float:
        if isinstance(value, bool):
            return 1.0 if value else 0.0
        if isinstance(value, str):
            value = value.strip()
            # float() accepts digit separators, stored numbers never carry them
            if "_" in value:
                return 0.0
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(number):
            return 0.0
        return number

    @classmethod
    def to_boolean(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value in cls.TRUE_STRINGS
        if isinstance(value, (int, float)):
            return value == 1
        return False

    @classmethod
    def to_date(cls, value: Any) -> datetime:
        parsed = parse_datetime(value)
        return parsed if parsed is not None else utcnow()

    @classmethod
    def to_string(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, datetime):
            return format_datetime(value)
        return str(value)

    @classmethod
    def coerce(cls, value: Any, column_type: ColumnType | str) -> Any:
        """Coerce a value to the given column type.

        Args:
            value: The raw value.
            column_type: Target type; unknown names are treated as string.

        Returns:
            The coerced Python value (float, bool, aware datetime or str).
        """
        column_type = ColumnType.parse(column_type) if isinstance(column_type, str) else column_type

        if column_type is ColumnType.NUMBER:
            return cls.to_number(value)
        if column_type is ColumnType.BOOLEAN:
            return cls.to_boolean(value)
        if column_type is ColumnType.DATE:
            return cls.to_date(value)
        return cls.to_string(value)

    @classmethod
    def default_for(cls, column_type: ColumnType | str) -> Any:
        """Default value for a column the caller did not supply."""
        column_type = ColumnType.parse(column_type) if isinstance(column_type, str) else column_type

        if column_type is ColumnType.NUMBER:
            return 0.0
        if column_type is ColumnType.BOOLEAN:
            return False
        if column_type is ColumnType.DATE:
            return utcnow()
        return ""

    @classmethod
    def to_storage(cls, value: Any) -> Any:
        """Convert a coerced value into its JSON storage form."""
        if isinstance(value, datetime):
            return format_datetime(value)
        return value

    @classmethod
    def from_storage(cls, value: Any, column_type: ColumnType | str) -> Any:
        """Convert a stored value back into its Python form."""
        column_type = ColumnType.parse(column_type) if isinstance(column_type, str) else column_type

        if column_type is ColumnType.DATE and isinstance(value, str):
            parsed = parse_datetime(value)
            return parsed if parsed is not None else value
        if column_type is ColumnType.BOOLEAN and isinstance(value, int):
            return bool(value)
        return value
