"""InfluxDB line protocol formatting."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

type Precision = Literal["ns", "u", "ms", "s", "m", "h"]
type FieldValue = str | int | float | bool

NANOSECONDS_PER_UNIT: Mapping[Precision, int] = {
    "ns": 1,
    "u": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _escape(value: str, chars: str) -> str:
    value = value.replace("\\", "\\\\")
    for char in chars:
        value = value.replace(char, f"\\{char}")
    return value


def escape_measurement(value: str) -> str:
    """Escape a measurement name."""
    return _escape(value, ", ")


def escape_key(value: str) -> str:
    """Escape a tag key, tag value or field key."""
    return _escape(value, ",= ")


def format_field_value(value: FieldValue) -> str:
    """Render a field value with its line protocol type marker."""
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    if isinstance(value, float):
        return repr(value)
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def to_timestamp(value: datetime, precision: Precision) -> int:
    """Convert a datetime to an integer timestamp in ``precision`` units.

    Naive datetimes are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    nanoseconds = (
        delta.days * 86_400 + delta.seconds
    ) * 1_000_000_000 + delta.microseconds * 1_000
    return nanoseconds // NANOSECONDS_PER_UNIT[precision]


@dataclass(frozen=True, kw_only=True)
class Point:
    """A single measurement point."""

    measurement: str
    fields: Mapping[str, FieldValue]
    tags: Mapping[str, str] = field(default_factory=dict)
    timestamp: datetime | None = None

    def to_line(self, precision: Precision = "s") -> str:
        """Render the point as one line of line protocol.

        Tags are sorted by key and empty tag values are dropped.

        Raises:
            ValueError: If the point has no fields

        """
        if not self.fields:
            raise ValueError(f"Point {self.measurement!r} has no fields")

        key = escape_measurement(self.measurement)
        tags = ",".join(
            f"{escape_key(name)}={escape_key(value)}"
            for name, value in sorted(self.tags.items())
            if value
        )
        if tags:
            key = f"{key},{tags}"

        fields = ",".join(
            f"{escape_key(name)}={format_field_value(value)}"
            for name, value in self.fields.items()
        )

        line = f"{key} {fields}"
        if self.timestamp is not None:
            line = f"{line} {to_timestamp(self.timestamp, precision)}"
        return line
