"""The promotion record and its JSON form."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from typing import Any, ClassVar

# The zero value of a timestamp that was never set.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_JSON_KEYS = {"id": "ID", "created_at": "CreatedAt", "updated_at": "UpdatedAt", "deleted_at": "DeletedAt"}
_FRACTION = re.compile(r"\.(\d+)")


def format_time(value: datetime) -> str:
    """Format a timestamp as RFC 3339, trimming trailing zeros of the fraction."""
    head, _, rest = value.isoformat(timespec="microseconds").partition(".")
    digits, zone = rest[:6].rstrip("0"), rest[6:]
    zone = "Z" if zone == "+00:00" else zone
    return f"{head}.{digits}{zone}" if digits else head + zone


def parse_time(value: Any) -> datetime:
    """Parse an RFC 3339 timestamp; a datetime with a time zone passes through."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"invalid time {value!r}") from exc
    else:
        raise ValueError(f"expected a time string, got {type(value).__name__}")
    if parsed.tzinfo is None:
        raise ValueError(f"time {value!r} has no time zone")
    return parsed


def _convert(name: str, value: Any) -> Any:
    if name.endswith(("_date", "_at")):
        return parse_time(value)
    if name == "id":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"expected an integer, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"expected a non-negative integer, got {value}")
        return value
    if name == "discount_value":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"expected a number, got {type(value).__name__}")
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {type(value).__name__}")
    return value


@dataclass
class Promotion:
    """A discount campaign stored in the promotion table."""

    promotion_id: str = ""
    promotion_name: str = ""
    discount_type: str = ""
    discount_value: float = 0.0
    promotion_start_date: datetime = ZERO_TIME
    promotion_end_date: datetime = ZERO_TIME
    id: int = 0
    created_at: datetime = ZERO_TIME
    updated_at: datetime = ZERO_TIME
    deleted_at: datetime | None = None

    table_name: ClassVar[str] = "promotion_table"

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form, keyed as the API exposes it."""
        result: dict[str, Any] = {}
        for field in fields(self):
            value = getattr(self, field.name)
            result[_JSON_KEYS.get(field.name, field.name)] = (
                format_time(value) if isinstance(value, datetime) else value
            )
        return result

    @classmethod
    def from_dict(cls, data: Any) -> Promotion:
        """Build a promotion from decoded JSON; raises ValueError on bad data."""
        return cls().merged(data)

    def merged(self, data: Any) -> Promotion:
        """Return a copy with the fields present in ``data`` overwritten.

        Keys match case-insensitively, unknown keys are ignored and a null
        leaves the field as it is, except for the deletion time, which it clears.
        """
        if not isinstance(data, Mapping):
            raise ValueError("invalid promotion data: expected an object")
        changes: dict[str, Any] = {}
        for key, value in data.items():
            name = _FIELD_BY_KEY.get(str(key).casefold())
            if name is None:
                continue
            if value is None:
                if name == "deleted_at":
                    changes[name] = None
                continue
            try:
                changes[name] = _convert(name, value)
            except ValueError as exc:
                raise ValueError(f"invalid value for {key!r}: {exc}") from exc
        return replace(self, **changes)


_FIELD_BY_KEY = {_JSON_KEYS.get(f.name, f.name).casefold(): f.name for f in fields(Promotion)}