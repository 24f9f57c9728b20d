from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

_EMAIL_RE = re.compile(r"^[\w+\-.]+@[a-z\d\-]+(\.[a-z\d\-]+)*\.[a-z]+$", re.IGNORECASE)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} can't be blank", errors={field_name: ["can't be blank"]})
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        msg = f"is too short (minimum is {min_len} characters)"
        raise ValidationError(f"{field_name} {msg}", errors={field_name: [msg]})
    return value


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is not None and len(value) > max_len:
        msg = f"is too long (maximum is {max_len} characters)"
        raise ValidationError(f"{field_name} {msg}", errors={field_name: [msg]})
    return value


def require_email(value: Optional[str]) -> str:
    email = require_non_empty(value, "email").lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("email is invalid", errors={"email": ["is invalid"]})
    return email


def parse_enum(enum_cls: Type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value))
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(
            f"{field_name} must be one of: {allowed}",
            errors={field_name: ["is not included in the list"]},
        ) from None


def optional_enum(enum_cls: Type[E], value, field_name: str) -> Optional[E]:
    if value is None or value == "":
        return None
    return parse_enum(enum_cls, value, field_name)


def parse_date_field(value, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date", errors={field_name: ["is not a date"]}) from None


def parse_datetime_field(value, field_name: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(
            f"{field_name} is not a valid datetime", errors={field_name: ["is not a datetime"]}
        ) from None
    return parsed.replace(tzinfo=None)


def parse_int_field(value, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", errors={field_name: ["is not a number"]}) from None


_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def parse_bool_field(value, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationError(f"{field_name} must be true or false", errors={field_name: ["is not a boolean"]})
