from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Type, TypeVar, Union

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date, to_instant

E = TypeVar("E", bound=Enum)


def clean_text(value: Any, field_name: str) -> str:
    """Stripped text value; ``None`` becomes an empty string."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"Το πεδίο {field_name} πρέπει να είναι κείμενο")
    return value.strip()


def require_non_empty(value: Optional[str], field_name: str) -> str:
    v = clean_text(value, field_name)
    if not v:
        raise ValidationError(f"Το πεδίο {field_name} είναι υποχρεωτικό")
    return v


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name}: τουλάχιστον {min_len} χαρακτήρες")
    return value


def optional_text(value: Optional[str], field_name: str = "κειμένου") -> Optional[str]:
    return clean_text(value, field_name) or None


def require_email(value: Optional[str], field_name: str = "email") -> str:
    v = require_non_empty(value, field_name)
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValidationError(f"Μη έγκυρο {field_name}")
    return v.lower()


def require_instant(value: Union[datetime, str, None], field_name: str) -> datetime:
    instant = optional_instant(value, field_name)
    if instant is None:
        raise ValidationError(f"Το πεδίο {field_name} είναι υποχρεωτικό")
    return instant


def optional_instant(value: Union[datetime, str, None], field_name: str) -> Optional[datetime]:
    try:
        return to_instant(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Μη έγκυρη ημερομηνία/ώρα στο πεδίο {field_name}")


def parse_choice(enum_cls: Type[E], value: Any, field_name: str) -> E:
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Μη έγκυρη τιμή στο πεδίο {field_name}: {value}")


def optional_date(value: Union[date, str, None], field_name: str) -> Optional[date]:
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Μη έγκυρη ημερομηνία στο πεδίο {field_name} (YYYY-MM-DD)")
