from __future__ import annotations

from typing import Iterable, Union

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} không hợp lệ")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} tối thiểu {min_len} ký tự")
    return value


def require_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} phải là số")
    if number < 1:
        raise ValidationError(f"{field_name} phải lớn hơn 0")
    return number


def split_csv_list(value: Union[str, Iterable[str], None]) -> list[str]:
    """Accept 'a, b,,c' or ['a', ' b'] and return trimmed non-empty items."""
    if value is None:
        return []
    parts = value.split(",") if isinstance(value, str) else list(value)
    return [str(p).strip() for p in parts if str(p).strip()]


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
