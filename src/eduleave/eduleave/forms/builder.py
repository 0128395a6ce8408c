from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import format_iso_date, parse_iso_date
from ..common.validators import is_blank
from ..core.enums import FieldKind, Role
from ..core.exceptions import ValidationError
from ..settings.model import SystemConfig
from ..users.model import User
from ..users.permissions import permissions_for
from .model import LEAVE_REQUEST_FIELDS, FieldConfig

# Filled in from the student's own profile, never typed by them.
STUDENT_HIDDEN_KEYS = frozenset({"status", "studentName", "class"})


def build_form_fields(
    config: SystemConfig,
    user: Optional[User],
    *,
    today: date,
    base: Sequence[FieldConfig] = LEAVE_REQUEST_FIELDS,
) -> list[FieldConfig]:
    """Derive the editable field list for `user` from the configured options."""
    fields = list(base)
    if config.classes:
        fields = [replace(f, options=tuple(config.classes)) if f.key == "class" else f for f in fields]
    if config.reasons:
        fields = [replace(f, options=tuple(config.reasons)) if f.key == "reason" else f for f in fields]

    if user is not None and user.role == Role.HS:
        out: list[FieldConfig] = []
        for f in fields:
            if f.key in STUDENT_HIDDEN_KEYS:
                continue
            if f.key == "week":
                f = replace(f, min_value=config.current_week)
            elif f.key == "fromDate":
                f = replace(f, min_value=format_iso_date(today))
            out.append(f)
        return out

    if not permissions_for(user).can_approve:
        fields = [f for f in fields if f.key != "status"]
    return fields


def required_keys(fields: Iterable[FieldConfig]) -> list[str]:
    return [f.key for f in fields if f.required and not f.hidden]


def validate_form_data(fields: Iterable[FieldConfig], data: dict) -> None:
    """Required-field, type and minimum-value checks for a submitted form."""
    for f in fields:
        if f.hidden:
            continue
        value = data.get(f.key)
        if is_blank(value):
            if f.required:
                raise ValidationError(f"{f.label} không được để trống")
            continue
        parsed = _parse_value(f, value)
        if f.min_value is None or parsed is None:
            continue
        if parsed < _parse_value(f, f.min_value):
            raise ValidationError(f"{f.label} không được nhỏ hơn {f.min_value}")


def _parse_value(f: FieldConfig, value):
    """Typed value of a number or date field; None for other kinds."""
    if f.kind == FieldKind.NUMBER:
        if isinstance(value, bool):
            raise ValidationError(f"{f.label} phải là số")
        try:
            return int(str(value).strip())
        except ValueError:
            raise ValidationError(f"{f.label} phải là số")
    if f.kind == FieldKind.DATE:
        try:
            return parse_iso_date(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{f.label} không hợp lệ (YYYY-MM-DD)")
    return None
