from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import format_iso_date, format_iso_datetime, parse_iso_date, parse_iso_datetime
from ..core.enums import RequestStatus

# wire key (sheet column) -> dataclass attribute
WIRE_FIELDS: dict[str, str] = {
    "id": "request_id",
    "studentName": "student_name",
    "class": "class_name",
    "week": "week",
    "reason": "reason",
    "detail": "detail",
    "fromDate": "from_date",
    "toDate": "to_date",
    "attachmentUrl": "attachment_url",
    "status": "status",
    "createdBy": "created_by",
    "createdAt": "created_at",
    "approver": "approver",
}


def _parse_week(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _parse_status(value) -> RequestStatus:
    try:
        return RequestStatus.parse(value)
    except ValueError:
        return RequestStatus.PENDING


def _convert(attr: str, value: Any) -> Any:
    if attr == "week":
        return _parse_week(value)
    if attr in ("from_date", "to_date", "created_at"):
        parse = parse_iso_datetime if attr == "created_at" else parse_iso_date
        try:
            return parse(value)
        except ValueError:
            return None
    if attr == "status":
        return _parse_status(value)
    if attr in ("detail", "attachment_url", "approver"):
        return str(value) if value not in (None, "") else None
    return "" if value is None else str(value)


@dataclass(frozen=True)
class LeaveRequest:
    """Đơn xin nghỉ học (một dòng trong sheet `Data`)."""

    request_id: str
    student_name: str
    class_name: str
    week: Optional[int]
    reason: str
    from_date: Optional[date]
    to_date: Optional[date]
    status: RequestStatus
    created_by: str
    created_at: Optional[datetime]
    detail: Optional[str] = None
    attachment_url: Optional[str] = None
    approver: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "LeaveRequest":
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in row.items():
            attr = WIRE_FIELDS.get(key)
            if attr:
                values[attr] = _convert(attr, value)
            else:
                extra[key] = value

        return cls(
            request_id=values.get("request_id", ""),
            student_name=values.get("student_name", ""),
            class_name=values.get("class_name", ""),
            week=values.get("week"),
            reason=values.get("reason", ""),
            from_date=values.get("from_date"),
            to_date=values.get("to_date"),
            status=values.get("status", RequestStatus.PENDING),
            created_by=values.get("created_by", ""),
            created_at=values.get("created_at"),
            detail=values.get("detail"),
            attachment_url=values.get("attachment_url"),
            approver=values.get("approver"),
            extra=extra,
        )

    def merge(self, patch: Mapping[str, Any]) -> "LeaveRequest":
        """Shallow merge of a wire-keyed patch; unknown keys land in `extra`."""
        changes: dict[str, Any] = {}
        extra = dict(self.extra)
        for key, value in patch.items():
            attr = WIRE_FIELDS.get(key)
            if attr:
                changes[attr] = _convert(attr, value)
            else:
                extra[key] = value
        return replace(self, extra=extra, **changes)

    def to_dict(self) -> dict:
        out = dict(self.extra)
        out.update(
            {
                "id": self.request_id,
                "studentName": self.student_name,
                "class": self.class_name,
                "week": self.week,
                "reason": self.reason,
                "detail": self.detail or "",
                "fromDate": format_iso_date(self.from_date),
                "toDate": format_iso_date(self.to_date),
                "attachmentUrl": self.attachment_url or "",
                "status": self.status.value,
                "createdBy": self.created_by,
                "createdAt": format_iso_datetime(self.created_at),
                "approver": self.approver or "",
            }
        )
        return out
