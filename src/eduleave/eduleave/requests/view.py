"""Read-side helpers: filtering, pagination and dashboard counters.

All functions are pure and recomputed from the current store contents.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import ceil
from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import RequestStatus, Role
from ..core.exceptions import ValidationError
from ..users.model import User
from .model import LeaveRequest


@dataclass(frozen=True)
class RequestFilter:
    search: str = ""
    class_name: Optional[str] = None
    status: Optional[RequestStatus] = None
    week: Optional[int] = None

    @classmethod
    def from_args(cls, args) -> "RequestFilter":
        """Build from query-string style values; blanks mean "no filter"."""
        status = (args.get("status") or "").strip()
        week = (str(args.get("week") or "")).strip()
        try:
            return cls(
                search=(args.get("q") or "").strip(),
                class_name=(args.get("class") or "").strip() or None,
                status=RequestStatus.parse(status) if status else None,
                week=int(week) if week else None,
            )
        except ValueError:
            raise ValidationError("Bộ lọc không hợp lệ")


@dataclass(frozen=True)
class Page:
    items: Sequence[LeaveRequest]
    page: int
    page_size: int
    total: int
    total_pages: int


@dataclass(frozen=True)
class DashboardStats:
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0


def is_visible_to(record: LeaveRequest, viewer: Optional[User]) -> bool:
    if viewer is not None and viewer.role == Role.HS:
        return record.created_by == viewer.username
    return True


def filter_requests(
    items: Iterable[LeaveRequest],
    filters: RequestFilter,
    viewer: Optional[User],
) -> list[LeaveRequest]:
    term = filters.search.lower()
    out: list[LeaveRequest] = []
    for r in items:
        if term and term not in (r.student_name or "").lower() and term not in (r.request_id or "").lower():
            continue
        if filters.class_name and r.class_name != filters.class_name:
            continue
        if filters.status and r.status != filters.status:
            continue
        if filters.week is not None and r.week != filters.week:
            continue
        if not is_visible_to(r, viewer):
            continue
        out.append(r)
    return out


def paginate(items: Sequence[LeaveRequest], *, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    if page < 1 or page_size < 1:
        raise ValidationError("Trang không hợp lệ")
    total = len(items)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        page=page,
        page_size=page_size,
        total=total,
        total_pages=ceil(total / page_size),
    )


def available_weeks(items: Iterable[LeaveRequest], current_week: Optional[int]) -> list[int]:
    weeks = {r.week for r in items if r.week}
    if current_week:
        weeks.add(int(current_week))
    return sorted(weeks, reverse=True)


def dashboard_stats(items: Iterable[LeaveRequest], *, week: Optional[int] = None) -> DashboardStats:
    counts = {status: 0 for status in RequestStatus}
    total = 0
    for r in items:
        if week is not None and r.week != week:
            continue
        total += 1
        counts[r.status] += 1
    return DashboardStats(
        total=total,
        pending=counts[RequestStatus.PENDING],
        approved=counts[RequestStatus.APPROVED],
        rejected=counts[RequestStatus.REJECTED],
    )
