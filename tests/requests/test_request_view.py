from __future__ import annotations

import pytest

from src.eduleave.eduleave.core.enums import RequestStatus
from src.eduleave.eduleave.core.exceptions import ValidationError
from src.eduleave.eduleave.requests.model import LeaveRequest
from src.eduleave.eduleave.requests.view import (
    RequestFilter,
    available_weeks,
    dashboard_stats,
    filter_requests,
    paginate,
)


def _rec(request_id, name, *, cls="10A1", week=1, status=RequestStatus.PENDING, by="gv1"):
    return LeaveRequest.from_dict(
        {"id": request_id, "studentName": name, "class": cls, "week": week, "status": status.value, "createdBy": by}
    )


@pytest.fixture
def items():
    return [
        _rec("r5", "Nguyễn Văn A", week=2, by="s1"),
        _rec("r4", "Trần Thị B", cls="10A2", week=2, status=RequestStatus.APPROVED),
        _rec("r3", "Lê Văn C", week=1, status=RequestStatus.REJECTED),
        _rec("r2", "nguyễn văn a", week=1, status=RequestStatus.APPROVED, by="s1"),
        _rec("r1", "Phạm D", cls="11A1", week=1),
    ]


def _ids(records):
    return [r.request_id for r in records]


def test_search_is_case_insensitive_on_name_and_id(items, admin):
    assert _ids(filter_requests(items, RequestFilter(search="NGUYỄN"), admin)) == ["r5", "r2"]
    assert _ids(filter_requests(items, RequestFilter(search="R3"), admin)) == ["r3"]


def test_exact_filters_combine(items, admin):
    f = RequestFilter(class_name="10A1", status=RequestStatus.APPROVED, week=1)
    assert _ids(filter_requests(items, f, admin)) == ["r2"]


def test_filtering_keeps_newest_first_order(items, staff):
    assert _ids(filter_requests(items, RequestFilter(), staff)) == ["r5", "r4", "r3", "r2", "r1"]


def test_students_only_see_their_own(items, student):
    assert _ids(filter_requests(items, RequestFilter(), student)) == ["r5", "r2"]
    assert _ids(filter_requests(items, RequestFilter(search="Trần"), student)) == []


def test_filter_from_query_args():
    f = RequestFilter.from_args({"q": " an ", "class": "", "status": "APPROVED", "week": "3"})
    assert f == RequestFilter(search="an", class_name=None, status=RequestStatus.APPROVED, week=3)
    with pytest.raises(ValidationError):
        RequestFilter.from_args({"status": "maybe"})


@pytest.mark.parametrize("page_size", range(1, 7))
def test_pages_concatenate_to_filtered_list(items, page_size):
    first = paginate(items, page=1, page_size=page_size)
    collected = []
    for page in range(1, first.total_pages + 1):
        collected.extend(paginate(items, page=page, page_size=page_size).items)
    assert collected == items
    assert first.total == 5


def test_page_past_the_end_is_empty(items):
    page = paginate(items, page=4, page_size=2)
    assert page.items == [] and page.total_pages == 3


def test_empty_list_has_no_pages():
    page = paginate([], page=1, page_size=10)
    assert page.items == [] and page.total_pages == 0


def test_page_numbers_start_at_one(items):
    with pytest.raises(ValidationError):
        paginate(items, page=0)
    with pytest.raises(ValidationError):
        paginate(items, page=1, page_size=0)


def test_weeks_and_stats(items):
    assert available_weeks(items, 3) == [3, 2, 1]
    assert dashboard_stats(items) == dashboard_stats(items, week=None)

    stats = dashboard_stats(items, week=1)
    assert (stats.total, stats.pending, stats.approved, stats.rejected) == (3, 1, 1, 1)
