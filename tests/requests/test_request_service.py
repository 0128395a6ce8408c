from __future__ import annotations

import threading
import time
from datetime import datetime

import pytest

from src.eduleave.eduleave.core.enums import RequestStatus
from src.eduleave.eduleave.core.exceptions import AuthorizationError, GatewayError, NotFoundError, ValidationError
from src.eduleave.eduleave.gateway.base import ApiResponse
from src.eduleave.eduleave.requests.model import LeaveRequest
from src.eduleave.eduleave.requests.service import RequestService
from src.eduleave.eduleave.requests.store import RequestStore
from src.eduleave.eduleave.requests.view import RequestFilter, filter_requests

NOW = datetime(2026, 2, 2, 9, 0, 0)


class FakeGateway:
    """Records calls; `fail[action]` is "reject" or "raise"."""

    def __init__(self, store: RequestStore | None = None):
        self.calls = []
        self.fail: dict[str, str] = {}
        self.store = store
        self.seen_during_call: list[list[LeaveRequest]] = []

    def _outcome(self, action):
        if self.store is not None:
            self.seen_during_call.append(self.store.items)
        mode = self.fail.get(action)
        if mode == "raise":
            raise GatewayError("network down")
        if mode == "reject":
            return ApiResponse(success=False, message="rejected")
        return None

    def create_request(self, fields, acting_user):
        self.calls.append(("create_request", dict(fields), acting_user.username))
        failed = self._outcome("create_request")
        if failed:
            return failed
        is_student = acting_user.role.value == "HS"
        return ApiResponse(
            success=True,
            data={
                **fields,
                "id": "REQ-1",
                "studentName": acting_user.fullname if is_student else fields.get("studentName"),
                "class": acting_user.class_name if is_student else fields.get("class"),
                "status": RequestStatus.PENDING.value,
                "createdBy": acting_user.username,
                "createdAt": "2026-02-02T09:00:01",
            },
        )

    def update_request(self, request_id, patch):
        self.calls.append(("update_request", request_id, dict(patch)))
        return self._outcome("update_request") or ApiResponse(success=True)

    def delete_request(self, request_id):
        self.calls.append(("delete_request", request_id))
        return self._outcome("delete_request") or ApiResponse(success=True)


def _record(request_id, *, created_by="s1", status=RequestStatus.PENDING, **kw) -> LeaveRequest:
    row = {
        "id": request_id,
        "studentName": kw.pop("student_name", "Nguyễn Văn A"),
        "class": kw.pop("class_name", "10A1"),
        "week": kw.pop("week", 5),
        "reason": "Ốm",
        "fromDate": "2026-02-03",
        "toDate": "2026-02-04",
        "status": status.value,
        "createdBy": created_by,
        "createdAt": "2026-02-01T08:00:00",
    }
    return LeaveRequest.from_dict(row)


@pytest.fixture
def store():
    return RequestStore([_record("r2"), _record("r1", created_by="gv1", student_name="Trần Thị B")], clock=lambda: NOW)


@pytest.fixture
def gateway(store):
    return FakeGateway(store)


@pytest.fixture
def alerts():
    return []


@pytest.fixture
def service(gateway, store, config, alerts):
    return RequestService(gateway, store, config=lambda: config, notify=alerts.append, clock=lambda: NOW)


STUDENT_FORM = {"week": 5, "reason": "Ốm", "fromDate": "2026-02-03", "toDate": "2026-02-04"}


def test_student_create_uses_profile_and_lands_first(service, store, gateway, student):
    record = service.create({**STUDENT_FORM, "studentName": "Người Khác", "class": "12A9"}, student)

    assert record.request_id == "REQ-1"
    assert store.items[0] == record
    assert record.student_name == "Nguyễn Văn A"
    assert record.class_name == "10A1"
    assert record.status == RequestStatus.PENDING
    assert record.created_by == "s1"
    # hidden fields are not sent on behalf of a student
    _, payload, _ = gateway.calls[0]
    assert "studentName" not in payload and "class" not in payload


def test_provisional_record_is_visible_while_backend_works(service, gateway, student):
    service.create(STUDENT_FORM, student)

    during = gateway.seen_during_call[0]
    assert len(during) == 3
    assert during[0].request_id.startswith("TEMP-")
    assert during[0].status == RequestStatus.PENDING
    assert during[0].student_name == "Nguyễn Văn A"


@pytest.mark.parametrize("mode", ["reject", "raise"])
def test_failed_create_removes_provisional_and_alerts(service, store, gateway, alerts, student, mode):
    before = store.snapshot()
    gateway.fail["create_request"] = mode

    assert service.create(STUDENT_FORM, student) is None
    assert store.snapshot() == before
    assert alerts == ["Lỗi khi lưu dữ liệu."]


def test_non_student_must_name_the_student(service, store, homeroom):
    fields = {"week": 5, "studentName": "  ", "class": "10A1", **STUDENT_FORM}
    with pytest.raises(ValidationError):
        service.create(fields, homeroom)
    assert len(store) == 2


def test_week_defaults_to_current_week(service, gateway, homeroom):
    service.create({"studentName": "B", "class": "10A2", "reason": "Ốm", "fromDate": "2026-02-03", "toDate": "2026-02-03"}, homeroom)
    _, payload, _ = gateway.calls[0]
    assert payload["week"] == 5


def test_create_rejects_inverted_date_range(service, store, homeroom):
    with pytest.raises(ValidationError, match="Ngày kết thúc"):
        service.create({"week": 5, "studentName": "B", "class": "10A1", "reason": "Ốm",
                        "fromDate": "2026-02-05", "toDate": "2026-02-03"}, homeroom)
    assert len(store) == 2


def test_viewer_cannot_create(service, store, gateway, viewer):
    with pytest.raises(AuthorizationError):
        service.create(STUDENT_FORM, viewer)
    assert gateway.calls == [] and len(store) == 2


def test_update_by_author_merges_and_confirms(service, store, gateway, student):
    updated = service.update("r2", {"detail": "Sốt cao"}, student)

    assert updated.detail == "Sốt cao"
    assert store.get("r2").detail == "Sốt cao"
    assert gateway.calls == [("update_request", "r2", {"detail": "Sốt cao"})]


@pytest.mark.parametrize("mode", ["reject", "raise"])
def test_failed_update_restores_previous_list(service, store, gateway, alerts, admin, mode):
    before = store.snapshot()
    gateway.fail["update_request"] = mode

    assert service.update("r2", {"reason": "Việc riêng"}, admin) is None
    assert store.snapshot() == before
    assert alerts == ["Cập nhật thất bại."]


def test_update_by_someone_else_is_refused(service, homeroom):
    with pytest.raises(AuthorizationError):
        service.update("r2", {"detail": "x"}, homeroom)


def test_update_drops_backend_owned_keys(service, admin):
    with pytest.raises(ValidationError, match="Không có thay đổi"):
        service.update("r2", {"status": "Đã duyệt", "createdBy": "admin"}, admin)


def test_update_unknown_record(service, admin):
    with pytest.raises(NotFoundError):
        service.update("nope", {"detail": "x"}, admin)


def test_delete_removes_then_confirms(service, store, admin):
    assert service.delete("r1", admin) is True
    assert [r.request_id for r in store] == ["r2"]


def test_failed_delete_restores_record(service, store, gateway, alerts, admin):
    gateway.fail["delete_request"] = "raise"
    assert service.delete("r1", admin) is False
    assert [r.request_id for r in store] == ["r2", "r1"]
    assert alerts == ["Xóa thất bại."]


def test_only_deleters_may_delete(service, staff):
    with pytest.raises(AuthorizationError):
        service.delete("r1", staff)


def test_approval_sets_status_and_approver(service, store, gateway, admin):
    service.change_status("r1", "APPROVED", admin)

    record = store.get("r1")
    assert record.status == RequestStatus.APPROVED
    assert record.approver == "Quản Trị Viên"
    assert gateway.calls == [("update_request", "r1", {"status": "Đã duyệt", "approver": "Quản Trị Viên"})]

    approved = filter_requests(store, RequestFilter(status=RequestStatus.APPROVED), admin)
    assert [r.request_id for r in approved] == ["r1"]


def test_approver_falls_back_to_username(service, store, staff):
    service.change_status("r1", RequestStatus.REJECTED, staff)
    assert store.get("r1").approver == "bgh"


def test_failed_status_change_leaves_request_pending(service, store, gateway, alerts, admin):
    gateway.fail["update_request"] = "reject"

    assert service.change_status("r1", "APPROVED", admin) is None
    record = store.get("r1")
    assert record.status == RequestStatus.PENDING
    assert record.approver is None
    assert alerts == ["Lỗi khi cập nhật trạng thái"]


def test_status_change_requires_approval_right(service, homeroom):
    with pytest.raises(AuthorizationError):
        service.change_status("r1", "APPROVED", homeroom)


def test_decided_request_cannot_change_again(service, admin):
    service.change_status("r1", "REJECTED", admin)
    with pytest.raises(ValidationError, match="đã được xử lý"):
        service.change_status("r1", "APPROVED", admin)


def test_back_to_pending_is_not_a_decision(service, admin):
    with pytest.raises(ValidationError):
        service.change_status("r1", "Chờ duyệt", admin)


def test_update_rejects_unparseable_values(service, store, gateway, admin):
    before = store.snapshot()
    with pytest.raises(ValidationError):
        service.update("r2", {"fromDate": "not-a-date"}, admin)
    with pytest.raises(ValidationError, match="phải là số"):
        service.update("r2", {"week": "abc"}, admin)
    assert store.snapshot() == before
    assert gateway.calls == []


def test_update_checks_range_against_stored_dates(service, store, admin):
    with pytest.raises(ValidationError, match="Ngày kết thúc"):
        service.update("r2", {"toDate": "2026-02-01"}, admin)
    assert store.get("r2").to_date.isoformat() == "2026-02-04"


def test_create_rejects_non_numeric_week(service, store, gateway, homeroom):
    form = {"week": "tuần năm", "studentName": "B", "class": "10A1", "reason": "Ốm",
            "fromDate": "2026-02-03", "toDate": "2026-02-03"}
    with pytest.raises(ValidationError, match="Tuần học"):
        service.create(form, homeroom)
    assert len(store) == 2 and gateway.calls == []


class SlowGateway(FakeGateway):
    """Holds the update of `slow_id` until released, then rejects it."""

    def __init__(self, store, slow_id):
        super().__init__(store)
        self.slow_id = slow_id
        self.entered = threading.Event()
        self.release = threading.Event()

    def update_request(self, request_id, patch):
        if request_id != self.slow_id:
            return super().update_request(request_id, patch)
        self.calls.append(("update_request", request_id, dict(patch)))
        self.entered.set()
        self.release.wait(timeout=5)
        return ApiResponse(success=False, message="rejected")


def test_concurrent_mutations_do_not_undo_each_other(store, config, admin):
    gateway = SlowGateway(store, slow_id="r2")
    alerts = []
    service = RequestService(gateway, store, config=lambda: config, notify=alerts.append, clock=lambda: NOW)

    slow = threading.Thread(target=service.change_status, args=("r2", "APPROVED", admin))
    slow.start()
    assert gateway.entered.wait(timeout=5)

    fast = threading.Thread(target=service.change_status, args=("r1", "APPROVED", admin))
    fast.start()
    time.sleep(0.05)
    gateway.release.set()
    slow.join(timeout=5)
    fast.join(timeout=5)

    assert store.get("r1").status == RequestStatus.APPROVED
    assert store.get("r2").status == RequestStatus.PENDING
    assert [c[1] for c in gateway.calls] == ["r2", "r1"]
    assert alerts == ["Lỗi khi cập nhật trạng thái"]
