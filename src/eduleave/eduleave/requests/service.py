from __future__ import annotations

import threading
from datetime import datetime
from functools import wraps
from typing import Callable, Mapping, Optional

from ..common.datetime_utils import format_iso_datetime, now_local, parse_iso_date
from ..common.validators import is_blank
from ..core.constants import UNKNOWN_STUDENT_NAME
from ..core.enums import RequestStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..forms.builder import build_form_fields, validate_form_data
from ..gateway.base import DataGateway
from ..settings.model import SystemConfig
from ..users.model import User
from ..users.permissions import can_edit_request, permissions_for
from .model import LeaveRequest
from .store import RequestStore, run_optimistic

# Keys the client never sends; the backend owns them.
SERVER_OWNED_KEYS = frozenset({"id", "status", "createdBy", "createdAt", "approver"})


def _serialized(method):
    """Run the whole snapshot, remote call and rollback under the session lock."""

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class RequestService:
    """Use cases on leave requests, applied optimistically to the session store.

    Permission and validation problems raise before anything changes locally.
    Backend failures never raise: the local change is undone and a message is
    pushed through `notify`.
    """

    def __init__(
        self,
        gateway: DataGateway,
        store: RequestStore,
        *,
        config: Callable[[], SystemConfig],
        notify: Callable[[str], None],
        clock: Callable[[], datetime] = now_local,
        lock: Optional[threading.RLock] = None,
    ):
        self._gateway = gateway
        self._store = store
        self._lock = lock or threading.RLock()
        self._config = config
        self._notify = notify
        self._clock = clock

    def _require(self, request_id: str) -> LeaveRequest:
        record = self._store.get(str(request_id))
        if record is None:
            raise NotFoundError("Đơn không tồn tại")
        return record

    @staticmethod
    def _check_date_range(from_value, to_value) -> None:
        try:
            start = parse_iso_date(from_value)
            end = parse_iso_date(to_value)
        except ValueError:
            raise ValidationError("Ngày không hợp lệ (YYYY-MM-DD)")
        if start and end and end < start:
            raise ValidationError("Ngày kết thúc phải >= ngày bắt đầu")

    @_serialized
    def create(self, form_data: Mapping, acting_user: User) -> Optional[LeaveRequest]:
        """Insert a provisional record at the front, then reconcile with the backend.

        Returns the stored record, or None when the backend refused it (the
        provisional record is gone again in that case).
        """
        if not permissions_for(acting_user).can_create_request:
            raise AuthorizationError("Bạn không có quyền tạo đơn")

        config = self._config()
        now = self._clock()
        data = dict(form_data)
        if is_blank(data.get("week")):
            data["week"] = config.current_week

        fields = build_form_fields(config, acting_user, today=now.date())
        validate_form_data(fields, data)
        self._check_date_range(data.get("fromDate"), data.get("toDate"))

        payload = {
            f.key: data[f.key]
            for f in fields
            if f.key in data and not f.hidden and f.key not in SERVER_OWNED_KEYS
        }

        temp_id = self._store.next_temp_id()
        if acting_user.role == Role.HS:
            student_name = acting_user.fullname
            class_name = acting_user.class_name or ""
        else:
            student_name = payload.get("studentName") or UNKNOWN_STUDENT_NAME
            class_name = payload.get("class") or ""
        provisional = LeaveRequest.from_dict(
            {
                **payload,
                "id": temp_id,
                "studentName": student_name,
                "class": class_name,
                "status": RequestStatus.PENDING.value,
                "createdBy": acting_user.username,
                "createdAt": format_iso_datetime(now),
            }
        )

        response = run_optimistic(
            self._store,
            lambda: self._store.prepend(provisional),
            lambda: self._gateway.create_request(payload, acting_user),
            on_failure=lambda _message: self._notify("Lỗi khi lưu dữ liệu."),
            confirmed=lambda r: r.success and isinstance(r.data, dict),
            rollback=lambda: self._store.remove(temp_id),
        )
        if response is None:
            return None

        record = LeaveRequest.from_dict(response.data)
        self._store.replace(temp_id, record)
        return record

    @_serialized
    def update(self, request_id: str, patch: Mapping, acting_user: User) -> Optional[LeaveRequest]:
        current = self._require(request_id)
        if not can_edit_request(acting_user, created_by=current.created_by, status=current.status):
            raise AuthorizationError("Bạn không có quyền sửa đơn này")

        fields = build_form_fields(self._config(), acting_user, today=self._clock().date())
        editable = {f.key: f for f in fields if not f.hidden and f.key not in SERVER_OWNED_KEYS}
        changes = {k: v for k, v in patch.items() if k in editable}
        if not changes:
            raise ValidationError("Không có thay đổi nào")

        validate_form_data([editable[k] for k in changes], changes)
        merged = {**current.to_dict(), **changes}
        self._check_date_range(merged.get("fromDate"), merged.get("toDate"))

        response = run_optimistic(
            self._store,
            lambda: self._store.patch(current.request_id, changes),
            lambda: self._gateway.update_request(current.request_id, changes),
            on_failure=lambda _message: self._notify("Cập nhật thất bại."),
        )
        return self._store.get(current.request_id) if response else None

    @_serialized
    def delete(self, request_id: str, acting_user: User) -> bool:
        if not permissions_for(acting_user).can_delete:
            raise AuthorizationError("Bạn không có quyền xóa đơn")
        current = self._require(request_id)

        response = run_optimistic(
            self._store,
            lambda: self._store.remove(current.request_id),
            lambda: self._gateway.delete_request(current.request_id),
            on_failure=lambda _message: self._notify("Xóa thất bại."),
        )
        return response is not None

    @_serialized
    def change_status(self, request_id: str, new_status, acting_user: User) -> Optional[LeaveRequest]:
        if not permissions_for(acting_user).can_approve:
            raise AuthorizationError("Bạn không có quyền duyệt đơn")

        try:
            status = RequestStatus.parse(new_status)
        except ValueError:
            raise ValidationError("Trạng thái không hợp lệ")
        if status == RequestStatus.PENDING:
            raise ValidationError("Trạng thái không hợp lệ")

        current = self._require(request_id)
        if current.status != RequestStatus.PENDING:
            raise ValidationError("Yêu cầu đã được xử lý")

        changes = {"status": status.value, "approver": acting_user.display_name}
        response = run_optimistic(
            self._store,
            lambda: self._store.patch(current.request_id, changes),
            lambda: self._gateway.update_request(current.request_id, changes),
            on_failure=lambda _message: self._notify("Lỗi khi cập nhật trạng thái"),
        )
        return self._store.get(current.request_id) if response else None
