"""In-memory backend used for demos, offline fallback and tests.

Mirrors what the Apps Script backend does with its `Users`, `Data` and
`Config` sheets, minus the spreadsheet.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import epoch_millis, now_local
from ..core.enums import RequestStatus, Role
from ..core.exceptions import GatewayError
from ..users.model import User
from .base import ApiResponse, LoadAllResult, parse_load_all
from .uploads import encode_upload

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "123456"


def demo_seed(now: datetime) -> dict:
    today = now.date()
    return {
        "users": [
            {"id": "u1", "username": "admin", "fullname": "Quản Trị Viên (Demo)", "role": "ADMIN", "class": ""},
            {"id": "u2", "username": "hs1", "fullname": "Nguyễn Văn A (Demo)", "role": "HS", "class": "10A1"},
            {"id": "u3", "username": "gv1", "fullname": "GVCN Lớp 10A1", "role": "GVCN", "class": "10A1"},
        ],
        "requests": [
            {
                "id": "demo1", "studentName": "Nguyễn Văn A", "class": "10A1", "week": 1,
                "reason": "Ốm đau", "fromDate": (today - timedelta(days=1)).isoformat(), "toDate": today.isoformat(),
                "status": RequestStatus.APPROVED.value, "createdBy": "hs1", "createdAt": now.isoformat(),
                "approver": "Quản Trị Viên (Demo)",
            },
            {
                "id": "demo2", "studentName": "Trần Thị B", "class": "11A2", "week": 1,
                "reason": "Việc gia đình", "fromDate": (today + timedelta(days=1)).isoformat(),
                "toDate": (today + timedelta(days=1)).isoformat(),
                "status": RequestStatus.PENDING.value, "createdBy": "gv1", "createdAt": now.isoformat(),
            },
        ],
        "config": {"classes": ["10A1", "10A2", "11A1"], "reasons": ["Ốm", "Việc riêng"], "schoolName": "Trường Demo", "currentWeek": 1},
    }


class MockGateway:
    def __init__(self, seed: Optional[dict] = None, *, clock: Callable[[], datetime] = now_local):
        self._clock = clock
        data = copy.deepcopy(seed) if seed is not None else demo_seed(clock())
        self._users: list[dict] = []
        self._hashes: dict[str, str] = {}
        for row in data.get("users", []):
            self._add_user(row)
        self._requests: list[dict] = list(data.get("requests", []))
        self._config: dict = dict(data.get("config", {}))
        self._failures: dict[str, object] = {}
        self.calls: list[tuple[str, tuple]] = []
        self._last_ms = 0

    # -------- test/demo hooks --------
    def fail_next(self, action: str, message: str = "Mock failure", *, raise_error: bool = False) -> None:
        """Make the next call to `action` fail (unsuccessful response or GatewayError)."""
        self._failures[action] = GatewayError(message) if raise_error else ApiResponse(success=False, message=message)

    def _enter(self, action: str, *args) -> Optional[ApiResponse]:
        self.calls.append((action, args))
        failure = self._failures.pop(action, None)
        if isinstance(failure, GatewayError):
            raise failure
        return failure

    def _next_ms(self) -> int:
        ms = max(epoch_millis(self._clock()), self._last_ms + 1)
        self._last_ms = ms
        return ms

    def _add_user(self, row: dict) -> dict:
        row = dict(row)
        password = row.pop("password", None) or DEMO_PASSWORD
        self._hashes[str(row.get("username"))] = generate_password_hash(password)
        self._users.append(row)
        return row

    def _find(self, rows: list[dict], key: str, value: str) -> Optional[dict]:
        return next((r for r in rows if str(r.get(key)) == str(value)), None)

    # -------- auth --------
    def login(self, username: str, password: str) -> ApiResponse:
        failed = self._enter("login", username)
        if failed:
            return failed
        row = self._find(self._users, "username", username)
        if not row:
            return ApiResponse(success=False, message="Sai tài khoản hoặc mật khẩu")
        try:
            ok = check_password_hash(self._hashes.get(username, ""), password or "")
        except ValueError:
            ok = False
        if not ok:
            return ApiResponse(success=False, message="Sai tài khoản hoặc mật khẩu")
        return ApiResponse(success=True, data=dict(row))

    def register(self, fields: dict) -> ApiResponse:
        failed = self._enter("register", fields)
        if failed:
            return failed
        if self._find(self._users, "username", fields.get("username")):
            return ApiResponse(success=False, message="Tên đăng nhập đã tồn tại")
        row = self._add_user({**fields, "id": f"u{self._next_ms()}"})
        return ApiResponse(success=True, data=dict(row))

    # -------- config / bulk load --------
    def load_all_config_data(self) -> LoadAllResult:
        failed = self._enter("load_all_config_data")
        if failed:
            raise GatewayError(failed.message or "Không tải được dữ liệu")
        requests = sorted(self._requests, key=lambda r: str(r.get("createdAt") or ""), reverse=True)
        return parse_load_all(
            {"users": copy.deepcopy(self._users), "requests": copy.deepcopy(requests), "config": dict(self._config)}
        )

    def get_system_config(self) -> ApiResponse:
        failed = self._enter("get_system_config")
        if failed:
            return failed
        return ApiResponse(success=True, data=dict(self._config))

    def save_system_config(self, config: dict) -> ApiResponse:
        failed = self._enter("save_system_config", config)
        if failed:
            return failed
        self._config = dict(config)
        return ApiResponse(success=True, message="Thao tác thành công")

    # -------- leave requests --------
    def create_request(self, fields: dict, acting_user: User) -> ApiResponse:
        failed = self._enter("create_request", fields, acting_user)
        if failed:
            return failed
        is_student = acting_user.role == Role.HS
        record = {
            "id": f"mock-{self._next_ms()}",
            "studentName": acting_user.fullname if is_student else (fields.get("studentName") or "Unknown"),
            "class": (acting_user.class_name or "") if is_student else (fields.get("class") or ""),
            "week": fields.get("week"),
            "reason": fields.get("reason"),
            "detail": fields.get("detail") or "",
            "fromDate": fields.get("fromDate"),
            "toDate": fields.get("toDate"),
            "attachmentUrl": fields.get("attachmentUrl") or "",
            "status": RequestStatus.PENDING.value,
            "createdBy": acting_user.username,
            "createdAt": self._clock().isoformat(),
        }
        self._requests.append(record)
        return ApiResponse(success=True, data=dict(record))

    def update_request(self, request_id: str, patch: dict) -> ApiResponse:
        failed = self._enter("update_request", request_id, patch)
        if failed:
            return failed
        row = self._find(self._requests, "id", request_id)
        if not row:
            return ApiResponse(success=False, message="Not found")
        row.update(patch)
        return ApiResponse(success=True)

    def delete_request(self, request_id: str) -> ApiResponse:
        failed = self._enter("delete_request", request_id)
        if failed:
            return failed
        row = self._find(self._requests, "id", request_id)
        if not row:
            return ApiResponse(success=False, message="Not found")
        self._requests.remove(row)
        return ApiResponse(success=True)

    # -------- users --------
    def create_user(self, fields: dict) -> ApiResponse:
        failed = self._enter("create_user", fields)
        if failed:
            return failed
        if self._find(self._users, "username", fields.get("username")):
            return ApiResponse(success=False, message="Tên đăng nhập đã tồn tại")
        row = self._add_user({**fields, "id": f"u{self._next_ms()}"})
        return ApiResponse(success=True, data=dict(row))

    def update_user(self, user_id: str, patch: dict) -> ApiResponse:
        failed = self._enter("update_user", user_id, patch)
        if failed:
            return failed
        row = self._find(self._users, "id", user_id)
        if not row:
            return ApiResponse(success=False, message="Not found")
        patch = dict(patch)
        password = patch.pop("password", None)
        old_username = str(row.get("username"))
        new_username = str(patch.get("username") or old_username)
        if new_username != old_username and old_username in self._hashes:
            self._hashes[new_username] = self._hashes.pop(old_username)
        if password:
            self._hashes[new_username] = generate_password_hash(password)
        row.update(patch)
        return ApiResponse(success=True, data=dict(row))

    def delete_user(self, user_id: str) -> ApiResponse:
        failed = self._enter("delete_user", user_id)
        if failed:
            return failed
        row = self._find(self._users, "id", user_id)
        if not row:
            return ApiResponse(success=False, message="Not found")
        self._users.remove(row)
        return ApiResponse(success=True)

    def upload_file(self, content: bytes, name: str, mime_type: str) -> str:
        encode_upload(content, mime_type)
        failed = self._enter("upload_file", name, mime_type)
        if failed:
            raise GatewayError(failed.message or "Tải lên thất bại")
        logger.debug("mock upload %s (%d bytes)", name, len(content))
        return f"https://via.placeholder.com/150?text={name}"
