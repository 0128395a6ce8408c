from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền."""

    ADMIN = "ADMIN"
    USER = "USER"  # Ban giám hiệu / quản lý
    GVCN = "GVCN"  # Giáo viên chủ nhiệm
    HS = "HS"  # Học sinh / phụ huynh
    VIEWER = "VIEWER"

    @classmethod
    def parse(cls, value) -> "Role":
        if isinstance(value, Role):
            return value
        try:
            return cls(str(value or "").strip().upper())
        except ValueError:
            return cls.VIEWER


class RequestStatus(str, Enum):
    """Trạng thái đơn xin nghỉ, giá trị khớp với dữ liệu lưu ở backend."""

    PENDING = "Chờ duyệt"
    APPROVED = "Đã duyệt"
    REJECTED = "Từ chối"

    @classmethod
    def parse(cls, value) -> "RequestStatus":
        """Accept either the stored label or the member name (e.g. "APPROVED")."""
        if isinstance(value, RequestStatus):
            return value
        text = str(value or "").strip()
        for status in cls:
            if text in (status.value, status.name):
                return status
        raise ValueError(f"Unknown request status: {value!r}")


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    EMAIL = "email"
    SELECT = "select"
    MULTISELECT = "multiselect"
    FILE = "file"
    TEXTAREA = "textarea"
    PASSWORD = "password"
