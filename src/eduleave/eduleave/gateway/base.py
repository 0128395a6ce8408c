from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

from ..requests.model import LeaveRequest
from ..settings.model import SystemConfig
from ..users.model import User


@dataclass(frozen=True)
class ApiResponse:
    """Envelope returned by every backend call: {success, data?, message?}."""

    success: bool
    data: Any = None
    message: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ApiResponse":
        if not isinstance(payload, dict):
            return cls(success=False, message="Phản hồi không hợp lệ từ máy chủ")
        return cls(
            success=bool(payload.get("success")),
            data=payload.get("data"),
            message=payload.get("message"),
        )


@dataclass(frozen=True)
class LoadAllResult:
    users: Sequence[User] = ()
    requests: Sequence[LeaveRequest] = ()
    config: Optional[SystemConfig] = None
    raw_config: dict = field(default_factory=dict)


class DataGateway(Protocol):
    """Giao diện tới backend lưu trữ (Apps Script/Sheets hoặc mock).

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc
    trực tiếp vào cách backend lưu dữ liệu.
    """

    def login(self, username: str, password: str) -> ApiResponse:
        raise NotImplementedError

    def register(self, fields: dict) -> ApiResponse:
        raise NotImplementedError

    def load_all_config_data(self) -> LoadAllResult:
        raise NotImplementedError

    def get_system_config(self) -> ApiResponse:
        raise NotImplementedError

    def save_system_config(self, config: dict) -> ApiResponse:
        raise NotImplementedError

    def create_request(self, fields: dict, acting_user: User) -> ApiResponse:
        """On success `data` is the stored record (wire dict)."""

        raise NotImplementedError

    def update_request(self, request_id: str, patch: dict) -> ApiResponse:
        raise NotImplementedError

    def delete_request(self, request_id: str) -> ApiResponse:
        raise NotImplementedError

    def create_user(self, fields: dict) -> ApiResponse:
        raise NotImplementedError

    def update_user(self, user_id: str, patch: dict) -> ApiResponse:
        raise NotImplementedError

    def delete_user(self, user_id: str) -> ApiResponse:
        raise NotImplementedError

    def upload_file(self, content: bytes, name: str, mime_type: str) -> str:
        """Returns the public URL of the stored file."""

        raise NotImplementedError


def parse_load_all(payload: Any) -> LoadAllResult:
    if not isinstance(payload, dict):
        return LoadAllResult()
    users = [User.from_dict(u) for u in payload.get("users") or [] if isinstance(u, dict)]
    requests = [LeaveRequest.from_dict(r) for r in payload.get("requests") or [] if isinstance(r, dict)]
    raw_config = payload.get("config") if isinstance(payload.get("config"), dict) else {}
    return LoadAllResult(
        users=users,
        requests=requests,
        config=SystemConfig.from_dict(raw_config) if raw_config else None,
        raw_config=raw_config,
    )
