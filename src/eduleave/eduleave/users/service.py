from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from ..common.validators import is_blank, require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, GatewayError, NotFoundError, ValidationError
from ..gateway.base import DataGateway
from .model import User
from .permissions import permissions_for

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = frozenset({Role.HS, Role.GVCN, Role.VIEWER})
MIN_PASSWORD_LENGTH = 6


class AuthService:
    """Use case: login and self-registration."""

    def __init__(self, gateway: DataGateway):
        self._gateway = gateway

    def authenticate(self, username: str, password: str) -> User:
        username = (username or "").strip()
        if not username:
            raise AuthenticationError("Vui lòng nhập tên đăng nhập")
        try:
            res = self._gateway.login(username, password or "")
        except GatewayError:
            logger.exception("Login call failed for %s", username)
            raise AuthenticationError("Lỗi kết nối")

        if not res.success or not isinstance(res.data, dict):
            raise AuthenticationError(res.message or "Đăng nhập thất bại")
        return User.from_dict(res.data)

    def register(
        self,
        *,
        username: str,
        password: str,
        fullname: str,
        role,
        class_name: str = "",
    ) -> None:
        username = require_non_empty(username, "Tên đăng nhập")
        fullname = require_non_empty(fullname, "Họ tên")
        require_min_length(password, "Mật khẩu", MIN_PASSWORD_LENGTH)

        role = Role.parse(role)
        if role not in SELF_REGISTER_ROLES:
            raise ValidationError("Loại tài khoản không hợp lệ")

        try:
            res = self._gateway.register(
                {
                    "username": username,
                    "password": password,
                    "fullname": fullname,
                    "class": (class_name or "").strip(),
                    "role": role.value,
                }
            )
        except GatewayError:
            logger.exception("Register call failed for %s", username)
            raise ValidationError("Lỗi kết nối")
        if not res.success:
            raise ValidationError(res.message or "Đăng ký thất bại")


class UserService:
    """Use case: manage accounts (admin)."""

    def __init__(self, gateway: DataGateway, *, users: Callable[[], Sequence[User]]):
        self._gateway = gateway
        self._users = users

    @staticmethod
    def _require_admin(acting_user: Optional[User]) -> None:
        if not permissions_for(acting_user).can_configure:
            raise AuthorizationError("Bạn không có quyền")

    def _get(self, user_id: str) -> User:
        user = next((u for u in self._users() if u.user_id == str(user_id)), None)
        if user is None:
            raise NotFoundError("Tài khoản không tồn tại")
        return user

    def _call(self, fn, *args, error: str) -> None:
        try:
            res = fn(*args)
        except GatewayError:
            logger.exception("User call %s failed", getattr(fn, "__name__", fn))
            raise ValidationError(error)
        if not res.success:
            raise ValidationError(res.message or error)

    def list_users(self, acting_user: Optional[User]) -> list[User]:
        self._require_admin(acting_user)
        return list(self._users())

    def create_user(self, fields: dict, acting_user: Optional[User]) -> None:
        self._require_admin(acting_user)
        username = require_non_empty(fields.get("username"), "Tên đăng nhập")
        fullname = require_non_empty(fields.get("fullname"), "Họ tên")
        if any(u.username == username for u in self._users()):
            raise ValidationError("Tên đăng nhập đã tồn tại")

        payload = {
            "username": username,
            "fullname": fullname,
            "email": (fields.get("email") or "").strip(),
            "role": Role.parse(fields.get("role") or Role.HS).value,
            "class": (fields.get("class") or "").strip(),
        }
        password = fields.get("password") or ""
        if password:
            payload["password"] = require_min_length(password, "Mật khẩu", MIN_PASSWORD_LENGTH)
        self._call(self._gateway.create_user, payload, error="Lưu thất bại")

    def update_user(self, user_id: str, patch: dict, acting_user: Optional[User]) -> None:
        self._require_admin(acting_user)
        current = self._get(user_id)

        if "role" in patch and Role.parse(patch["role"]) != current.role:
            raise ValidationError("Không thể thay đổi vai trò của tài khoản")

        changes: dict = {}
        for key in ("username", "fullname", "email", "class"):
            if key in patch:
                changes[key] = (patch.get(key) or "").strip()
        for key in ("username", "fullname"):
            if key in changes:
                require_non_empty(changes[key], "Tên đăng nhập" if key == "username" else "Họ tên")
        if not is_blank(patch.get("password")):
            changes["password"] = require_min_length(patch["password"], "Mật khẩu", MIN_PASSWORD_LENGTH)
        if not changes:
            raise ValidationError("Không có thay đổi nào")

        self._call(self._gateway.update_user, current.user_id, changes, error="Lưu thất bại")

    def delete_user(self, user_id: str, acting_user: Optional[User]) -> None:
        self._require_admin(acting_user)
        user = self._get(user_id)
        if user.role == Role.ADMIN:
            raise ValidationError("Không thể xóa tài khoản Admin")
        self._call(self._gateway.delete_user, user.user_id, error="Xóa thất bại")
