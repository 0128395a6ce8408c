from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Thực thể miền (domain): User.

    Lưu ý: Đây là đối tượng dữ liệu thuần, khoá dữ liệu theo sheet `Users`
    (id, username, fullname, role, class, email, password).
    """

    user_id: str
    username: str
    fullname: str
    role: Role
    class_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.fullname or self.username

    @classmethod
    def from_dict(cls, row: dict) -> "User":
        return cls(
            user_id=str(row.get("id") or ""),
            username=str(row.get("username") or ""),
            fullname=str(row.get("fullname") or ""),
            role=Role.parse(row.get("role")),
            class_name=str(row.get("class") or "") or None,
            email=str(row.get("email") or "") or None,
            password=row.get("password") or None,
        )

    def to_dict(self, *, include_password: bool = False) -> dict:
        out = {
            "id": self.user_id,
            "username": self.username,
            "fullname": self.fullname,
            "role": self.role.value,
            "class": self.class_name or "",
            "email": self.email or "",
        }
        if include_password and self.password:
            out["password"] = self.password
        return out
