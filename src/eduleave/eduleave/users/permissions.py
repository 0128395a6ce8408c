"""Role → capability table.

The table is static; nothing here touches state or the gateway.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from ..core.enums import RequestStatus, Role
from .model import User


@dataclass(frozen=True)
class Permissions:
    can_create_request: bool
    can_approve: bool
    can_delete: bool
    can_configure: bool

    def to_dict(self) -> dict:
        return asdict(self)


PERMISSIONS: dict[Role, Permissions] = {
    Role.ADMIN: Permissions(can_create_request=True, can_approve=True, can_delete=True, can_configure=True),
    Role.USER: Permissions(can_create_request=True, can_approve=True, can_delete=False, can_configure=False),
    Role.GVCN: Permissions(can_create_request=True, can_approve=False, can_delete=False, can_configure=False),
    Role.HS: Permissions(can_create_request=True, can_approve=False, can_delete=False, can_configure=False),
    Role.VIEWER: Permissions(can_create_request=False, can_approve=False, can_delete=False, can_configure=False),
}


def resolve_permissions(role: Optional[Role]) -> Permissions:
    if role is None:
        return PERMISSIONS[Role.VIEWER]
    return PERMISSIONS.get(Role.parse(role), PERMISSIONS[Role.VIEWER])


def permissions_for(user: Optional[User]) -> Permissions:
    return resolve_permissions(user.role if user else None)


def can_edit_request(user: Optional[User], *, created_by: str, status: RequestStatus) -> bool:
    """Only the author (or an admin) may edit, and only while still pending."""
    if user is None or status != RequestStatus.PENDING:
        return False
    return user.role == Role.ADMIN or user.username == created_by
