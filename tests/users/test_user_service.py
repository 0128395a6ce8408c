from __future__ import annotations

from datetime import datetime

import pytest

from src.eduleave.eduleave.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.eduleave.eduleave.gateway.mock_gateway import MockGateway
from src.eduleave.eduleave.users.service import UserService


@pytest.fixture
def gateway():
    return MockGateway(clock=lambda: datetime(2026, 2, 2, 9, 0))


@pytest.fixture
def service(gateway):
    return UserService(gateway, users=lambda: gateway.load_all_config_data().users)


def test_list_users_is_admin_only(service, admin, staff):
    assert {u.username for u in service.list_users(admin)} == {"admin", "hs1", "gv1"}
    with pytest.raises(AuthorizationError):
        service.list_users(staff)


def test_create_user(service, gateway, admin):
    service.create_user({"username": "bgh", "fullname": "Ban Giám Hiệu", "role": "USER", "password": "bgh2026"}, admin)
    assert gateway.login("bgh", "bgh2026").success


def test_create_user_rejects_duplicates(service, admin):
    with pytest.raises(ValidationError, match="đã tồn tại"):
        service.create_user({"username": "hs1", "fullname": "Dup"}, admin)


def test_update_user_fields(service, gateway, admin):
    service.update_user("u2", {"fullname": "Nguyễn Văn An", "class": "10A2"}, admin)
    data = gateway.login("hs1", "123456").data
    assert (data["fullname"], data["class"]) == ("Nguyễn Văn An", "10A2")


def test_role_cannot_change(service, gateway, admin):
    with pytest.raises(ValidationError, match="vai trò"):
        service.update_user("u2", {"role": "ADMIN"}, admin)
    assert gateway.calls[-1][0] == "load_all_config_data"


def test_same_role_in_patch_is_accepted(service, admin):
    service.update_user("u2", {"role": "HS", "email": "a@example.test"}, admin)


def test_blank_password_is_not_sent(service, gateway, admin):
    service.update_user("u3", {"fullname": "GV Mới", "password": ""}, admin)
    action, (user_id, patch) = gateway.calls[-1]
    assert action == "update_user" and "password" not in patch


def test_admin_accounts_cannot_be_deleted(service, admin):
    with pytest.raises(ValidationError, match="Admin"):
        service.delete_user("u1", admin)


def test_delete_user(service, gateway, admin):
    service.delete_user("u3", admin)
    assert not gateway.login("gv1", "123456").success


def test_unknown_user(service, admin):
    with pytest.raises(NotFoundError):
        service.delete_user("u404", admin)


def test_backend_refusal_surfaces_message(service, gateway, admin):
    gateway.fail_next("delete_user", "Sheet bị khóa")
    with pytest.raises(ValidationError, match="Sheet bị khóa"):
        service.delete_user("u3", admin)
