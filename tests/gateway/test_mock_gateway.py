from __future__ import annotations

from datetime import datetime

import pytest

from src.eduleave.eduleave.core.exceptions import GatewayError
from src.eduleave.eduleave.gateway.mock_gateway import DEMO_PASSWORD, MockGateway

NOW = datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def gateway():
    return MockGateway(clock=lambda: NOW)


def test_demo_accounts_log_in(gateway):
    for username in ("admin", "hs1", "gv1"):
        assert gateway.login(username, DEMO_PASSWORD).success
    assert not gateway.login("admin", "wrong").success
    assert "password" not in gateway.login("admin", DEMO_PASSWORD).data


def test_created_ids_are_unique_and_newest_first(gateway, homeroom):
    a = gateway.create_request({"studentName": "X", "class": "10A1", "week": 1}, homeroom).data
    b = gateway.create_request({"studentName": "Y", "class": "10A1", "week": 1}, homeroom).data
    assert a["id"] != b["id"] and a["id"].startswith("mock-")
    assert len(gateway.load_all_config_data().requests) == 4


def test_student_records_take_profile_values(gateway, student):
    data = gateway.create_request({"studentName": "Z", "class": "12A1"}, student).data
    assert (data["studentName"], data["class"]) == ("Nguyễn Văn A", "10A1")


def test_fail_next_only_affects_one_call(gateway):
    gateway.fail_next("delete_request", "locked")
    assert gateway.delete_request("demo1").message == "locked"
    assert gateway.delete_request("demo1").success


def test_fail_next_can_raise(gateway):
    gateway.fail_next("load_all_config_data", raise_error=True)
    with pytest.raises(GatewayError):
        gateway.load_all_config_data()


def test_renamed_user_keeps_password(gateway):
    assert gateway.update_user("u3", {"username": "gvcn10a1"}).success
    assert gateway.login("gvcn10a1", DEMO_PASSWORD).success
    assert not gateway.login("gv1", DEMO_PASSWORD).success


def test_register_rejects_taken_username(gateway):
    res = gateway.register({"username": "hs1", "password": "abcdef", "fullname": "Dup", "role": "HS"})
    assert not res.success
