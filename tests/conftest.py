from __future__ import annotations

from datetime import datetime

import pytest

from src.eduleave.eduleave.core.enums import Role
from src.eduleave.eduleave.settings.model import SystemConfig
from src.eduleave.eduleave.users.model import User

FIXED_NOW = datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def config() -> SystemConfig:
    return SystemConfig(
        school_name="Trường Demo",
        classes=("10A1", "10A2", "11A1"),
        reasons=("Ốm", "Việc riêng"),
        current_week=5,
    )


@pytest.fixture
def admin() -> User:
    return User(user_id="u1", username="admin", fullname="Quản Trị Viên", role=Role.ADMIN)


@pytest.fixture
def staff() -> User:
    return User(user_id="u2", username="bgh", fullname="", role=Role.USER)


@pytest.fixture
def homeroom() -> User:
    return User(user_id="u3", username="gv1", fullname="GVCN Lớp 10A1", role=Role.GVCN, class_name="10A1")


@pytest.fixture
def student() -> User:
    return User(user_id="u4", username="s1", fullname="Nguyễn Văn A", role=Role.HS, class_name="10A1")


@pytest.fixture
def viewer() -> User:
    return User(user_id="u5", username="baove", fullname="Bảo Vệ", role=Role.VIEWER)
