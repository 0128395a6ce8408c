from __future__ import annotations

import logging
from typing import Mapping, Optional

from ..common.validators import require_non_empty, require_positive_int, split_csv_list
from ..core.exceptions import AuthorizationError, GatewayError, ValidationError
from ..gateway.base import DataGateway
from ..users.model import User
from ..users.permissions import permissions_for
from .model import SystemConfig

logger = logging.getLogger(__name__)


class SettingsService:
    """Use case: read and save the shared system configuration."""

    def __init__(self, gateway: DataGateway):
        self._gateway = gateway

    def fetch(self, base: SystemConfig) -> SystemConfig:
        """Remote config overlaid on `base`; a failing backend leaves `base` as is."""
        try:
            res = self._gateway.get_system_config()
        except GatewayError:
            logger.warning("Config load failed", exc_info=True)
            return base
        if res.success and isinstance(res.data, dict):
            return base.merged(res.data)
        return base

    def save(self, values: Mapping, acting_user: Optional[User], *, current: SystemConfig) -> SystemConfig:
        if not permissions_for(acting_user).can_configure:
            raise AuthorizationError("Bạn không có quyền")

        config = SystemConfig(
            school_name=require_non_empty(values.get("schoolName", current.school_name), "Tên trường"),
            classes=tuple(split_csv_list(values.get("classes", current.classes))),
            reasons=tuple(split_csv_list(values.get("reasons", current.reasons))),
            current_week=require_positive_int(values.get("currentWeek", current.current_week), "Tuần hiện tại"),
            extra=dict(current.extra),
        )

        try:
            res = self._gateway.save_system_config(config.to_dict())
        except GatewayError:
            logger.exception("Saving config failed")
            raise ValidationError("Lỗi khi lưu cấu hình")
        if not res.success:
            raise ValidationError(res.message or "Lỗi khi lưu cấu hình")
        return config
