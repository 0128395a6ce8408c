from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import MutableMapping, Optional

from .core.constants import APP_NAME, DEFAULT_PAGE_SIZE, DEFAULT_SESSION_HOURS
from .gateway.apps_script_gateway import AppsScriptGateway
from .gateway.base import DataGateway
from .gateway.mock_gateway import MockGateway
from .session.state import AppState, StateRegistry
from .session.store import SessionStore
from .settings.model import SystemConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    gateway: DataGateway
    states: StateRegistry
    page_size: int


def build_gateway(settings: dict) -> DataGateway:
    mode = str(settings.get("GATEWAY_MODE", "mock")).lower()
    if mode == "mock":
        return MockGateway()

    url = str(settings.get("GATEWAY_URL") or "")
    if not url:
        raise RuntimeError("GATEWAY_URL must be configured when GATEWAY_MODE=http")
    fallback = MockGateway() if settings.get("GATEWAY_FALLBACK_TO_MOCK", False) else None
    return AppsScriptGateway(url, timeout=float(settings.get("GATEWAY_TIMEOUT", 15.0)), fallback=fallback)


def build_container(
    *,
    settings: dict,
    session_storage: MutableMapping,
    gateway: Optional[DataGateway] = None,
) -> Container:
    gateway = gateway or build_gateway(settings)
    lifetime = timedelta(hours=float(settings.get("SESSION_LIFETIME_HOURS", DEFAULT_SESSION_HOURS)))
    default_config = SystemConfig(school_name=str(settings.get("APP_NAME") or APP_NAME))

    def new_state() -> AppState:
        return AppState(
            gateway,
            SessionStore(session_storage, lifetime=lifetime),
            default_config=default_config,
        )

    logger.info("Gateway: %s", type(gateway).__name__)
    return Container(
        gateway=gateway,
        states=StateRegistry(new_state, idle_timeout=lifetime),
        page_size=int(settings.get("PAGE_SIZE", DEFAULT_PAGE_SIZE)),
    )
