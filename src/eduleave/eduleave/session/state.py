from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.exceptions import GatewayError
from ..gateway.base import DataGateway
from ..requests.service import RequestService
from ..requests.store import RequestStore
from ..settings.model import SystemConfig
from ..settings.service import SettingsService
from ..users.model import User
from ..users.permissions import Permissions, permissions_for
from ..users.service import AuthService, UserService
from .store import SessionStore

logger = logging.getLogger(__name__)


class AppState:
    """Everything one logged-in client works with.

    Lifecycle: `init_from_session()` on first contact, `login()` /
    `populate()` after authentication, `logout()` (or an expired session)
    clears it again.
    """

    def __init__(
        self,
        gateway: DataGateway,
        session: SessionStore,
        *,
        default_config: Optional[SystemConfig] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._gateway = gateway
        self._session = session
        self.user: Optional[User] = None
        self.users: list[User] = []
        self.config = default_config or SystemConfig()
        self.requests = RequestStore(clock=clock)
        self.alerts: list[str] = []
        # One writer at a time per session, even under a threaded server.
        self.lock = threading.RLock()

        self.auth_service = AuthService(gateway)
        self.settings_service = SettingsService(gateway)
        self.user_service = UserService(gateway, users=lambda: self.users)
        self.request_service = RequestService(
            gateway,
            self.requests,
            config=lambda: self.config,
            notify=self.alert,
            clock=clock,
            lock=self.lock,
        )

    @property
    def permissions(self) -> Permissions:
        return permissions_for(self.user)

    def alert(self, message: str) -> None:
        logger.warning("Alert for %s: %s", self.user.username if self.user else "-", message)
        self.alerts.append(message)

    def drain_alerts(self) -> list[str]:
        out, self.alerts = self.alerts, []
        return out

    def init_from_session(self) -> bool:
        self.config = self.settings_service.fetch(self.config)
        user = self._session.load()
        if user is None:
            return False
        self.user = user
        self.populate()
        return True

    def ensure_session(self) -> bool:
        """False (and a cleared state) once the persisted session is gone or expired."""
        if self.user is None:
            return False
        if self._session.load() is None:
            self._reset()
            return False
        return True

    def login(self, username: str, password: str) -> User:
        user = self.auth_service.authenticate(username, password)
        self.user = user
        self._session.save(user)
        self.populate()
        return user

    def populate(self) -> None:
        try:
            result = self._gateway.load_all_config_data()
        except GatewayError:
            logger.exception("Loading data failed")
            self.alert("Không tải được dữ liệu")
            return

        with self.lock:
            self.requests.reset(result.requests)
            self.users = list(result.users)
            if result.raw_config:
                self.config = self.config.merged(result.raw_config)

    def save_settings(self, values) -> SystemConfig:
        self.config = self.settings_service.save(values, self.user, current=self.config)
        return self.config

    def logout(self) -> None:
        self._session.clear()
        self._reset()

    def _reset(self) -> None:
        with self.lock:
            self.user = None
            self.users = []
            self.requests.clear()
            self.alerts = []


class StateRegistry:
    """Maps a browser session id to the AppState of a logged-in client.

    Anonymous callers get a throwaway state from `new()`; only `add()` keeps
    one. Entries untouched for longer than `idle_timeout` are evicted.
    """

    def __init__(
        self,
        factory: Callable[[], AppState],
        *,
        idle_timeout: Optional[timedelta] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._factory = factory
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._states: dict[str, tuple[AppState, datetime]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._states)

    def new(self) -> AppState:
        return self._factory()

    def find(self, sid: Optional[str]) -> Optional[AppState]:
        if not sid:
            return None
        with self._lock:
            self._evict_idle()
            entry = self._states.get(sid)
            if entry is None:
                return None
            self._states[sid] = (entry[0], self._clock())
            return entry[0]

    def add(self, sid: str, state: AppState) -> None:
        with self._lock:
            self._evict_idle()
            self._states[sid] = (state, self._clock())

    def drop(self, sid: Optional[str]) -> None:
        with self._lock:
            self._states.pop(sid, None)

    def _evict_idle(self) -> None:
        if self._idle_timeout is None:
            return
        cutoff = self._clock() - self._idle_timeout
        stale = [sid for sid, (_, seen) in self._states.items() if seen <= cutoff]
        for sid in stale:
            del self._states[sid]
        if stale:
            logger.info("Evicted %d idle session state(s)", len(stale))
