from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, MutableMapping, Optional

from ..common.datetime_utils import epoch_millis, now_local
from ..core.constants import DEFAULT_SESSION_HOURS, SESSION_KEY
from ..users.model import User

logger = logging.getLogger(__name__)


class SessionStore:
    """Persists the logged-in user as `{user, expiry}` under a single key.

    `storage` is any mutable mapping: the Flask session in the web app, a
    plain dict in tests.
    """

    def __init__(
        self,
        storage: MutableMapping,
        *,
        key: str = SESSION_KEY,
        lifetime: timedelta = timedelta(hours=DEFAULT_SESSION_HOURS),
        clock: Callable[[], datetime] = now_local,
    ):
        self._storage = storage
        self._key = key
        self._lifetime = lifetime
        self._clock = clock

    def save(self, user: User) -> int:
        expiry = epoch_millis(self._clock() + self._lifetime)
        self._storage[self._key] = {"user": user.to_dict(), "expiry": expiry}
        return expiry

    def load(self) -> Optional[User]:
        entry = self._storage.get(self._key)
        if not entry:
            return None
        try:
            expiry = int(entry["expiry"])
            user = User.from_dict(entry["user"])
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning("Discarding malformed session entry")
            self.clear()
            return None

        if epoch_millis(self._clock()) >= expiry:
            logger.info("Session for %s expired", user.username)
            self.clear()
            return None
        return user

    def clear(self) -> None:
        self._storage.pop(self._key, None)
