"""In-memory list of leave requests for one session.

Every mutation is applied locally first; `run_optimistic` takes care of
undoing it when the backend does not confirm.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Iterator, Mapping, Optional, TypeVar

from ..common.datetime_utils import epoch_millis, now_local
from ..core.constants import TEMP_ID_PREFIX
from ..core.exceptions import GatewayError
from ..gateway.base import ApiResponse
from .model import LeaveRequest

logger = logging.getLogger(__name__)

Snapshot = tuple[LeaveRequest, ...]
Listener = Callable[["RequestStore"], None]
R = TypeVar("R", bound=ApiResponse)


class RequestStore:
    """Ordered newest-first; records are immutable so a snapshot is a tuple copy."""

    def __init__(self, items: Iterable[LeaveRequest] = (), *, clock: Callable[[], datetime] = now_local):
        self._items: list[LeaveRequest] = list(items)
        self._listeners: list[Listener] = []
        self._clock = clock
        self._last_temp_ms = 0

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[LeaveRequest]:
        return iter(list(self._items))

    @property
    def items(self) -> list[LeaveRequest]:
        return list(self._items)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in self._listeners:
            listener(self)

    def get(self, request_id: str) -> Optional[LeaveRequest]:
        return next((r for r in self._items if r.request_id == request_id), None)

    def snapshot(self) -> Snapshot:
        return tuple(self._items)

    def restore(self, snapshot: Snapshot) -> None:
        self._items = list(snapshot)
        self._changed()

    def reset(self, items: Iterable[LeaveRequest]) -> None:
        self._items = list(items)
        self._changed()

    def clear(self) -> None:
        self.reset(())

    def prepend(self, record: LeaveRequest) -> None:
        self._items.insert(0, record)
        self._changed()

    def replace(self, request_id: str, record: LeaveRequest) -> bool:
        for i, r in enumerate(self._items):
            if r.request_id == request_id:
                self._items[i] = record
                self._changed()
                return True
        return False

    def patch(self, request_id: str, changes: Mapping) -> Optional[LeaveRequest]:
        current = self.get(request_id)
        if current is None:
            return None
        updated = current.merge(changes)
        self.replace(request_id, updated)
        return updated

    def remove(self, request_id: str) -> bool:
        before = len(self._items)
        self._items = [r for r in self._items if r.request_id != request_id]
        if len(self._items) == before:
            return False
        self._changed()
        return True

    def next_temp_id(self) -> str:
        """`TEMP-<epoch ms>`; bumped by 1 ms when two calls land in the same millisecond."""
        ms = max(epoch_millis(self._clock()), self._last_temp_ms + 1)
        self._last_temp_ms = ms
        return f"{TEMP_ID_PREFIX}{ms}"


def run_optimistic(
    store: RequestStore,
    mutate: Callable[[], None],
    remote_call: Callable[[], R],
    *,
    on_failure: Callable[[Optional[str]], None],
    confirmed: Callable[[R], bool] = lambda response: response.success,
    rollback: Optional[Callable[[], None]] = None,
) -> Optional[R]:
    """Snapshot, apply `mutate` locally, then confirm with `remote_call`.

    A response failing `confirmed` or a GatewayError undoes the mutation
    (`rollback`, or restoring the snapshot) and calls `on_failure` with the
    backend message if any. Returns the confirmed response, otherwise None.
    """
    snapshot = store.snapshot()

    def undo() -> None:
        if rollback is not None:
            rollback()
        else:
            store.restore(snapshot)

    mutate()
    try:
        response = remote_call()
    except GatewayError as e:
        logger.warning("Remote mutation failed, rolling back: %s", e)
        undo()
        on_failure(None)
        return None

    if not confirmed(response):
        logger.warning("Remote mutation rejected, rolling back: %s", response.message)
        undo()
        on_failure(response.message)
        return None
    return response
