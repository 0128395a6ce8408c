"""Flask glue shared by the controllers: per-session state lookup and guards."""

from __future__ import annotations

import logging
import uuid
from functools import wraps

from flask import jsonify, request, session

from ..container import Container
from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError, NotFoundError, ValidationError
from .state import AppState

logger = logging.getLogger(__name__)

SID_KEY = "sid"


def current_state(container: Container) -> AppState:
    """The caller's AppState; a throwaway one unless a live login is attached."""
    sid = session.get(SID_KEY)
    state = container.states.find(sid)
    if state is not None:
        if state.ensure_session():
            return state
        forget_state(container)
        return state

    state = container.states.new()
    if state.init_from_session():
        remember_state(container, state)
    elif sid:
        session.pop(SID_KEY, None)
    return state


def remember_state(container: Container, state: AppState) -> None:
    """Keep `state` for the following requests of this browser session."""
    sid = session.get(SID_KEY)
    if not sid:
        sid = uuid.uuid4().hex
        session[SID_KEY] = sid
        session.permanent = True
    container.states.add(sid, state)


def forget_state(container: Container) -> None:
    sid = session.pop(SID_KEY, None)
    if sid:
        container.states.drop(sid)


def login_required(container: Container):
    """Route decorator; the view receives the session's AppState as first argument."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            state = current_state(container)
            if state.user is None:
                return jsonify(success=False, message="Vui lòng đăng nhập để tiếp tục!"), 401
            return view(state, *args, **kwargs)

        return wrapper

    return decorator


def error_response(e: DomainError):
    status = 400
    if isinstance(e, AuthenticationError):
        status = 401
    elif isinstance(e, AuthorizationError):
        status = 403
    elif isinstance(e, NotFoundError):
        status = 404
    return jsonify(success=False, message=str(e)), status


def system_error(action: str):
    logger.exception("Unexpected error while %s", action)
    return jsonify(success=False, message="Lỗi hệ thống"), 500


def mutation_response(state: AppState, ok: bool, **payload):
    """Backend failures are not HTTP errors: the change was rolled back and reported."""
    return jsonify(success=ok, alerts=state.drain_alerts(), **payload), 200 if ok else 502


def json_body() -> dict:
    """The request's JSON object; a missing body counts as empty."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Dữ liệu gửi lên không hợp lệ")
    return body
