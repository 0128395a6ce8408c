from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..core.exceptions import DomainError
from ..session.web import (
    current_state,
    error_response,
    forget_state,
    json_body,
    login_required,
    remember_state,
    system_error,
)


def _session_payload(state) -> dict:
    return {
        "user": state.user.to_dict() if state.user else None,
        "permissions": state.permissions.to_dict(),
        "config": state.config.to_dict(),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        state = current_state(container)
        try:
            body = json_body()
            state.login(body.get("username", ""), body.get("password", ""))
            remember_state(container, state)
            return jsonify(success=True, alerts=state.drain_alerts(), **_session_payload(state))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("logging in")

    @app.route("/api/register", methods=["POST"], endpoint="register")
    def register_account():
        state = current_state(container)
        try:
            body = json_body()
            state.auth_service.register(
                username=body.get("username", ""),
                password=body.get("password", ""),
                fullname=body.get("fullname", ""),
                role=body.get("role", "HS"),
                class_name=body.get("class", ""),
            )
            return jsonify(success=True, message="Đăng ký thành công!")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("registering")

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        state = current_state(container)
        state.logout()
        forget_state(container)
        return jsonify(success=True, message="Đã đăng xuất hệ thống.")

    @app.route("/api/session", methods=["GET"], endpoint="current_session")
    def current_session():
        state = current_state(container)
        return jsonify(success=True, **_session_payload(state))

    @app.route("/api/refresh", methods=["POST"], endpoint="refresh")
    @login_required(container)
    def refresh(state):
        state.populate()
        return jsonify(success=True, alerts=state.drain_alerts(), total=len(state.requests))

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @login_required(container)
    def list_users(state):
        try:
            users = state.user_service.list_users(state.user)
            return jsonify(success=True, users=[u.to_dict() for u in users])
        except DomainError as e:
            return error_response(e)

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @login_required(container)
    def create_user(state):
        try:
            body = json_body()
            state.user_service.create_user(body, state.user)
            state.populate()
            return jsonify(success=True, message="Thêm tài khoản thành công!"), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("creating a user")

    @app.route("/api/users/<user_id>", methods=["PATCH"], endpoint="update_user")
    @login_required(container)
    def update_user(state, user_id: str):
        try:
            body = json_body()
            state.user_service.update_user(user_id, body, state.user)
            state.populate()
            return jsonify(success=True, message="Đã cập nhật tài khoản.")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("updating a user")

    @app.route("/api/users/<user_id>", methods=["DELETE"], endpoint="delete_user")
    @login_required(container)
    def delete_user(state, user_id: str):
        try:
            state.user_service.delete_user(user_id, state.user)
            state.populate()
            return jsonify(success=True, message="Đã xóa tài khoản.")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("deleting a user")
