from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container
from ..core.exceptions import DomainError
from ..session.web import error_response, json_body, login_required, system_error


def register(app: Flask, container: Container) -> None:
    @app.route("/api/settings", methods=["GET"], endpoint="get_settings")
    @login_required(container)
    def get_settings(state):
        return jsonify(success=True, config=state.config.to_dict())

    @app.route("/api/settings", methods=["PUT"], endpoint="save_settings")
    @login_required(container)
    def save_settings(state):
        try:
            body = json_body()
            config = state.save_settings(body)
            return jsonify(success=True, message="Đã lưu cấu hình thành công!", config=config.to_dict())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("saving settings")
