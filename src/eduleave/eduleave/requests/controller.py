from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..container import Container
from ..core.exceptions import DomainError, GatewayError, ValidationError
from ..forms.builder import build_form_fields
from ..session.web import error_response, json_body, login_required, mutation_response, system_error
from .view import RequestFilter, available_weeks, dashboard_stats, filter_requests, is_visible_to, paginate


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        raise ValidationError(f"Tham số {name} không hợp lệ")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/requests", methods=["GET"], endpoint="list_requests")
    @login_required(container)
    def list_requests(state):
        try:
            filters = RequestFilter.from_args(request.args)
            rows = filter_requests(state.requests, filters, state.user)
            page = paginate(
                rows,
                page=_int_arg("page", 1),
                page_size=_int_arg("page_size", container.page_size),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(
            success=True,
            items=[r.to_dict() for r in page.items],
            page=page.page,
            page_size=page.page_size,
            total=page.total,
            total_pages=page.total_pages,
        )

    @app.route("/api/requests/form", methods=["GET"], endpoint="request_form")
    @login_required(container)
    def request_form(state):
        fields = build_form_fields(state.config, state.user, today=now_local().date())
        return jsonify(
            success=True,
            fields=[f.to_dict() for f in fields],
            defaults={"week": state.config.current_week},
        )

    @app.route("/api/requests", methods=["POST"], endpoint="create_request")
    @login_required(container)
    def create_request(state):
        try:
            body = json_body()
            record = state.request_service.create(body, state.user)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("creating a request")
        if record is None:
            return mutation_response(state, False)
        return mutation_response(state, True, item=record.to_dict())

    @app.route("/api/requests/<request_id>", methods=["PATCH"], endpoint="update_request")
    @login_required(container)
    def update_request(state, request_id: str):
        try:
            body = json_body()
            record = state.request_service.update(request_id, body, state.user)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("updating a request")
        if record is None:
            return mutation_response(state, False)
        return mutation_response(state, True, item=record.to_dict())

    @app.route("/api/requests/<request_id>", methods=["DELETE"], endpoint="delete_request")
    @login_required(container)
    def delete_request(state, request_id: str):
        try:
            ok = state.request_service.delete(request_id, state.user)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("deleting a request")
        return mutation_response(state, ok)

    @app.route("/api/requests/<request_id>/status", methods=["POST"], endpoint="change_request_status")
    @login_required(container)
    def change_request_status(state, request_id: str):
        try:
            body = json_body()
            record = state.request_service.change_status(request_id, body.get("status"), state.user)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return system_error("changing a request status")
        if record is None:
            return mutation_response(state, False)
        return mutation_response(state, True, item=record.to_dict())

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required(container)
    def dashboard(state):
        try:
            week = _int_arg("week", state.config.current_week)
        except DomainError as e:
            return error_response(e)
        visible = [r for r in state.requests if is_visible_to(r, state.user)]
        stats = dashboard_stats(visible, week=week)
        return jsonify(
            success=True,
            week=week,
            weeks=available_weeks(visible, state.config.current_week),
            stats={
                "total": stats.total,
                "pending": stats.pending,
                "approved": stats.approved,
                "rejected": stats.rejected,
            },
        )

    @app.route("/api/uploads", methods=["POST"], endpoint="upload_attachment")
    @login_required(container)
    def upload_attachment(state):
        file = request.files.get("file")
        if file is None or not file.filename:
            return jsonify(success=False, message="Vui lòng chọn file"), 400
        try:
            url = container.gateway.upload_file(file.read(), file.filename, file.mimetype or "")
        except DomainError as e:
            return error_response(e)
        except GatewayError:
            return system_error("uploading a file")
        return jsonify(success=True, url=url)
