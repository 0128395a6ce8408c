"""HTTP client for the Google Apps Script web app backing the spreadsheet."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, Sequence

import httpx

from ..core.exceptions import GatewayError
from ..users.model import User
from .base import ApiResponse, DataGateway, LoadAllResult, parse_load_all
from .uploads import encode_upload

logger = logging.getLogger(__name__)


class AppsScriptGateway:
    """Calls `api_*` functions of the deployed script via `{action, args}` POSTs.

    When `fallback` is given, transport failures are answered from it instead
    of raising, which keeps the app usable without a reachable backend.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 15.0,
        fallback: Optional[DataGateway] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._url = url
        self._fallback = fallback
        # Apps Script answers POSTs with a redirect to googleusercontent.com.
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def close(self) -> None:
        self._client.close()

    def _post(self, action: str, args: Sequence[Any]) -> Any:
        body = json.dumps({"action": action, "args": list(args)}, default=str)
        try:
            response = self._client.post(
                self._url,
                content=body.encode("utf-8"),
                headers={"Content-Type": "text/plain;charset=utf-8"},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise GatewayError(f"{action} failed: {e}") from e
        except ValueError as e:
            raise GatewayError(f"{action} returned invalid JSON") from e

    def _dispatch(
        self,
        action: str,
        args: Sequence[Any],
        parse: Callable[[Any], Any],
        fallback: Callable[[DataGateway], Any],
    ) -> Any:
        try:
            payload = self._post(action, args)
        except GatewayError:
            if self._fallback is None:
                raise
            logger.warning("Backend call %s failed, answering from mock data", action, exc_info=True)
            return fallback(self._fallback)
        return parse(payload)

    def login(self, username: str, password: str) -> ApiResponse:
        return self._dispatch(
            "api_login", (username, password), ApiResponse.from_payload, lambda fb: fb.login(username, password)
        )

    def register(self, fields: dict) -> ApiResponse:
        return self._dispatch("api_register", (fields,), ApiResponse.from_payload, lambda fb: fb.register(fields))

    def load_all_config_data(self) -> LoadAllResult:
        return self._dispatch("api_loadAllConfigData", (), parse_load_all, lambda fb: fb.load_all_config_data())

    def get_system_config(self) -> ApiResponse:
        return self._dispatch(
            "api_getSystemConfig", (), ApiResponse.from_payload, lambda fb: fb.get_system_config()
        )

    def save_system_config(self, config: dict) -> ApiResponse:
        return self._dispatch(
            "api_saveSystemConfig", (config,), ApiResponse.from_payload, lambda fb: fb.save_system_config(config)
        )

    def create_request(self, fields: dict, acting_user: User) -> ApiResponse:
        # The script expects the acting user as a JSON string.
        user_json = json.dumps(acting_user.to_dict(), ensure_ascii=False)
        return self._dispatch(
            "api_createRequest",
            (fields, user_json),
            ApiResponse.from_payload,
            lambda fb: fb.create_request(fields, acting_user),
        )

    def update_request(self, request_id: str, patch: dict) -> ApiResponse:
        return self._dispatch(
            "api_updateRequest",
            (request_id, patch),
            ApiResponse.from_payload,
            lambda fb: fb.update_request(request_id, patch),
        )

    def delete_request(self, request_id: str) -> ApiResponse:
        return self._dispatch(
            "api_deleteRequest", (request_id,), ApiResponse.from_payload, lambda fb: fb.delete_request(request_id)
        )

    def create_user(self, fields: dict) -> ApiResponse:
        return self._dispatch("api_createUser", (fields,), ApiResponse.from_payload, lambda fb: fb.create_user(fields))

    def update_user(self, user_id: str, patch: dict) -> ApiResponse:
        return self._dispatch(
            "api_updateUser", (user_id, patch), ApiResponse.from_payload, lambda fb: fb.update_user(user_id, patch)
        )

    def delete_user(self, user_id: str) -> ApiResponse:
        return self._dispatch(
            "api_deleteUser", (user_id,), ApiResponse.from_payload, lambda fb: fb.delete_user(user_id)
        )

    def upload_file(self, content: bytes, name: str, mime_type: str) -> str:
        encoded = encode_upload(content, mime_type)

        def parse(payload: Any) -> str:
            if not isinstance(payload, str) or not payload:
                raise GatewayError("api_uploadFile returned no URL")
            if payload.startswith("Error:"):
                raise GatewayError(payload)
            return payload

        return self._dispatch(
            "api_uploadFile",
            (encoded, name, mime_type),
            parse,
            lambda fb: fb.upload_file(content, name, mime_type),
        )
