from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, session

from config import get_settings_module

from .container import build_container
from .core.constants import DEFAULT_SESSION_HOURS
from .gateway.base import DataGateway
from .requests.controller import register as register_requests
from .settings.controller import register as register_settings
from .users.controller import register as register_users


def _settings_dict(module) -> dict:
    return {name: getattr(module, name) for name in dir(module) if name.isupper()}


def create_app(overrides: Optional[dict] = None, *, gateway: Optional[DataGateway] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = _settings_dict(importlib.import_module(settings_module))
    settings.update(overrides or {})

    app.secret_key = settings["SECRET_KEY"]
    app.config["DEBUG"] = bool(settings.get("DEBUG", False))
    app.config["TESTING"] = bool(settings.get("TESTING", False))
    app.json.ensure_ascii = False
    app.permanent_session_lifetime = timedelta(
        hours=float(settings.get("SESSION_LIFETIME_HOURS", DEFAULT_SESSION_HOURS))
    )

    if app.config["DEBUG"]:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger(__name__).info(
        "[eduleave] settings=%s gateway=%s", settings_module, settings.get("GATEWAY_MODE", "mock")
    )

    container = build_container(settings=settings, session_storage=session, gateway=gateway)
    app.extensions["eduleave"] = container

    register_users(app, container)
    register_requests(app, container)
    register_settings(app, container)

    return app
