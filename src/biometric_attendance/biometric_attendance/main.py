from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .credentials.controller import register as register_credentials
from .face.controller import register as register_face
from .webauthn.controller import register as register_biometric

LOG_FORMAT = "[biometric-attendance] %(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def create_app(*, settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    api_config = getattr(settings, "API_CONFIG")
    authenticator_config = getattr(settings, "AUTHENTICATOR_CONFIG")

    configure_logging(getattr(settings, "LOG_LEVEL", "DEBUG" if app.config["DEBUG"] else "INFO"))
    if app.config["DEBUG"]:
        logger.info(
            "settings=%s api=%s authenticator=%s",
            settings_module,
            api_config.get("base_url"),
            authenticator_config.get("backend"),
        )

    if container is None:
        container = build_container(api_config=api_config, authenticator_config=authenticator_config)

    register_biometric(app, container)
    register_credentials(app, container)
    register_face(app, container)

    return app
