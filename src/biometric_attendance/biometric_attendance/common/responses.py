from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import current_app, jsonify, session

from ..core.enums import CeremonyKind, MessageCategory
from ..core.exceptions import AuthenticationError, DomainError
from ..session import SessionContext
from ..webauthn.messages import describe_failure

logger = logging.getLogger(__name__)

_STATUS = {
    MessageCategory.CANCELLED: 409,
    MessageCategory.BUSY: 409,
    MessageCategory.TIMEOUT: 408,
    MessageCategory.UNSUPPORTED: 501,
    MessageCategory.NETWORK: 502,
    MessageCategory.REJECTED: 401,
    MessageCategory.INVALID: 400,
    MessageCategory.ERROR: 500,
}


def session_context() -> SessionContext:
    """Login state of the current kiosk session."""
    return SessionContext(token=session.get("token"), user=session.get("user") or {})


def json_ok(**data):
    return jsonify({"status": "ok", **data})


def json_failure(error: DomainError, kind: Optional[CeremonyKind] = None):
    msg = describe_failure(error, kind)
    body = {"status": "error", "category": msg.category.value, "message": msg.message, "reason": msg.reason}
    return jsonify(body), _STATUS[msg.category]


def json_unexpected(e: Exception, what: str):
    logger.exception("Unexpected error during %s", what)
    message = f"System error during {what}"
    if bool(current_app.config.get("DEBUG", False)):
        message = f"{message}: {e}"
    return jsonify({"status": "error", "category": MessageCategory.ERROR.value, "message": message}), 500


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get("token"):
            return json_failure(AuthenticationError("Please sign in to continue"))
        return view(*args, **kwargs)

    return wrapper
