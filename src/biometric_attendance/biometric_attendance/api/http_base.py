from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

import requests

from ..core.exceptions import ApiError, NetworkError
from .connection import ApiConnection

logger = logging.getLogger(__name__)

_REASON_RE = re.compile(r"^[a-z][a-z0-9_]{0,47}$")


def auth_headers(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


def error_reason(payload: Any) -> Optional[str]:
    """Short reason code from an API error body.

    The API has answered with `reason`, `code` or only `error` over time.
    Only snake_case tokens are kept; free text (stack traces, database
    messages) never leaves this module.
    """

    if not isinstance(payload, dict):
        return None
    for key in ("reason", "code", "error"):
        value = payload.get(key)
        if isinstance(value, str) and _REASON_RE.match(value.strip()):
            return value.strip()
    return None


def send_json(
    conn: ApiConnection,
    method: str,
    url: str,
    *,
    json: Optional[Dict[str, Any]] = None,
    token: Optional[str] = None,
) -> Dict[str, Any]:
    """Send one JSON request and return the decoded JSON object body.

    Raises NetworkError for transport failures and undecodable bodies,
    ApiError for HTTP error statuses.
    """

    try:
        resp = conn.session().request(
            method,
            url,
            json=json,
            headers=auth_headers(token),
            timeout=conn.config.timeout_seconds,
        )
    except requests.RequestException as e:
        logger.warning("%s %s failed: %s", method, url, type(e).__name__)
        raise NetworkError("Could not reach the attendance server") from e

    try:
        payload = resp.json() if resp.content else {}
    except ValueError as e:
        if resp.status_code >= 400:
            raise ApiError(resp.status_code) from e
        raise NetworkError("Attendance server sent an unreadable response") from e

    if resp.status_code >= 400:
        reason = error_reason(payload)
        logger.info("%s %s answered %s (%s)", method, url, resp.status_code, reason)
        raise ApiError(resp.status_code, reason=reason)

    if not isinstance(payload, dict):
        raise NetworkError("Attendance server sent an unexpected response")
    return payload
