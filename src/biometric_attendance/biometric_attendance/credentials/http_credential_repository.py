from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence
from urllib.parse import quote

from ..api.connection import ApiConnection
from ..api.http_base import send_json
from ..common.datetime_utils import parse_iso_datetime
from ..core.exceptions import ApiError
from .model import EnrolledCredential
from .repository import CredentialRepository

logger = logging.getLogger(__name__)


def _timestamp(value: Any) -> Optional[datetime]:
    try:
        return parse_iso_datetime(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring unreadable credential timestamp")
        return None


def _to_credential(row: Mapping[str, Any]) -> EnrolledCredential:
    # Older API versions used `name`, `_id` and `lastUsed`.
    return EnrolledCredential(
        id=str(row.get("id") or row.get("_id")),
        display_name=row.get("displayName") or row.get("name") or "",
        created_at=_timestamp(row.get("createdAt")),
        last_used_at=_timestamp(row.get("lastUsedAt") or row.get("lastUsed")),
    )


class HttpCredentialRepository(CredentialRepository):
    def __init__(self, conn: ApiConnection):
        self._conn = conn

    def _url(self, credential_id: str = "") -> str:
        path = "credentials"
        if credential_id:
            path += "/" + quote(credential_id, safe="")
        return self._conn.biometric_url(path)

    def list_for_session(self, *, token: str) -> Sequence[EnrolledCredential]:
        body = send_json(self._conn, "GET", self._url(), token=token)
        return [_to_credential(row) for row in body.get("credentials") or []]

    def rename(self, *, token: str, credential_id: str, name: str) -> bool:
        try:
            send_json(self._conn, "PUT", self._url(credential_id), json={"name": name}, token=token)
        except ApiError as e:
            if e.status == 404:
                return False
            raise
        return True

    def delete(self, *, token: str, credential_id: str) -> bool:
        try:
            send_json(self._conn, "DELETE", self._url(credential_id), token=token)
        except ApiError as e:
            if e.status == 404:
                return False
            raise
        return True
