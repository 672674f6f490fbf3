from __future__ import annotations

from typing import Any, Dict, Mapping

from ..api.connection import ApiConnection
from ..api.http_base import send_json
from .repository import RelyingPartyGateway


class HttpRelyingPartyGateway(RelyingPartyGateway):
    """Ceremony endpoints under the configured biometric prefix."""

    def __init__(self, conn: ApiConnection):
        self._conn = conn

    def registration_options(self, *, label: str, token: str) -> Mapping[str, Any]:
        return send_json(
            self._conn,
            "POST",
            self._conn.biometric_url("enroll/start"),
            json={"credentialName": label},
            token=token,
        )

    def complete_registration(
        self, *, label: str, credential: Dict[str, Any], challenge: str, token: str
    ) -> Mapping[str, Any]:
        return send_json(
            self._conn,
            "POST",
            self._conn.biometric_url("enroll/complete"),
            json={"credentialName": label, "credential": credential, "challenge": challenge},
            token=token,
        )

    def authentication_options(self, *, email: str) -> Mapping[str, Any]:
        return send_json(
            self._conn,
            "POST",
            self._conn.biometric_url("authenticate/start"),
            json={"email": email},
        )

    def complete_authentication(
        self, *, email: str, assertion: Dict[str, Any], challenge: str
    ) -> Mapping[str, Any]:
        return send_json(
            self._conn,
            "POST",
            self._conn.biometric_url("authenticate/complete"),
            json={"email": email, "assertion": assertion, "challenge": challenge},
        )
