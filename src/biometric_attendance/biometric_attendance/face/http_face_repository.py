from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..api.connection import ApiConnection
from ..api.http_base import send_json
from .repository import FaceRepository


class HttpFaceRepository(FaceRepository):
    def __init__(self, conn: ApiConnection):
        self._conn = conn

    def enroll(self, *, token: str, embedding: Sequence[float], model_version: Optional[str]) -> Mapping[str, Any]:
        body = {"embedding": list(embedding)}
        if model_version:
            body["modelVersion"] = model_version
        return send_json(self._conn, "POST", self._conn.url("face/enroll"), json=body, token=token)

    def verify(self, *, token: str, embedding: Sequence[float]) -> Mapping[str, Any]:
        return send_json(
            self._conn, "POST", self._conn.url("face/verify"), json={"embedding": list(embedding)}, token=token
        )
