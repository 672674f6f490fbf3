from __future__ import annotations

from flask import Flask, request, session

from ..common.responses import json_failure, json_ok, json_unexpected, login_required, session_context
from ..container import Container
from ..webauthn.model import Failed


def register(app: Flask, container: Container) -> None:
    service = container.face_service

    @app.route("/kiosk/face/enroll", methods=["POST"], endpoint="face_enroll")
    @login_required
    def face_enroll():
        data = request.get_json(silent=True) or {}
        try:
            outcome = service.enroll(session_context(), data.get("embedding"), model_version=data.get("modelVersion"))
        except Exception as e:
            return json_unexpected(e, "face enrollment")

        if isinstance(outcome, Failed):
            return json_failure(outcome.error)
        if outcome.user:
            session["user"] = dict(outcome.user)
        return json_ok(message="Face enrolled.", user=session.get("user") or {})

    @app.route("/kiosk/face/verify", methods=["POST"], endpoint="face_verify")
    @login_required
    def face_verify():
        data = request.get_json(silent=True) or {}
        try:
            outcome = service.verify(session_context(), data.get("embedding"))
        except Exception as e:
            return json_unexpected(e, "face verification")

        if isinstance(outcome, Failed):
            return json_failure(outcome.error)
        return json_ok(verified=True)
