from __future__ import annotations

from flask import Flask, request, session

from ..common.responses import json_failure, json_ok, json_unexpected, login_required, session_context
from ..container import Container
from ..core.constants import DEFAULT_CREDENTIAL_NAME
from ..core.enums import CeremonyKind
from ..core.exceptions import DomainError
from .model import Failed


def register(app: Flask, container: Container) -> None:
    service = container.biometric_service

    @app.route("/kiosk/biometric/status", methods=["GET"], endpoint="biometric_status")
    def biometric_status():
        return json_ok(
            supported=service.is_supported(),
            state=service.state.value,
            authenticated=session_context().is_authenticated,
        )

    @app.route("/kiosk/biometric/enroll", methods=["POST"], endpoint="biometric_enroll")
    @login_required
    def biometric_enroll():
        data = request.get_json(silent=True) or {}
        label = data.get("credentialName", DEFAULT_CREDENTIAL_NAME)
        try:
            outcome = service.enroll(session_context(), label)
        except DomainError as e:
            return json_failure(e, CeremonyKind.REGISTRATION)
        except Exception as e:
            return json_unexpected(e, "biometric enrollment")

        if isinstance(outcome, Failed):
            return json_failure(outcome.error, CeremonyKind.REGISTRATION)
        if outcome.user:
            session["user"] = dict(outcome.user)
        return json_ok(message="Biometric enrollment successful!", credential=dict(outcome.credential))

    @app.route("/kiosk/biometric/login", methods=["POST"], endpoint="biometric_login")
    def biometric_login():
        data = request.get_json(silent=True) or {}
        try:
            outcome = service.authenticate(data.get("email", ""))
        except DomainError as e:
            return json_failure(e, CeremonyKind.AUTHENTICATION)
        except Exception as e:
            return json_unexpected(e, "biometric login")

        if isinstance(outcome, Failed):
            return json_failure(outcome.error, CeremonyKind.AUTHENTICATION)
        session["token"] = outcome.token
        session["user"] = dict(outcome.user or {})
        return json_ok(message="Biometric login successful!", user=session["user"])

    @app.route("/kiosk/biometric/cancel", methods=["POST"], endpoint="biometric_cancel")
    def biometric_cancel():
        return json_ok(cancelled=service.cancel(), state=service.state.value)

    @app.route("/kiosk/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return json_ok(message="Signed out.")
