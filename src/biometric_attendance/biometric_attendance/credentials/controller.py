from __future__ import annotations

from flask import Flask, request

from ..common.responses import json_failure, json_ok, json_unexpected, login_required, session_context
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    service = container.credential_service

    @app.route("/kiosk/biometric/credentials", methods=["GET"], endpoint="list_credentials")
    @login_required
    def list_credentials():
        try:
            items = service.list_credentials(session_context())
        except DomainError as e:
            return json_failure(e)
        except Exception as e:
            return json_unexpected(e, "loading credentials")
        return json_ok(credentials=[c.to_dict() for c in items])

    @app.route("/kiosk/biometric/credentials/<credential_id>", methods=["PUT"], endpoint="rename_credential")
    @login_required
    def rename_credential(credential_id: str):
        data = request.get_json(silent=True) or {}
        try:
            service.rename(session_context(), credential_id, data.get("name", ""))
        except DomainError as e:
            return json_failure(e)
        except Exception as e:
            return json_unexpected(e, "renaming the credential")
        return json_ok(message="Credential renamed successfully")

    @app.route("/kiosk/biometric/credentials/<credential_id>", methods=["DELETE"], endpoint="delete_credential")
    @login_required
    def delete_credential(credential_id: str):
        try:
            service.delete(session_context(), credential_id)
        except DomainError as e:
            return json_failure(e)
        except Exception as e:
            return json_unexpected(e, "removing the credential")
        return json_ok(message="Credential removed successfully")
