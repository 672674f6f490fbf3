"""Example: run a biometric login through the service layer (no Flask).

Controllers are a thin layer; the ceremony lives in `BiometricService`.
"""

import importlib
import sys

from config import get_settings_module

from src.biometric_attendance.biometric_attendance.container import build_container
from src.biometric_attendance.biometric_attendance.webauthn.model import Failed
from src.biometric_attendance.biometric_attendance.webauthn.messages import describe_failure


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(api_config=settings.API_CONFIG, authenticator_config=settings.AUTHENTICATOR_CONFIG)

    email = sys.argv[1] if len(sys.argv) > 1 else "a@b.com"
    outcome = container.biometric_service.authenticate(email)
    if isinstance(outcome, Failed):
        print(describe_failure(outcome.error).message)
    else:
        print("Signed in as", (outcome.user or {}).get("name", email))


if __name__ == "__main__":
    main()
