"""List FIDO2 authenticators visible to this kiosk.

Note: On Linux the user running the kiosk needs read/write access to the
hidraw device (udev rule), otherwise nothing is listed.
"""

from __future__ import annotations

from src.biometric_attendance.biometric_attendance.webauthn.fido2_authenticator import list_authenticators


def main() -> None:
    devices = list_authenticators()
    if not devices:
        raise SystemExit("No FIDO2 authenticator found. Plug in the fingerprint reader and try again.")

    for i, desc in enumerate(devices, start=1):
        name = getattr(desc, "product_name", None) or "unknown device"
        path = getattr(desc, "path", "")
        print(f"{i}. {name} {path}".rstrip())


if __name__ == "__main__":
    main()
