"""Kiosk entry point: `python app.py` (or `flask --app app run`)."""

import os

from src.biometric_attendance.biometric_attendance.main import create_app

app = create_app()


if __name__ == "__main__":
    # Threaded so /kiosk/biometric/cancel can reach a ceremony that is waiting on the device.
    app.run(host=os.getenv("KIOSK_HOST", "127.0.0.1"), port=int(os.getenv("KIOSK_PORT", "8080")), threaded=True)
