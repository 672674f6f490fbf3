import os

SECRET_KEY = "test-secret"

API_CONFIG = {
    "base_url": os.getenv("API_BASE_URL", "http://api.test"),
    "timeout_seconds": 2,
    "biometric_prefix": "/biometric",
    "transport_encoding": "base64",
    "rp_id": "attendance.test",
}

AUTHENTICATOR_CONFIG = {
    "backend": "none",
    "origin": "https://attendance.test",
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
