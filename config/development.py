import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

API_CONFIG = {
    "base_url": os.getenv("API_BASE_URL", "http://localhost:5000/api"),
    "timeout_seconds": float(os.getenv("API_TIMEOUT_SECONDS", "10")),
    "biometric_prefix": os.getenv("API_BIOMETRIC_PREFIX", "/biometric"),
    # The current attendance API still speaks padded base64.
    "transport_encoding": os.getenv("API_TRANSPORT_ENCODING", "base64"),
    "rp_id": os.getenv("RP_ID", "localhost"),
}

AUTHENTICATOR_CONFIG = {
    "backend": os.getenv("AUTHENTICATOR_BACKEND", "fido2"),
    "origin": os.getenv("KIOSK_ORIGIN", "http://localhost"),
    "pin": os.getenv("AUTHENTICATOR_PIN", ""),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
