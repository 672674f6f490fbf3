import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

API_CONFIG = {
    "base_url": os.getenv("API_BASE_URL", "https://attendance.example.com/api"),
    "timeout_seconds": float(os.getenv("API_TIMEOUT_SECONDS", "10")),
    "biometric_prefix": os.getenv("API_BIOMETRIC_PREFIX", "/biometric"),
    "transport_encoding": os.getenv("API_TRANSPORT_ENCODING", "base64url"),
    # Only used when the server omits the relying party id.
    "rp_id": os.getenv("RP_ID", ""),
}

AUTHENTICATOR_CONFIG = {
    "backend": os.getenv("AUTHENTICATOR_BACKEND", "fido2"),
    "origin": os.getenv("KIOSK_ORIGIN", "https://attendance.example.com"),
    "pin": os.getenv("AUTHENTICATOR_PIN", ""),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
