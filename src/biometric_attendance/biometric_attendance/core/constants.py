"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CEREMONY_TIMEOUT_MS = 60000
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10
DEFAULT_BIOMETRIC_PREFIX = "/biometric"
DEFAULT_CREDENTIAL_NAME = "My Fingerprint"

# COSE algorithm identifiers: ES256, RS256.
DEFAULT_ALGORITHMS = (-7, -257)

FACE_EMBEDDING_SIZE = 128
