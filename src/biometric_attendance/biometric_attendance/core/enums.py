from __future__ import annotations

from enum import Enum


class CeremonyKind(str, Enum):
    """Two symmetric ceremonies sharing the same shape."""

    REGISTRATION = "registration"
    AUTHENTICATION = "authentication"


class CeremonyState(str, Enum):
    IDLE = "idle"
    OPTIONS_REQUESTED = "options_requested"
    OPTIONS_READY = "options_ready"
    CEREMONY_IN_PROGRESS = "ceremony_in_progress"
    CEREMONY_COMPLETE = "ceremony_complete"
    VERIFYING = "verifying"
    SUCCESS = "success"
    VERIFICATION_FAILED = "verification_failed"
    CEREMONY_FAILED = "ceremony_failed"

    @property
    def is_terminal(self) -> bool:
        return self in (CeremonyState.SUCCESS, CeremonyState.VERIFICATION_FAILED, CeremonyState.CEREMONY_FAILED)


class UserVerification(str, Enum):
    REQUIRED = "required"
    PREFERRED = "preferred"
    DISCOURAGED = "discouraged"


class AttestationPreference(str, Enum):
    NONE = "none"
    INDIRECT = "indirect"
    DIRECT = "direct"


class TransportEncoding(str, Enum):
    """Byte-to-string schemes seen on the wire."""

    BASE64 = "base64"
    BASE64URL = "base64url"


class VerificationReason(str, Enum):
    """Reasons a relying party declares when it rejects a ceremony result."""

    CHALLENGE_MISMATCH = "challenge_mismatch"
    SIGNATURE_INVALID = "signature_invalid"
    COUNTER_REGRESSION = "counter_regression"
    UNKNOWN_CREDENTIAL = "unknown_credential"
    FACE_MISMATCH = "face_mismatch"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value) -> "VerificationReason":
        if not value:
            return cls.REJECTED
        normalized = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(normalized)
        except ValueError:
            return cls.REJECTED


class MessageCategory(str, Enum):
    """One human-readable message class per failure kind."""

    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"
    NETWORK = "network"
    REJECTED = "rejected"
    INVALID = "invalid"
    BUSY = "busy"
    ERROR = "error"
