from __future__ import annotations

from typing import Optional

from .enums import VerificationReason


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the kiosk session carries no usable login."""


class AuthorizationError(DomainError):
    """Raised when the API refuses an action for the current session."""


class BiometricError(DomainError):
    """Base of the ceremony failure taxonomy.

    `code` is the short reason code that may be shown to users and logged.
    """

    code = "biometric_error"


class DecodeError(BiometricError):
    """Malformed transport string (bad padding or alphabet)."""

    code = "decode_error"


class CapabilityUnsupported(BiometricError):
    """The host exposes no public-key credential capability."""

    code = "capability_unsupported"


class OptionsUnavailable(BiometricError):
    """Ceremony options could not be obtained or were malformed."""

    code = "options_unavailable"

    def __init__(self, message: str, *, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason


class UserCancelled(BiometricError):
    code = "user_cancelled"


class CeremonyTimeout(BiometricError):
    code = "timeout"


class CeremonyError(BiometricError):
    """Authenticator failed for a reason other than cancel or timeout."""

    code = "ceremony_error"


class NetworkError(BiometricError):
    """Generic transport failure on any request."""

    code = "network_error"


class VerificationFailed(BiometricError):
    code = "verification_failed"

    def __init__(self, reason: VerificationReason, message: Optional[str] = None):
        super().__init__(message or f"Verification failed: {reason.value}")
        self.reason = reason


class CeremonyBusy(BiometricError):
    """Another ceremony is already in flight on this authenticator."""

    code = "ceremony_busy"


class CeremonyStateError(BiometricError):
    """Illegal state transition (e.g. resubmitting a consumed result)."""

    code = "ceremony_state"


class ApiError(DomainError):
    """HTTP error status answered by the attendance API."""

    def __init__(self, status: int, reason: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message or f"API error {status}")
        self.status = int(status)
        self.reason = reason
