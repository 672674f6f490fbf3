from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import CeremonyKind, MessageCategory, VerificationReason
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CapabilityUnsupported,
    CeremonyBusy,
    CeremonyTimeout,
    DecodeError,
    DomainError,
    NetworkError,
    OptionsUnavailable,
    UserCancelled,
    ValidationError,
    VerificationFailed,
)


@dataclass(frozen=True)
class FailureMessage:
    """What the kiosk screen shows: a category, a sentence and a short code."""

    category: MessageCategory
    message: str
    reason: str


_VERIFICATION_TEXT = {
    VerificationReason.CHALLENGE_MISMATCH: "This request has expired. Please start again.",
    VerificationReason.SIGNATURE_INVALID: "Your fingerprint could not be verified.",
    VerificationReason.COUNTER_REGRESSION: "This authenticator could not be trusted. Contact your administrator.",
    VerificationReason.UNKNOWN_CREDENTIAL: "This fingerprint is not registered for your account.",
    VerificationReason.FACE_MISMATCH: "Face did not match. Please try again.",
    VerificationReason.REJECTED: "The server rejected the request.",
}


def _action(kind: Optional[CeremonyKind]) -> str:
    if kind == CeremonyKind.REGISTRATION:
        return "enrollment"
    if kind == CeremonyKind.AUTHENTICATION:
        return "authentication"
    return "request"


def describe_failure(error: DomainError, kind: Optional[CeremonyKind] = None) -> FailureMessage:
    action = _action(kind)

    if isinstance(error, UserCancelled):
        return FailureMessage(MessageCategory.CANCELLED, f"{action.capitalize()} cancelled.", error.code)
    if isinstance(error, CeremonyTimeout):
        return FailureMessage(MessageCategory.TIMEOUT, "The fingerprint scan timed out. Please try again.", error.code)
    if isinstance(error, CapabilityUnsupported):
        return FailureMessage(
            MessageCategory.UNSUPPORTED, "This device does not support biometric authentication.", error.code
        )
    if isinstance(error, CeremonyBusy):
        return FailureMessage(MessageCategory.BUSY, "Another fingerprint scan is already in progress.", error.code)
    if isinstance(error, NetworkError):
        return FailureMessage(
            MessageCategory.NETWORK, "Could not reach the attendance server. Please try again.", error.code
        )
    if isinstance(error, OptionsUnavailable):
        if error.reason == "network":
            return FailureMessage(
                MessageCategory.NETWORK, "Could not reach the attendance server. Please try again.", error.reason
            )
        if error.reason == "malformed_options":
            return FailureMessage(
                MessageCategory.INVALID, f"The server sent an invalid {action} request.", error.reason
            )
        return FailureMessage(
            MessageCategory.REJECTED, f"Could not start biometric {action}.", error.reason or error.code
        )
    if isinstance(error, VerificationFailed):
        return FailureMessage(MessageCategory.REJECTED, _VERIFICATION_TEXT[error.reason], error.reason.value)
    if isinstance(error, DecodeError):
        return FailureMessage(MessageCategory.INVALID, "Received malformed biometric data.", error.code)
    if isinstance(error, ValidationError):
        return FailureMessage(MessageCategory.INVALID, str(error), "validation_error")
    if isinstance(error, AuthenticationError):
        return FailureMessage(MessageCategory.REJECTED, str(error), "not_authenticated")
    if isinstance(error, AuthorizationError):
        return FailureMessage(MessageCategory.REJECTED, str(error), "not_authorized")

    code = getattr(error, "code", "error")
    return FailureMessage(MessageCategory.ERROR, f"Biometric {action} failed.", code)
