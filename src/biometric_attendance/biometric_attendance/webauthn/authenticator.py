from __future__ import annotations

import threading
from typing import Protocol

from ..core.exceptions import CapabilityUnsupported
from .model import AssertionResult, CeremonyOptions, CredentialResult


class PlatformAuthenticator(Protocol):
    """Platform public-key credential capability.

    Implementations block until the user completes the ceremony, and must
    raise `UserCancelled` once `cancel` is set, `CeremonyTimeout` when the
    authenticator itself gives up, `CapabilityUnsupported` when no device is
    usable, and `CeremonyError` for anything else.
    """

    def is_supported(self) -> bool:
        raise NotImplementedError

    def create_credential(self, options: CeremonyOptions, *, cancel: threading.Event) -> CredentialResult:
        raise NotImplementedError

    def get_assertion(self, options: CeremonyOptions, *, cancel: threading.Event) -> AssertionResult:
        raise NotImplementedError


class UnavailableAuthenticator(PlatformAuthenticator):
    """Used when the kiosk has no authenticator backend configured."""

    def is_supported(self) -> bool:
        return False

    def create_credential(self, options: CeremonyOptions, *, cancel: threading.Event) -> CredentialResult:
        raise CapabilityUnsupported("No authenticator is configured on this kiosk")

    def get_assertion(self, options: CeremonyOptions, *, cancel: threading.Event) -> AssertionResult:
        raise CapabilityUnsupported("No authenticator is configured on this kiosk")
