"""Platform authenticator backed by a CTAP2 device through `fido2`.

The kiosk host talks USB HID to the security key / fingerprint reader. The
WebAuthn origin is fixed by configuration; the relying party id comes from
the server options and `Fido2Client` checks it against that origin.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterable, Optional

from fido2 import cbor
from fido2.client import ClientError, Fido2Client, UserInteraction
from fido2.ctap import CtapError
from fido2.hid import CtapHidDevice
from fido2.webauthn import (
    AttestationConveyancePreference,
    AuthenticatorAttachment,
    AuthenticatorSelectionCriteria,
    AuthenticatorTransport,
    PublicKeyCredentialCreationOptions,
    PublicKeyCredentialDescriptor,
    PublicKeyCredentialParameters,
    PublicKeyCredentialRequestOptions,
    PublicKeyCredentialRpEntity,
    PublicKeyCredentialType,
    PublicKeyCredentialUserEntity,
    ResidentKeyRequirement,
    UserVerificationRequirement,
)

from ..core.exceptions import CapabilityUnsupported, CeremonyError, CeremonyTimeout, UserCancelled
from .authenticator import PlatformAuthenticator
from .model import AssertionResult, CeremonyOptions, CredentialDescriptor, CredentialResult

logger = logging.getLogger(__name__)

HID_TRANSPORTS = ("usb",)


class KioskInteraction(UserInteraction):
    """Answers the authenticator's prompts on an unattended kiosk."""

    def __init__(self, pin: Optional[str] = None):
        self._pin = pin

    def prompt_up(self) -> None:
        logger.info("Waiting for user presence on the authenticator")

    def request_pin(self, permissions, rp_id) -> Optional[str]:
        if not self._pin:
            logger.warning("Authenticator asked for a PIN but none is configured")
        return self._pin

    def request_uv(self, permissions, rp_id) -> bool:
        return True


def _default_client_factory(device, origin: str, interaction: UserInteraction):
    return Fido2Client(device, origin, user_interaction=interaction)


def _transports(values: Iterable[str]):
    out = []
    for value in values:
        try:
            out.append(AuthenticatorTransport(value))
        except ValueError:
            logger.debug("Ignoring unknown transport %r", value)
    return out or None


def _descriptors(items: Iterable[CredentialDescriptor]):
    descriptors = [
        PublicKeyCredentialDescriptor(
            type=PublicKeyCredentialType.PUBLIC_KEY,
            id=d.id,
            transports=_transports(d.transports),
        )
        for d in items
    ]
    return descriptors or None


def to_creation_options(options: CeremonyOptions) -> PublicKeyCredentialCreationOptions:
    selection = AuthenticatorSelectionCriteria(
        authenticator_attachment=(
            AuthenticatorAttachment(options.authenticator_attachment) if options.authenticator_attachment else None
        ),
        resident_key=ResidentKeyRequirement(options.resident_key) if options.resident_key else None,
        user_verification=UserVerificationRequirement(options.user_verification.value),
    )
    return PublicKeyCredentialCreationOptions(
        rp=PublicKeyCredentialRpEntity(
            name=options.relying_party_name or options.relying_party_id,
            id=options.relying_party_id,
        ),
        user=PublicKeyCredentialUserEntity(
            name=options.user_name,
            id=options.user_id,
            display_name=options.user_display_name,
        ),
        challenge=options.challenge,
        pub_key_cred_params=[
            PublicKeyCredentialParameters(type=PublicKeyCredentialType.PUBLIC_KEY, alg=p.algorithm_id)
            for p in options.algorithms
        ],
        timeout=options.timeout_ms,
        exclude_credentials=_descriptors(options.excluded_credentials),
        authenticator_selection=selection,
        attestation=AttestationConveyancePreference(options.attestation.value),
    )


def to_request_options(options: CeremonyOptions) -> PublicKeyCredentialRequestOptions:
    return PublicKeyCredentialRequestOptions(
        challenge=options.challenge,
        timeout=options.timeout_ms,
        rp_id=options.relying_party_id,
        allow_credentials=_descriptors(options.allowed_credentials),
        user_verification=UserVerificationRequirement(options.user_verification.value),
    )


class Fido2Authenticator(PlatformAuthenticator):
    def __init__(
        self,
        *,
        origin: str,
        pin: Optional[str] = None,
        device_lister: Callable[[], Iterable[Any]] = CtapHidDevice.list_devices,
        client_factory: Callable[[Any, str, UserInteraction], Any] = _default_client_factory,
    ):
        self._origin = origin
        self._interaction = KioskInteraction(pin)
        self._list_devices = device_lister
        self._client_factory = client_factory

    def _first_device(self):
        try:
            return next(iter(self._list_devices()), None)
        except OSError as e:
            logger.warning("Could not enumerate FIDO devices: %s", e)
            return None

    def is_supported(self) -> bool:
        return self._first_device() is not None

    def _client(self):
        device = self._first_device()
        if device is None:
            raise CapabilityUnsupported("No FIDO2 authenticator is connected")
        return self._client_factory(device, self._origin, self._interaction)

    def _run(self, options: CeremonyOptions, cancel: threading.Event, call: Callable[[Any], Any]):
        client = self._client()
        expired = threading.Event()

        def _expire() -> None:
            expired.set()
            cancel.set()

        timer = threading.Timer(options.timeout_ms / 1000.0, _expire)
        timer.daemon = True
        timer.start()
        try:
            return call(client)
        except ClientError as e:
            raise self._translate(e, cancel=cancel, expired=expired) from e
        finally:
            timer.cancel()

    @staticmethod
    def _translate(e: ClientError, *, cancel: threading.Event, expired: threading.Event) -> Exception:
        if expired.is_set():
            return CeremonyTimeout("The authenticator did not respond in time")
        if cancel.is_set():
            return UserCancelled("The ceremony was cancelled")

        cause = getattr(e, "cause", None)
        if isinstance(cause, CtapError) and cause.code == CtapError.ERR.OPERATION_DENIED:
            return UserCancelled("The user declined the request")
        if e.code == ClientError.ERR.TIMEOUT:
            return CeremonyTimeout("The authenticator timed out")
        if e.code == ClientError.ERR.CONFIGURATION_UNSUPPORTED:
            return CapabilityUnsupported("The authenticator does not support the requested options")
        if e.code == ClientError.ERR.DEVICE_INELIGIBLE:
            return CeremonyError("This authenticator cannot be used for this account")
        return CeremonyError(f"Authenticator error: {e.code.name}")

    def create_credential(self, options: CeremonyOptions, *, cancel: threading.Event) -> CredentialResult:
        creation = to_creation_options(options)
        response = self._run(options, cancel, lambda client: client.make_credential(creation, event=cancel))

        attestation = response.attestation_object
        credential_data = attestation.auth_data.credential_data
        if credential_data is None:
            raise CeremonyError("Authenticator returned no credential data")

        public_key = getattr(credential_data, "public_key", None)
        return CredentialResult(
            credential_id=bytes(credential_data.credential_id),
            attestation_object=bytes(attestation),
            client_data_json=bytes(response.client_data),
            public_key=cbor.encode(dict(public_key)) if public_key is not None else None,
            transports=HID_TRANSPORTS,
        )

    def get_assertion(self, options: CeremonyOptions, *, cancel: threading.Event) -> AssertionResult:
        request = to_request_options(options)
        selection = self._run(options, cancel, lambda client: client.get_assertion(request, event=cancel))
        response = selection.get_response(0)

        if response.credential_id is None:
            raise CeremonyError("Authenticator did not report which credential it used")

        return AssertionResult(
            credential_id=bytes(response.credential_id),
            authenticator_data=bytes(response.authenticator_data),
            signature=bytes(response.signature),
            client_data_json=bytes(response.client_data),
            sign_count=int(response.authenticator_data.counter),
            user_handle=bytes(response.user_handle) if response.user_handle else None,
        )


def list_authenticators():
    """Descriptors of the FIDO HID devices visible to this host."""
    return [getattr(d, "descriptor", d) for d in CtapHidDevice.list_devices()]
