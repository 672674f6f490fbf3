from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from ..common.codec import BASE64URL, Base64Codec
from ..common.validators import require_email, require_max_length, require_non_empty
from ..core.enums import CeremonyKind, CeremonyState, VerificationReason
from ..core.exceptions import (
    ApiError,
    AuthenticationError,
    BiometricError,
    CapabilityUnsupported,
    CeremonyBusy,
    NetworkError,
    OptionsUnavailable,
    UserCancelled,
    ValidationError,
    VerificationFailed,
)
from ..session import SessionContext
from .authenticator import PlatformAuthenticator
from .ceremony import CeremonyAttempt, CeremonyCoordinator
from .encoder import encode_assertion, encode_credential
from .model import CeremonyOptions, CeremonyOutcome, Enrolled, Failed, Verified
from .options import parse_authentication_options, parse_registration_options
from .repository import RelyingPartyGateway

logger = logging.getLogger(__name__)

MAX_LABEL_LENGTH = 64


def _declined(body: Mapping[str, Any]) -> Optional[VerificationFailed]:
    if body.get("success") is False or body.get("verified") is False:
        return VerificationFailed(VerificationReason.parse(body.get("reason") or body.get("code")))
    return None


class BiometricService:
    """Use cases: enroll a credential, log in with one.

    Both run the same sequence: fetch options -> authenticator ceremony ->
    encode -> submit with the original challenge. Failures come back as
    `Failed(error)`; nothing is retried, a retry is a new call that fetches
    fresh options.
    """

    def __init__(
        self,
        gateway: RelyingPartyGateway,
        authenticator: PlatformAuthenticator,
        coordinator: Optional[CeremonyCoordinator] = None,
        *,
        codec: Base64Codec = BASE64URL,
        default_rp_id: Optional[str] = None,
    ):
        self._gateway = gateway
        self._authenticator = authenticator
        self._coordinator = coordinator or CeremonyCoordinator()
        self._codec = codec
        self._default_rp_id = default_rp_id

    @property
    def state(self) -> CeremonyState:
        return self._coordinator.state

    def is_supported(self) -> bool:
        return self._authenticator.is_supported()

    def cancel(self) -> bool:
        return self._coordinator.cancel()

    def enroll(self, session: SessionContext, label: str) -> CeremonyOutcome:
        if not self._authenticator.is_supported():
            return Failed(CapabilityUnsupported("No biometric authenticator is available"))
        try:
            label = require_max_length(require_non_empty(label, "Credential name"), "Credential name", MAX_LABEL_LENGTH)
            token = session.require_token()
            attempt = self._coordinator.begin(CeremonyKind.REGISTRATION)
        except (ValidationError, AuthenticationError, CeremonyBusy) as e:
            return Failed(e)

        def fetch() -> CeremonyOptions:
            payload = self._fetch(lambda: self._gateway.registration_options(label=label, token=token))
            return parse_registration_options(payload, self._codec, default_rp_id=self._default_rp_id)

        def submit(payload: Dict[str, Any], challenge: str) -> CeremonyOutcome:
            body = self._gateway.complete_registration(
                label=label, credential=payload, challenge=challenge, token=token
            )
            declined = _declined(body)
            if declined:
                raise declined
            credential = body.get("credential") or {"id": payload["id"], "displayName": label}
            return Enrolled(credential=credential, user=body.get("user"))

        return self._run(
            attempt,
            fetch=fetch,
            invoke=self._authenticator.create_credential,
            encode=encode_credential,
            submit=submit,
        )

    def authenticate(self, email: str) -> CeremonyOutcome:
        if not self._authenticator.is_supported():
            return Failed(CapabilityUnsupported("No biometric authenticator is available"))
        try:
            email = require_email(email)
            attempt = self._coordinator.begin(CeremonyKind.AUTHENTICATION)
        except (ValidationError, CeremonyBusy) as e:
            return Failed(e)

        def fetch() -> CeremonyOptions:
            payload = self._fetch(lambda: self._gateway.authentication_options(email=email))
            return parse_authentication_options(payload, self._codec, default_rp_id=self._default_rp_id)

        def submit(payload: Dict[str, Any], challenge: str) -> CeremonyOutcome:
            body = self._gateway.complete_authentication(email=email, assertion=payload, challenge=challenge)
            declined = _declined(body)
            if declined:
                raise declined
            if not body.get("token"):
                raise VerificationFailed(VerificationReason.REJECTED, "Server returned no session token")
            return Verified(proof={"token": body["token"], "user": body.get("user") or {}})

        return self._run(
            attempt,
            fetch=fetch,
            invoke=self._authenticator.get_assertion,
            encode=encode_assertion,
            submit=submit,
        )

    @staticmethod
    def _fetch(call: Callable[[], Mapping[str, Any]]) -> Mapping[str, Any]:
        try:
            return call()
        except NetworkError as e:
            raise OptionsUnavailable("Could not reach the attendance server", reason="network") from e
        except ApiError as e:
            raise OptionsUnavailable("The server declined the request", reason=e.reason or f"http_{e.status}") from e

    def _run(
        self,
        attempt: CeremonyAttempt,
        *,
        fetch: Callable[[], CeremonyOptions],
        invoke: Callable[..., Any],
        encode: Callable[[Any, Base64Codec], Dict[str, Any]],
        submit: Callable[[Dict[str, Any], str], CeremonyOutcome],
    ) -> CeremonyOutcome:
        coordinator = self._coordinator
        kind = attempt.kind.value
        try:
            options = fetch()
            coordinator.advance(attempt, CeremonyState.OPTIONS_READY)
            attempt.options = options

            coordinator.advance(attempt, CeremonyState.CEREMONY_IN_PROGRESS)
            result = invoke(options, cancel=attempt.cancel)
            coordinator.advance(attempt, CeremonyState.CEREMONY_COMPLETE)

            payload = encode(result, self._codec)
            coordinator.advance(attempt, CeremonyState.VERIFYING)
            try:
                outcome = submit(payload, options.challenge_text)
            except ApiError as e:
                raise VerificationFailed(VerificationReason.parse(e.reason)) from e

            coordinator.advance(attempt, CeremonyState.SUCCESS)
        except BiometricError as e:
            coordinator.fail(attempt, cancelled=isinstance(e, UserCancelled))
            logger.info("%s ceremony #%s failed: %s", kind, attempt.generation, e.code)
            return Failed(e)
        except Exception:
            coordinator.fail(attempt)
            raise

        logger.info("%s ceremony #%s succeeded", kind, attempt.generation)
        return outcome
