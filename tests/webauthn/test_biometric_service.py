from __future__ import annotations

import pytest

from src.biometric_attendance.biometric_attendance.common.codec import BASE64, BASE64URL
from src.biometric_attendance.biometric_attendance.core.enums import CeremonyKind, CeremonyState, VerificationReason
from src.biometric_attendance.biometric_attendance.core.exceptions import (
    ApiError,
    AuthenticationError,
    CapabilityUnsupported,
    CeremonyBusy,
    CeremonyTimeout,
    NetworkError,
    OptionsUnavailable,
    UserCancelled,
    ValidationError,
    VerificationFailed,
)
from src.biometric_attendance.biometric_attendance.session import SessionContext
from src.biometric_attendance.biometric_attendance.webauthn.messages import describe_failure
from src.biometric_attendance.biometric_attendance.webauthn.model import (
    AssertionResult,
    CredentialResult,
    Enrolled,
    Failed,
    Verified,
)
from src.biometric_attendance.biometric_attendance.webauthn.service import BiometricService

SESSION = SessionContext(token="t0k3n", user={"name": "A"})


class FakeRelyingParty:
    """In-memory relying party: every challenge can be consumed once."""

    def __init__(self, codec, *, registration_payload=None):
        self._codec = codec
        self._next = 0
        self.outstanding: set[str] = set()
        self.options_calls = 0
        self.completions: list[dict] = []
        self.registration_payload = registration_payload
        self.options_error = None
        self.complete_error = None
        self.complete_body = None

    def _issue(self) -> str:
        self._next += 1
        text = self._codec.encode(f"challenge-{self._next}".encode())
        self.outstanding.add(text)
        return text

    def _consume(self, challenge: str) -> None:
        if challenge not in self.outstanding:
            raise ApiError(400, reason="challenge_mismatch")
        self.outstanding.discard(challenge)

    def registration_options(self, *, label, token):
        self.options_calls += 1
        if self.options_error:
            raise self.options_error
        if self.registration_payload is not None:
            payload = dict(self.registration_payload)
            self.outstanding.add(payload["challenge"])
            return payload
        return {
            "challenge": self._issue(),
            "rp": {"id": "attendance.test", "name": "Attendance"},
            "user": {"id": self._codec.encode(b"user1"), "name": "a@b.com", "displayName": "A"},
        }

    def complete_registration(self, *, label, credential, challenge, token):
        self.completions.append({"label": label, "credential": credential, "challenge": challenge, "token": token})
        if self.complete_error:
            raise self.complete_error
        self._consume(challenge)
        return self.complete_body or {"success": True}

    def authentication_options(self, *, email):
        self.options_calls += 1
        if self.options_error:
            raise self.options_error
        return {
            "challenge": self._issue(),
            "rpId": "attendance.test",
            "allowCredentials": [{"id": self._codec.encode(b"\x07"), "type": "public-key"}],
        }

    def complete_authentication(self, *, email, assertion, challenge):
        self.completions.append({"email": email, "assertion": assertion, "challenge": challenge})
        if self.complete_error:
            raise self.complete_error
        self._consume(challenge)
        return self.complete_body or {"token": "session-token", "user": {"email": email, "role": "staff"}}


class FakeAuthenticator:
    def __init__(self, *, supported=True, error=None, on_invoke=None):
        self.supported = supported
        self.error = error
        self.on_invoke = on_invoke
        self.calls = []

    def is_supported(self):
        return self.supported

    def _invoke(self, options, cancel):
        self.calls.append(options)
        if self.on_invoke:
            self.on_invoke(cancel)
        if self.error:
            raise self.error

    def create_credential(self, options, *, cancel):
        self._invoke(options, cancel)
        return CredentialResult(
            credential_id=bytes([1, 2, 3]),
            attestation_object=bytes([9, 9]),
            client_data_json=bytes([4, 5]),
            public_key=None,
        )

    def get_assertion(self, options, *, cancel):
        self._invoke(options, cancel)
        return AssertionResult(
            credential_id=b"\x07",
            authenticator_data=b"auth-data",
            signature=b"signature",
            client_data_json=b"{}",
            sign_count=3,
        )


def make_service(codec=BASE64URL, **auth_kwargs):
    rp = FakeRelyingParty(codec)
    authenticator = FakeAuthenticator(**auth_kwargs)
    return BiometricService(rp, authenticator, codec=codec), rp, authenticator


def test_registration_end_to_end_with_standard_base64_server():
    rp = FakeRelyingParty(
        BASE64,
        registration_payload={
            "challenge": "Y2hhbA==",
            "user": {"id": "dXNlcjE=", "name": "a@b.com", "displayName": "A"},
            "pubKeyCredParams": [{"alg": -7, "type": "public-key"}],
            "timeout": 60000,
            "attestation": "direct",
        },
    )
    authenticator = FakeAuthenticator()
    service = BiometricService(rp, authenticator, codec=BASE64, default_rp_id="attendance.test")

    outcome = service.enroll(SESSION, "Office PC")

    assert isinstance(outcome, Enrolled)
    assert authenticator.calls[0].challenge == b"chal"
    assert authenticator.calls[0].user_id == b"user1"
    submitted = rp.completions[0]
    assert submitted["challenge"] == "Y2hhbA=="
    assert submitted["label"] == "Office PC"
    assert submitted["token"] == "t0k3n"
    assert submitted["credential"] == {
        "id": "AQID",
        "type": "public-key",
        "attestationObject": "CQk=",
        "clientDataJSON": "BAU=",
        "publicKey": None,
        "transports": [],
    }
    assert service.state == CeremonyState.SUCCESS


def test_authentication_success_returns_token_and_user():
    service, rp, authenticator = make_service()

    outcome = service.authenticate("A@B.com")

    assert isinstance(outcome, Verified)
    assert outcome.token == "session-token"
    assert outcome.user["email"] == "a@b.com"
    assert authenticator.calls[0].allowed_credential_ids == frozenset({b"\x07"})
    assert rp.completions[0]["assertion"]["signCount"] == 3
    assert rp.completions[0]["assertion"]["id"] == BASE64URL.encode(b"\x07")


def test_cancelled_authentication_submits_nothing_and_returns_to_idle():
    service, rp, _ = make_service(error=UserCancelled("dismissed"))

    outcome = service.authenticate("a@b.com")

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.error, UserCancelled)
    assert rp.completions == []
    assert service.state == CeremonyState.IDLE
    assert describe_failure(outcome.error, CeremonyKind.AUTHENTICATION).message == "Authentication cancelled."


def test_cancel_mid_flight_discards_a_late_result():
    holder = {}
    service, rp, _ = make_service(on_invoke=lambda cancel: holder["service"].cancel())
    holder["service"] = service

    outcome = service.authenticate("a@b.com")

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.error, UserCancelled)
    assert rp.completions == []
    assert service.state == CeremonyState.IDLE


def test_retry_after_cancel_fetches_fresh_options():
    service, rp, authenticator = make_service(error=UserCancelled("dismissed"))
    service.authenticate("a@b.com")

    authenticator.error = None
    outcome = service.authenticate("a@b.com")

    assert isinstance(outcome, Verified)
    assert rp.options_calls == 2
    assert authenticator.calls[0].challenge != authenticator.calls[1].challenge


@pytest.mark.parametrize("ceremony", ["enroll", "authenticate"])
def test_unsupported_capability_fails_before_any_network_call(ceremony):
    service, rp, authenticator = make_service(supported=False)

    if ceremony == "enroll":
        outcome = service.enroll(SESSION, "My Fingerprint")
    else:
        outcome = service.authenticate("a@b.com")

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.error, CapabilityUnsupported)
    assert rp.options_calls == 0
    assert authenticator.calls == []


def test_second_ceremony_while_one_is_scanning_is_rejected():
    nested = {}
    holder = {}

    def start_another(cancel):
        nested["outcome"] = holder["service"].enroll(SESSION, "Second")

    service, rp, _ = make_service(on_invoke=start_another)
    holder["service"] = service

    outcome = service.authenticate("a@b.com")

    assert isinstance(outcome, Verified)
    assert isinstance(nested["outcome"], Failed)
    assert isinstance(nested["outcome"].error, CeremonyBusy)
    assert rp.options_calls == 1


def test_consumed_challenge_surfaces_as_challenge_mismatch():
    rp = FakeRelyingParty(
        BASE64,
        registration_payload={
            "challenge": "Y2hhbA==",
            "rp": {"id": "attendance.test"},
            "user": {"id": "dXNlcjE=", "name": "a@b.com"},
        },
    )
    service = BiometricService(rp, FakeAuthenticator(), codec=BASE64)
    assert isinstance(service.enroll(SESSION, "First"), Enrolled)

    # A server handing out the same challenge again: the second result must not verify.
    rp.registration_options = lambda **kwargs: rp.registration_payload

    outcome = service.enroll(SESSION, "Second")

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.error, VerificationFailed)
    assert outcome.error.reason == VerificationReason.CHALLENGE_MISMATCH
    assert service.state == CeremonyState.VERIFICATION_FAILED


@pytest.mark.parametrize(
    "reason",
    [
        VerificationReason.SIGNATURE_INVALID,
        VerificationReason.COUNTER_REGRESSION,
        VerificationReason.UNKNOWN_CREDENTIAL,
    ],
)
def test_server_declared_reasons_are_not_retried(reason):
    service, rp, _ = make_service()
    rp.complete_error = ApiError(400, reason=reason.value)

    outcome = service.authenticate("a@b.com")

    assert isinstance(outcome, Failed)
    assert outcome.error.reason == reason
    assert len(rp.completions) == 1
    assert service.state == CeremonyState.VERIFICATION_FAILED


def test_declined_body_with_success_false_is_a_verification_failure():
    service, rp, _ = make_service()
    rp.complete_body = {"success": False, "reason": "unknown_credential"}

    outcome = service.enroll(SESSION, "My Fingerprint")

    assert isinstance(outcome, Failed)
    assert outcome.error.reason == VerificationReason.UNKNOWN_CREDENTIAL


def test_options_network_failure_is_options_unavailable():
    service, rp, authenticator = make_service()
    rp.options_error = NetworkError("down")

    outcome = service.authenticate("a@b.com")

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.error, OptionsUnavailable)
    assert outcome.error.reason == "network"
    assert authenticator.calls == []
    assert service.state == CeremonyState.CEREMONY_FAILED


def test_unknown_email_is_options_unavailable_with_reason():
    service, rp, _ = make_service()
    rp.options_error = ApiError(404, reason="user_not_found")

    outcome = service.authenticate("nobody@b.com")

    assert isinstance(outcome.error, OptionsUnavailable)
    assert outcome.error.reason == "user_not_found"


def test_server_error_without_reason_code_uses_http_status():
    service, rp, _ = make_service()
    rp.options_error = ApiError(500)

    outcome = service.authenticate("a@b.com")

    assert isinstance(outcome.error, OptionsUnavailable)
    assert outcome.error.reason == "http_500"


def test_network_failure_on_submit_is_terminal():
    service, rp, _ = make_service()
    rp.complete_error = NetworkError("down")

    outcome = service.authenticate("a@b.com")

    assert isinstance(outcome.error, NetworkError)
    assert len(rp.completions) == 1
    assert service.state == CeremonyState.VERIFICATION_FAILED


def test_timeout_is_terminal_for_the_attempt():
    service, rp, _ = make_service(error=CeremonyTimeout("slow"))

    outcome = service.enroll(SESSION, "My Fingerprint")

    assert isinstance(outcome.error, CeremonyTimeout)
    assert rp.completions == []
    assert service.state == CeremonyState.CEREMONY_FAILED


def test_missing_token_in_success_body_is_rejected():
    service, rp, _ = make_service()
    rp.complete_body = {"user": {"email": "a@b.com"}}

    outcome = service.authenticate("a@b.com")

    assert isinstance(outcome.error, VerificationFailed)


def test_enroll_requires_a_signed_in_session():
    service, rp, _ = make_service()

    outcome = service.enroll(SessionContext(), "My Fingerprint")

    assert isinstance(outcome.error, AuthenticationError)
    assert rp.options_calls == 0


@pytest.mark.parametrize("label", ["", "   ", "x" * 65])
def test_enroll_validates_credential_name(label):
    service, rp, _ = make_service()

    outcome = service.enroll(SESSION, label)

    assert isinstance(outcome.error, ValidationError)
    assert rp.options_calls == 0


def test_authenticate_validates_email():
    service, rp, _ = make_service()

    outcome = service.authenticate("not-an-email")

    assert isinstance(outcome.error, ValidationError)
    assert rp.options_calls == 0
