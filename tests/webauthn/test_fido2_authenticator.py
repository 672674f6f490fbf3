from __future__ import annotations

import threading

import pytest
from fido2 import cbor
from fido2.client import ClientError
from fido2.ctap import CtapError

from src.biometric_attendance.biometric_attendance.core.enums import CeremonyKind, UserVerification
from src.biometric_attendance.biometric_attendance.core.exceptions import (
    CapabilityUnsupported,
    CeremonyError,
    CeremonyTimeout,
    UserCancelled,
)
from src.biometric_attendance.biometric_attendance.webauthn.fido2_authenticator import (
    Fido2Authenticator,
    to_creation_options,
    to_request_options,
)
from src.biometric_attendance.biometric_attendance.webauthn.model import (
    AlgorithmParam,
    CeremonyOptions,
    CredentialDescriptor,
)

COSE_KEY = {1: 2, 3: -7, -1: 1}


class FakeCredentialData:
    credential_id = b"\x01\x02\x03"
    public_key = COSE_KEY


class FakeAuthData:
    credential_data = FakeCredentialData()


class FakeAttestationObject(bytes):
    auth_data = FakeAuthData()


class FakeAuthenticatorData(bytes):
    counter = 42


class FakeRegistration:
    attestation_object = FakeAttestationObject(b"\x09\x09")
    client_data = b'{"type":"webauthn.create"}'


class FakeAssertion:
    credential_id = b"\x07"
    authenticator_data = FakeAuthenticatorData(b"auth")
    signature = b"sig"
    client_data = b'{"type":"webauthn.get"}'
    user_handle = None


class FakeSelection:
    def get_response(self, index):
        assert index == 0
        return FakeAssertion()


class FakeClient:
    def __init__(self, *, error=None, wait_for_cancel=False):
        self.error = error
        self.wait_for_cancel = wait_for_cancel
        self.calls = []

    def _maybe_fail(self, event):
        if self.wait_for_cancel:
            event.wait(timeout=5)
        if self.error:
            raise self.error

    def make_credential(self, options, event=None):
        self.calls.append(options)
        self._maybe_fail(event)
        return FakeRegistration()

    def get_assertion(self, options, event=None):
        self.calls.append(options)
        self._maybe_fail(event)
        return FakeSelection()


def registration_options(**overrides):
    values = dict(
        kind=CeremonyKind.REGISTRATION,
        challenge=b"chal",
        challenge_text="Y2hhbA==",
        relying_party_id="attendance.test",
        user_id=b"user1",
        user_name="a@b.com",
        user_display_name="A",
        algorithms=(AlgorithmParam(-7), AlgorithmParam(-257)),
    )
    values.update(overrides)
    return CeremonyOptions(**values)


def authentication_options(**overrides):
    values = dict(
        kind=CeremonyKind.AUTHENTICATION,
        challenge=b"chal",
        challenge_text="Y2hhbA==",
        relying_party_id="attendance.test",
        allowed_credentials=(CredentialDescriptor(b"\x07", transports=("usb", "smoke-signal")),),
    )
    values.update(overrides)
    return CeremonyOptions(**values)


def make_authenticator(client, devices=("device",)):
    return Fido2Authenticator(
        origin="https://attendance.test",
        device_lister=lambda: list(devices),
        client_factory=lambda device, origin, interaction: client,
    )


def test_creation_options_mapping():
    creation = to_creation_options(registration_options(user_verification=UserVerification.REQUIRED))

    assert creation.rp.id == "attendance.test"
    assert creation.rp.name == "attendance.test"
    assert creation.user.id == b"user1"
    assert [p.alg for p in creation.pub_key_cred_params] == [-7, -257]
    assert creation.timeout == 60000
    assert creation.authenticator_selection.user_verification == "required"
    assert creation.exclude_credentials is None


def test_request_options_drop_unknown_transports():
    request = to_request_options(authentication_options())

    assert request.rp_id == "attendance.test"
    assert [d.id for d in request.allow_credentials] == [b"\x07"]
    assert list(request.allow_credentials[0].transports) == ["usb"]


def test_create_credential_returns_raw_bytes():
    client = FakeClient()
    authenticator = make_authenticator(client)

    result = authenticator.create_credential(registration_options(), cancel=threading.Event())

    assert result.credential_id == b"\x01\x02\x03"
    assert result.attestation_object == b"\x09\x09"
    assert result.client_data_json == b'{"type":"webauthn.create"}'
    assert cbor.decode(result.public_key) == COSE_KEY
    assert result.transports == ("usb",)


def test_get_assertion_passes_the_counter_through():
    authenticator = make_authenticator(FakeClient())

    result = authenticator.get_assertion(authentication_options(), cancel=threading.Event())

    assert result.credential_id == b"\x07"
    assert result.authenticator_data == b"auth"
    assert result.sign_count == 42
    assert result.user_handle is None


def test_no_device_means_unsupported():
    authenticator = make_authenticator(FakeClient(), devices=())

    assert authenticator.is_supported() is False
    with pytest.raises(CapabilityUnsupported):
        authenticator.get_assertion(authentication_options(), cancel=threading.Event())


@pytest.mark.parametrize(
    "error, expected",
    [
        (ClientError(ClientError.ERR.DEVICE_INELIGIBLE, CtapError(CtapError.ERR.OPERATION_DENIED)), UserCancelled),
        (ClientError(ClientError.ERR.TIMEOUT), CeremonyTimeout),
        (ClientError(ClientError.ERR.CONFIGURATION_UNSUPPORTED), CapabilityUnsupported),
        (ClientError(ClientError.ERR.DEVICE_INELIGIBLE), CeremonyError),
        (ClientError(ClientError.ERR.BAD_REQUEST), CeremonyError),
    ],
)
def test_client_errors_are_translated(error, expected):
    authenticator = make_authenticator(FakeClient(error=error))

    with pytest.raises(expected):
        authenticator.create_credential(registration_options(), cancel=threading.Event())


def test_external_cancel_is_reported_as_user_cancelled():
    cancel = threading.Event()
    cancel.set()
    authenticator = make_authenticator(FakeClient(error=ClientError(ClientError.ERR.OTHER_ERROR)))

    with pytest.raises(UserCancelled):
        authenticator.get_assertion(authentication_options(), cancel=cancel)


def test_expired_timer_is_reported_as_timeout():
    client = FakeClient(error=ClientError(ClientError.ERR.OTHER_ERROR), wait_for_cancel=True)
    authenticator = make_authenticator(client)

    with pytest.raises(CeremonyTimeout):
        authenticator.get_assertion(authentication_options(timeout_ms=20), cancel=threading.Event())
