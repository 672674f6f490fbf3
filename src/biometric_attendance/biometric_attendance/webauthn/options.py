"""Turn server option payloads into `CeremonyOptions`.

Nothing is accepted until the whole payload validates: a non-empty
challenge, a relying party id and, for registration, a user id. The relying
party id comes from the server, or from the operator setting when the server
omits it; it is never derived from the local host name.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from ..common.codec import Base64Codec
from ..core.constants import DEFAULT_ALGORITHMS, DEFAULT_CEREMONY_TIMEOUT_MS
from ..core.enums import AttestationPreference, CeremonyKind, UserVerification
from ..core.exceptions import DecodeError, OptionsUnavailable
from .model import PUBLIC_KEY, AlgorithmParam, CeremonyOptions, CredentialDescriptor

E = TypeVar("E")


def _malformed(message: str) -> OptionsUnavailable:
    return OptionsUnavailable(message, reason="malformed_options")


def _decode(codec: Base64Codec, value: Any, field_name: str) -> bytes:
    if not isinstance(value, str):
        raise _malformed(f"{field_name} is missing")
    try:
        return codec.decode(value)
    except DecodeError as e:
        raise _malformed(f"{field_name} is not valid {codec.encoding.value}") from e


def _enum(enum_cls: Type[E], value: Any, default: E, field_name: str) -> E:
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError:
        raise _malformed(f"Unsupported {field_name}: {value!r}") from None


def _timeout(value: Any) -> int:
    if value is None:
        return DEFAULT_CEREMONY_TIMEOUT_MS
    if isinstance(value, bool):
        raise _malformed("timeout must be a number of milliseconds")
    try:
        timeout = int(value)
    except (TypeError, ValueError):
        raise _malformed("timeout must be a number of milliseconds") from None
    if timeout <= 0:
        raise _malformed("timeout must be positive")
    return timeout


def _algorithms(value: Any) -> Tuple[AlgorithmParam, ...]:
    if value is None:
        return tuple(AlgorithmParam(algorithm_id=alg) for alg in DEFAULT_ALGORITHMS)
    if not isinstance(value, Sequence) or isinstance(value, str) or not value:
        raise _malformed("pubKeyCredParams must be a non-empty list")

    params = []
    for item in value:
        if not isinstance(item, Mapping):
            raise _malformed("pubKeyCredParams entries must be objects")
        cred_type = item.get("type", PUBLIC_KEY)
        if cred_type != PUBLIC_KEY:
            raise _malformed(f"Unsupported credential type: {cred_type!r}")
        alg = item.get("alg")
        if not isinstance(alg, int) or isinstance(alg, bool):
            raise _malformed("pubKeyCredParams alg must be an integer")
        params.append(AlgorithmParam(algorithm_id=alg, type=cred_type))
    return tuple(params)


def _descriptors(codec: Base64Codec, value: Any, field_name: str) -> Tuple[CredentialDescriptor, ...]:
    if value is None:
        return ()
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise _malformed(f"{field_name} must be a list")

    out = []
    for item in value:
        if not isinstance(item, Mapping):
            raise _malformed(f"{field_name} entries must be objects")
        cred_type = item.get("type", PUBLIC_KEY)
        if cred_type != PUBLIC_KEY:
            raise _malformed(f"Unsupported credential type: {cred_type!r}")
        transports = item.get("transports")
        if transports is None:
            transports = ()
        elif not isinstance(transports, Sequence) or isinstance(transports, str):
            raise _malformed(f"{field_name} transports must be a list")
        out.append(
            CredentialDescriptor(
                id=_decode(codec, item.get("id"), f"{field_name} id"),
                type=cred_type,
                transports=tuple(str(t) for t in transports),
            )
        )
    return tuple(out)


def _challenge(codec: Base64Codec, data: Mapping[str, Any]) -> Tuple[bytes, str]:
    text = data.get("challenge")
    challenge = _decode(codec, text, "challenge")
    if not challenge:
        raise _malformed("challenge is empty")
    return challenge, text


def _require_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise _malformed(f"{field_name} is missing")
    return value


def _rp_id(server_value: Any, default_rp_id: Optional[str]) -> str:
    # Server-supplied value wins; the fallback is an operator setting, never the host name.
    if isinstance(server_value, str) and server_value.strip():
        return server_value
    return _require_text(default_rp_id, "rp id")


def parse_registration_options(
    data: Mapping[str, Any], codec: Base64Codec, *, default_rp_id: Optional[str] = None
) -> CeremonyOptions:
    if not isinstance(data, Mapping):
        raise _malformed("Registration options must be an object")

    challenge, challenge_text = _challenge(codec, data)

    rp = data.get("rp") or {}
    if not isinstance(rp, Mapping):
        raise _malformed("rp must be an object")
    user = data.get("user")
    if not isinstance(user, Mapping):
        raise _malformed("user is missing")

    user_id = _decode(codec, user.get("id"), "user id")
    if not user_id:
        raise _malformed("user id is empty")

    selection = data.get("authenticatorSelection") or {}
    if not isinstance(selection, Mapping):
        raise _malformed("authenticatorSelection must be an object")

    return CeremonyOptions(
        kind=CeremonyKind.REGISTRATION,
        challenge=challenge,
        challenge_text=challenge_text,
        relying_party_id=_rp_id(rp.get("id"), default_rp_id),
        relying_party_name=rp.get("name") or None,
        user_id=user_id,
        user_name=_require_text(user.get("name"), "user name"),
        user_display_name=user.get("displayName") or user.get("name"),
        algorithms=_algorithms(data.get("pubKeyCredParams")),
        timeout_ms=_timeout(data.get("timeout")),
        user_verification=_enum(
            UserVerification, selection.get("userVerification"), UserVerification.PREFERRED, "userVerification"
        ),
        attestation=_enum(AttestationPreference, data.get("attestation"), AttestationPreference.NONE, "attestation"),
        excluded_credentials=_descriptors(codec, data.get("excludeCredentials"), "excludeCredentials"),
        authenticator_attachment=selection.get("authenticatorAttachment"),
        resident_key=selection.get("residentKey"),
    )


def parse_authentication_options(
    data: Mapping[str, Any], codec: Base64Codec, *, default_rp_id: Optional[str] = None
) -> CeremonyOptions:
    if not isinstance(data, Mapping):
        raise _malformed("Authentication options must be an object")

    challenge, challenge_text = _challenge(codec, data)

    rp_id: Optional[str] = data.get("rpId")
    if rp_id is None and isinstance(data.get("rp"), Mapping):
        rp_id = data["rp"].get("id")

    return CeremonyOptions(
        kind=CeremonyKind.AUTHENTICATION,
        challenge=challenge,
        challenge_text=challenge_text,
        relying_party_id=_rp_id(rp_id, default_rp_id),
        timeout_ms=_timeout(data.get("timeout")),
        user_verification=_enum(
            UserVerification, data.get("userVerification"), UserVerification.PREFERRED, "userVerification"
        ),
        allowed_credentials=_descriptors(codec, data.get("allowCredentials"), "allowCredentials"),
    )
