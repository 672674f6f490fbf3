"""Response encoder: authenticator results -> transport payloads.

Every byte field goes through the codec; scalar fields pass through. An
optional field the authenticator did not provide is sent as an explicit
``None`` (JSON ``null``), never dropped and never as an empty string, so the
server can tell "not provided" from "empty".
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..common.codec import Base64Codec
from .model import PUBLIC_KEY, AssertionResult, CredentialResult


def _optional(codec: Base64Codec, value: Optional[bytes]) -> Optional[str]:
    return None if value is None else codec.encode(value)


def encode_credential(result: CredentialResult, codec: Base64Codec) -> Dict[str, Any]:
    return {
        "id": codec.encode(result.credential_id),
        "type": PUBLIC_KEY,
        "attestationObject": codec.encode(result.attestation_object),
        "clientDataJSON": codec.encode(result.client_data_json),
        "publicKey": _optional(codec, result.public_key),
        "transports": list(result.transports),
    }


def encode_assertion(result: AssertionResult, codec: Base64Codec) -> Dict[str, Any]:
    return {
        "id": codec.encode(result.credential_id),
        "type": PUBLIC_KEY,
        "authenticatorData": codec.encode(result.authenticator_data),
        "signature": codec.encode(result.signature),
        "clientDataJSON": codec.encode(result.client_data_json),
        "signCount": int(result.sign_count),
        "userHandle": _optional(codec, result.user_handle),
    }
