from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Mapping, Optional, Tuple, Union

from ..core.enums import AttestationPreference, CeremonyKind, UserVerification
from ..core.exceptions import DomainError

PUBLIC_KEY = "public-key"


@dataclass(frozen=True)
class AlgorithmParam:
    algorithm_id: int
    type: str = PUBLIC_KEY


@dataclass(frozen=True)
class CredentialDescriptor:
    id: bytes
    type: str = PUBLIC_KEY
    transports: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CeremonyOptions:
    """One server-issued ceremony configuration, already decoded to bytes.

    Single-use: `challenge_text` is the exact string the server sent and is
    echoed back at verification time.
    """

    kind: CeremonyKind
    challenge: bytes
    challenge_text: str
    relying_party_id: str
    relying_party_name: Optional[str] = None
    user_id: Optional[bytes] = None
    user_name: Optional[str] = None
    user_display_name: Optional[str] = None
    algorithms: Tuple[AlgorithmParam, ...] = ()
    timeout_ms: int = 60000
    user_verification: UserVerification = UserVerification.PREFERRED
    attestation: AttestationPreference = AttestationPreference.NONE
    allowed_credentials: Tuple[CredentialDescriptor, ...] = ()
    excluded_credentials: Tuple[CredentialDescriptor, ...] = ()
    authenticator_attachment: Optional[str] = None
    resident_key: Optional[str] = None

    @property
    def allowed_credential_ids(self) -> FrozenSet[bytes]:
        return frozenset(d.id for d in self.allowed_credentials)


@dataclass(frozen=True)
class CredentialResult:
    """Registration output of the authenticator. `public_key` is None when
    the authenticator does not expose it."""

    credential_id: bytes
    attestation_object: bytes
    client_data_json: bytes
    public_key: Optional[bytes] = None
    transports: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AssertionResult:
    credential_id: bytes
    authenticator_data: bytes
    signature: bytes
    client_data_json: bytes
    sign_count: int = 0
    user_handle: Optional[bytes] = None


@dataclass(frozen=True)
class Enrolled:
    """A credential (or face template) was stored by the server."""

    credential: Mapping[str, Any] = field(default_factory=dict)
    user: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class Verified:
    """The server accepted a proof; `token`/`user` are set for logins."""

    proof: Mapping[str, Any] = field(default_factory=dict)

    @property
    def token(self) -> Optional[str]:
        return self.proof.get("token")

    @property
    def user(self) -> Optional[Mapping[str, Any]]:
        return self.proof.get("user")


@dataclass(frozen=True)
class Failed:
    error: DomainError


CeremonyOutcome = Union[Enrolled, Verified, Failed]
