from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .api.connection import ApiConfig, ApiConnection
from .common.codec import get_codec
from .core.constants import DEFAULT_BIOMETRIC_PREFIX, DEFAULT_REQUEST_TIMEOUT_SECONDS
from .credentials.http_credential_repository import HttpCredentialRepository
from .credentials.repository import CredentialRepository
from .credentials.service import CredentialService
from .face.http_face_repository import HttpFaceRepository
from .face.repository import FaceRepository
from .face.service import FaceService
from .webauthn.authenticator import PlatformAuthenticator, UnavailableAuthenticator
from .webauthn.ceremony import CeremonyCoordinator
from .webauthn.fido2_authenticator import Fido2Authenticator
from .webauthn.http_relying_party import HttpRelyingPartyGateway
from .webauthn.repository import RelyingPartyGateway
from .webauthn.service import BiometricService


@dataclass(frozen=True)
class Container:
    conn: Optional[ApiConnection]

    relying_party: RelyingPartyGateway
    credentials_repo: CredentialRepository
    faces_repo: FaceRepository
    authenticator: PlatformAuthenticator
    coordinator: CeremonyCoordinator

    biometric_service: BiometricService
    credential_service: CredentialService
    face_service: FaceService


def build_authenticator(config: dict) -> PlatformAuthenticator:
    backend = str(config.get("backend", "fido2")).lower()
    if backend == "none":
        return UnavailableAuthenticator()
    if backend == "fido2":
        return Fido2Authenticator(origin=str(config["origin"]), pin=config.get("pin") or None)
    raise ValueError(f"Unknown authenticator backend: {backend!r}")


def assemble(
    *,
    relying_party: RelyingPartyGateway,
    credentials_repo: CredentialRepository,
    faces_repo: FaceRepository,
    authenticator: PlatformAuthenticator,
    transport_encoding: str = "base64url",
    default_rp_id: Optional[str] = None,
    conn: Optional[ApiConnection] = None,
) -> Container:
    """Wire services over given repositories (tests pass in-memory fakes)."""

    coordinator = CeremonyCoordinator()
    biometric_service = BiometricService(
        relying_party,
        authenticator,
        coordinator,
        codec=get_codec(transport_encoding),
        default_rp_id=default_rp_id,
    )
    return Container(
        conn=conn,
        relying_party=relying_party,
        credentials_repo=credentials_repo,
        faces_repo=faces_repo,
        authenticator=authenticator,
        coordinator=coordinator,
        biometric_service=biometric_service,
        credential_service=CredentialService(credentials_repo),
        face_service=FaceService(faces_repo),
    )


def build_container(*, api_config: dict, authenticator_config: dict) -> Container:
    config = ApiConfig(
        base_url=str(api_config["base_url"]),
        timeout_seconds=float(api_config.get("timeout_seconds", DEFAULT_REQUEST_TIMEOUT_SECONDS)),
        biometric_prefix=str(api_config.get("biometric_prefix", DEFAULT_BIOMETRIC_PREFIX)),
    )
    conn = ApiConnection.get_instance(config)

    return assemble(
        relying_party=HttpRelyingPartyGateway(conn),
        credentials_repo=HttpCredentialRepository(conn),
        faces_repo=HttpFaceRepository(conn),
        authenticator=build_authenticator(authenticator_config),
        transport_encoding=str(api_config.get("transport_encoding", "base64url")),
        default_rp_id=api_config.get("rp_id") or None,
        conn=conn,
    )
