from __future__ import annotations

from typing import Protocol, Sequence

from .model import EnrolledCredential


class CredentialRepository(Protocol):
    def list_for_session(self, *, token: str) -> Sequence[EnrolledCredential]:
        raise NotImplementedError

    def rename(self, *, token: str, credential_id: str, name: str) -> bool:
        raise NotImplementedError

    def delete(self, *, token: str, credential_id: str) -> bool:
        raise NotImplementedError
