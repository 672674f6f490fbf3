from __future__ import annotations

import logging
from typing import Sequence

from ..common.validators import require_max_length, require_non_empty
from ..core.exceptions import ApiError, AuthenticationError, AuthorizationError, ValidationError
from ..session import SessionContext
from .model import EnrolledCredential
from .repository import CredentialRepository

logger = logging.getLogger(__name__)


class CredentialService:
    """Use case: manage the enrolled credentials of the signed-in employee."""

    def __init__(self, credentials: CredentialRepository):
        self._credentials = credentials

    def _call(self, fn):
        try:
            return fn()
        except ApiError as e:
            if e.status == 401:
                raise AuthenticationError("Your session has expired. Please sign in again.") from e
            if e.status == 403:
                raise AuthorizationError("You do not have permission to manage this credential") from e
            raise

    def list_credentials(self, session: SessionContext) -> Sequence[EnrolledCredential]:
        token = session.require_token()
        return self._call(lambda: self._credentials.list_for_session(token=token))

    def rename(self, session: SessionContext, credential_id: str, name: str) -> None:
        token = session.require_token()
        credential_id = require_non_empty(credential_id, "Credential")
        name = require_max_length(require_non_empty(name, "Name"), "Name", 64)

        if not self._call(lambda: self._credentials.rename(token=token, credential_id=credential_id, name=name)):
            raise ValidationError("Credential not found")
        logger.info("credential %s renamed", credential_id)

    def delete(self, session: SessionContext, credential_id: str) -> None:
        token = session.require_token()
        credential_id = require_non_empty(credential_id, "Credential")

        if not self._call(lambda: self._credentials.delete(token=token, credential_id=credential_id)):
            raise ValidationError("Credential not found")
        logger.info("credential %s removed", credential_id)
