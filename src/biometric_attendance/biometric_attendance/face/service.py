from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from ..core.constants import FACE_EMBEDDING_SIZE
from ..core.enums import VerificationReason
from ..core.exceptions import ApiError, AuthenticationError, NetworkError, ValidationError, VerificationFailed
from ..session import SessionContext
from ..webauthn.model import CeremonyOutcome, Enrolled, Failed, Verified
from .repository import FaceRepository

logger = logging.getLogger(__name__)


def normalize_embedding(values: Sequence[float], *, size: int = FACE_EMBEDDING_SIZE) -> np.ndarray:
    """Validate a face descriptor: 1-D, `size` finite floats."""
    if values is None:
        raise ValidationError("Face embedding is required")
    try:
        arr = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError):
        raise ValidationError("Face embedding must be a list of numbers") from None

    if arr.ndim != 1 or arr.shape[0] != size:
        raise ValidationError(f"Face embedding must have {size} values")
    if not np.all(np.isfinite(arr)):
        raise ValidationError("Face embedding contains invalid values")
    return arr


class FaceService:
    """Use case: enroll / verify a face embedding computed on the kiosk.

    Results use the same tagged outcome as the fingerprint ceremonies.
    """

    def __init__(self, faces: FaceRepository, *, embedding_size: int = FACE_EMBEDDING_SIZE):
        self._faces = faces
        self._size = int(embedding_size)

    def enroll(
        self, session: SessionContext, embedding: Sequence[float], *, model_version: Optional[str] = None
    ) -> CeremonyOutcome:
        try:
            token = session.require_token()
            vector = normalize_embedding(embedding, size=self._size).tolist()
            body = self._faces.enroll(token=token, embedding=vector, model_version=model_version)
        except (ValidationError, AuthenticationError, NetworkError) as e:
            return Failed(e)
        except ApiError as e:
            return Failed(VerificationFailed(VerificationReason.parse(e.reason)))

        logger.info("face template enrolled (model=%s)", model_version or "unspecified")
        return Enrolled(credential={"type": "face", "modelVersion": model_version}, user=body.get("user"))

    def verify(self, session: SessionContext, embedding: Sequence[float]) -> CeremonyOutcome:
        try:
            token = session.require_token()
            vector = normalize_embedding(embedding, size=self._size).tolist()
            body = self._faces.verify(token=token, embedding=vector)
        except (ValidationError, AuthenticationError, NetworkError) as e:
            return Failed(e)
        except ApiError as e:
            return Failed(VerificationFailed(VerificationReason.parse(e.reason)))

        if not body.get("verified"):
            return Failed(VerificationFailed(VerificationReason.FACE_MISMATCH))
        return Verified(proof={"verified": True, "embedding": vector})
