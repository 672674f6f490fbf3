from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence


class FaceRepository(Protocol):
    def enroll(self, *, token: str, embedding: Sequence[float], model_version: Optional[str]) -> Mapping[str, Any]:
        raise NotImplementedError

    def verify(self, *, token: str, embedding: Sequence[float]) -> Mapping[str, Any]:
        raise NotImplementedError
