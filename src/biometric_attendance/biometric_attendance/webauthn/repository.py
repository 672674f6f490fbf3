from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol


class RelyingPartyGateway(Protocol):
    """Transport to the relying party's ceremony endpoints.

    Option calls return the raw option payload (decoding happens in
    `options.py`); completion calls return the server's success body.
    Failures are raised as `NetworkError` / `ApiError`.
    """

    def registration_options(self, *, label: str, token: str) -> Mapping[str, Any]:
        raise NotImplementedError

    def complete_registration(
        self, *, label: str, credential: Dict[str, Any], challenge: str, token: str
    ) -> Mapping[str, Any]:
        raise NotImplementedError

    def authentication_options(self, *, email: str) -> Mapping[str, Any]:
        raise NotImplementedError

    def complete_authentication(
        self, *, email: str, assertion: Dict[str, Any], challenge: str
    ) -> Mapping[str, Any]:
        raise NotImplementedError
