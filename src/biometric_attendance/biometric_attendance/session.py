from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .core.exceptions import AuthenticationError


@dataclass(frozen=True)
class SessionContext:
    """Explicit login state handed to services (never read from globals).

    Controllers build it from the Flask session; tests build it directly.
    """

    token: Optional[str] = None
    user: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def require_token(self) -> str:
        if not self.token:
            raise AuthenticationError("Please sign in first")
        return self.token

