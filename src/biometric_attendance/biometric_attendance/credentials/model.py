from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class EnrolledCredential:
    """Server-side credential record, shown on the settings screen."""

    id: str
    display_name: str
    created_at: Optional[datetime] = None
    last_used_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "lastUsedAt": self.last_used_at.isoformat() if self.last_used_at else None,
        }
