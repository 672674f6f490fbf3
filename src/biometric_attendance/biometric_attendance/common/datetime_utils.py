from __future__ import annotations

from datetime import datetime
from typing import Optional


def parse_iso_datetime(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as sent by the API (``Z`` suffix allowed).

    Returns None for missing values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
