"""Saved profile entity and its persisted record shape."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import re
from typing import Any, Dict, Mapping

_WHITESPACE_RUN = re.compile(r"\s+")


def identity_for(name: str) -> str:
    """
    Derive the storage key of a profile from its display name.

    "My Profile", "my   profile" and "my_profile" all map to "my_profile",
    so saving under any of them overwrites the same record.
    """
    return _WHITESPACE_RUN.sub("_", name.lower())


def _timestamp_ms(value: Any) -> int:
    # unreadable values count as 0, the oldest position
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


@dataclass(frozen=True)
class Profile:
    id: str
    name: str
    params: Dict[str, str] = field(default_factory=dict)
    area: str = "0.00"
    timestamp: str = ""
    timestamp_ms: int = 0
    created_by: str = ""

    @classmethod
    def create(
        cls,
        name: str,
        params: Mapping[str, str],
        area: str,
        owner: str,
        now: datetime
    ) -> Profile:
        return cls(
            id=identity_for(name),
            name=name,
            params=dict(params),
            area=area,
            timestamp=now.strftime("%H:%M"),
            timestamp_ms=int(now.timestamp() * 1000),
            created_by=owner,
        )

    def to_record(self) -> Dict[str, Any]:
        """Mapping stored in the shared collection (keyed by `id`)."""
        return {
            "name": self.name,
            "params": dict(self.params),
            "area": self.area,
            "timestamp": self.timestamp,
            "timestampMs": self.timestamp_ms,
            "createdBy": self.created_by,
        }

    @classmethod
    def from_record(cls, profile_id: str, record: Mapping[str, Any]) -> Profile:
        params = record.get("params") or {}
        return cls(
            id=profile_id,
            name=str(record.get("name", profile_id)),
            params={str(k): str(v) for k, v in params.items()},
            area=str(record.get("area", "0.00")),
            timestamp=str(record.get("timestamp", "")),
            timestamp_ms=_timestamp_ms(record.get("timestampMs")),
            created_by=str(record.get("createdBy", "")),
        )
