"""Structured telemetry records written by the service layer."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict


@dataclass(slots=True)
class QueryEvent:
    """One answered query, appended to ``logs/queries_YYYYMMDD.jsonl``."""

    timestamp: datetime
    event_type: str
    market_id: str = ""
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


__all__ = ["QueryEvent"]
