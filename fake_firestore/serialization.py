from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from .document import FakeDocumentRef, FakeDocumentSnapshot
from .timestamp import Timestamp


def to_json_value(value: Any) -> Any:
    # Stable, JSON-friendly values (timestamps -> ISO 8601, references -> paths).
    if isinstance(value, (Timestamp, datetime)):
        return value.isoformat()
    if isinstance(value, FakeDocumentRef):
        return value.path
    if isinstance(value, dict):
        return {k: to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    return value


def snapshot_to_dict(snapshot: FakeDocumentSnapshot) -> Dict[str, Any]:
    data = snapshot.to_dict()
    return {
        "id": snapshot.id,
        "path": snapshot.reference.path,
        "exists": snapshot.exists,
        "data": to_json_value(data) if data is not None else None,
    }
