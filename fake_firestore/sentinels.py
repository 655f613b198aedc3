from __future__ import annotations

from typing import Any, Iterable, List

try:  # pragma: no cover
    from google.cloud.firestore_v1 import transforms as _client_transforms  # type: ignore
except Exception:  # pragma: no cover
    _client_transforms = None  # type: ignore[assignment]


class Sentinel:
    """Write-time directive; resolved by the write engine, never stored."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DeleteField(Sentinel):
    """Sentinel used to mimic google.cloud.firestore.DELETE_FIELD."""


class ServerTimestamp(Sentinel):
    """Sentinel used to mimic google.cloud.firestore.SERVER_TIMESTAMP."""


DELETE_FIELD = DeleteField()
SERVER_TIMESTAMP = ServerTimestamp()


class _ArrayTransform(Sentinel):
    def __init__(self, values: Iterable[Any]):
        if isinstance(values, (str, bytes, dict)):
            raise TypeError(f"{type(self).__name__} expects a sequence of values")
        self._values: List[Any] = list(values)
        if any(isinstance(v, Sentinel) for v in self._values):
            raise ValueError(f"{type(self).__name__} values cannot contain sentinels")

    @property
    def values(self) -> List[Any]:
        return list(self._values)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        from .engine import values_equal

        return values_equal(self._values, other._values)  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, len(self._values)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"


class ArrayUnion(_ArrayTransform):
    """Append values not already present in the target array."""


class ArrayRemove(_ArrayTransform):
    """Remove every occurrence of the given values from the target array."""


class FieldValue:
    """Factory namespace matching the shape of the JS SDK's FieldValue."""

    @staticmethod
    def delete() -> DeleteField:
        return DELETE_FIELD

    @staticmethod
    def server_timestamp() -> ServerTimestamp:
        return SERVER_TIMESTAMP

    @staticmethod
    def array_union(values: Iterable[Any]) -> ArrayUnion:
        return ArrayUnion(values)

    @staticmethod
    def array_remove(values: Iterable[Any]) -> ArrayRemove:
        return ArrayRemove(values)


def coerce_sentinel(value: Any) -> Any:
    """
    Map google-cloud-firestore sentinels onto the local ones.

    Lets code that imports `google.cloud.firestore.SERVER_TIMESTAMP` (and friends)
    write through the fake unchanged. Anything else is returned as-is.
    """
    if _client_transforms is None or isinstance(value, Sentinel):
        return value
    if value is _client_transforms.DELETE_FIELD:
        return DELETE_FIELD
    if value is _client_transforms.SERVER_TIMESTAMP:
        return SERVER_TIMESTAMP
    if isinstance(value, _client_transforms.ArrayUnion):
        return ArrayUnion(value.values)
    if isinstance(value, _client_transforms.ArrayRemove):
        return ArrayRemove(value.values)
    return value
