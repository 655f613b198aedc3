from __future__ import annotations

from typing import Any, Dict, Iterator, Tuple, Union

try:  # pragma: no cover
    from google.cloud.firestore_v1.field_path import FieldPath as _ClientFieldPath  # type: ignore
except Exception:  # pragma: no cover
    _ClientFieldPath = None  # type: ignore[assignment]

from .errors import FieldTypeConflictError, InvalidArgumentError


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


# Marks "no value at this path"; distinct from a stored None.
MISSING: Any = _Missing()


class FieldPath:
    """Ordered, immutable sequence of field names addressing a nested value."""

    __slots__ = ("_segments",)

    def __init__(self, *segments: str):
        if not segments:
            raise ValueError("FieldPath needs at least one segment")
        for segment in segments:
            if not isinstance(segment, str) or not segment:
                raise ValueError(f"Invalid field path segment: {segment!r}")
        self._segments: Tuple[str, ...] = tuple(segments)

    @classmethod
    def from_string(cls, dotted: str) -> FieldPath:
        if not isinstance(dotted, str):
            raise ValueError(f"Field path must be a string, got {type(dotted).__name__}")
        return cls(*dotted.split("."))

    @property
    def segments(self) -> Tuple[str, ...]:
        return self._segments

    def parent(self) -> FieldPath | None:
        if len(self._segments) == 1:
            return None
        return FieldPath(*self._segments[:-1])

    def child(self, segment: str) -> FieldPath:
        return FieldPath(*self._segments, segment)

    def to_string(self) -> str:
        return ".".join(self._segments)

    def __getitem__(self, index: int) -> str:
        return self._segments[index]

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[str]:
        return iter(self._segments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldPath):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self) -> int:
        return hash(self._segments)

    def __repr__(self) -> str:
        args = ", ".join(repr(s) for s in self._segments)
        return f"FieldPath({args})"

    def __str__(self) -> str:
        return self.to_string()


FieldDesignator = Union[str, FieldPath]


def to_field_path(designator: Any) -> FieldPath:
    """Normalize an update designator (dotted string or FieldPath) to a FieldPath."""
    if isinstance(designator, FieldPath):
        return designator
    if isinstance(designator, str):
        try:
            return FieldPath.from_string(designator)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e
    if _ClientFieldPath is not None and isinstance(designator, _ClientFieldPath):
        return FieldPath(*designator.parts)
    raise InvalidArgumentError(
        f"Field designator must be a string or FieldPath, got {type(designator).__name__}"
    )


def get_value(data: Dict[str, Any], path: FieldPath) -> Any:
    """Read the value at `path`, or MISSING. Never raises and never creates."""
    current: Any = data
    for segment in path:
        if not isinstance(current, dict) or segment not in current:
            return MISSING
        current = current[segment]
    return current


def _child_map(current: Dict[str, Any], path: FieldPath, segment: str) -> Dict[str, Any] | None:
    child = current.get(segment, MISSING)
    if child is MISSING:
        return None
    if not isinstance(child, dict):
        raise FieldTypeConflictError(path.to_string(), segment)
    return child


def _ensure_parent(data: Dict[str, Any], path: FieldPath) -> Dict[str, Any]:
    current = data
    for segment in path.segments[:-1]:
        child = _child_map(current, path, segment)
        if child is None:
            child = {}
            current[segment] = child
        current = child
    return current


def _find_parent(data: Dict[str, Any], path: FieldPath) -> Dict[str, Any] | None:
    current = data
    for segment in path.segments[:-1]:
        child = _child_map(current, path, segment)
        if child is None:
            return None
        current = child
    return current


def set_value(data: Dict[str, Any], path: FieldPath, value: Any) -> None:
    """Create or overwrite the leaf at `path`, creating intermediate maps."""
    _ensure_parent(data, path)[path[-1]] = value


def delete_value(data: Dict[str, Any], path: FieldPath) -> None:
    parent = _find_parent(data, path)
    if parent is not None:
        parent.pop(path[-1], None)
