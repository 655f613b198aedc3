"""
Write-application engine.

Every function here works on a caller-owned working copy of a document's data
and returns the new mapping; the document commits it only if nothing raised,
so a failed write never leaves partial changes behind.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Sequence, Tuple, Union

from .errors import InvalidArgumentError
from .field_path import MISSING, FieldPath, delete_value, get_value, set_value, to_field_path
from .sentinels import ArrayRemove, ArrayUnion, DeleteField, ServerTimestamp, coerce_sentinel
from .timestamp import Timestamp

ServerTimeFn = Callable[[], Timestamp]
FieldUpdates = List[Tuple[FieldPath, Any]]


def copy_value(value: Any) -> Any:
    # Maps and arrays are copied; timestamps and references are shared.
    if isinstance(value, dict):
        return {k: copy_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [copy_value(v) for v in value]
    return value


def values_equal(a: Any, b: Any) -> bool:
    """Deep value equality used by array transforms; booleans never equal numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, Mapping):
        if not isinstance(b, Mapping) or a.keys() != b.keys():
            return False
        return all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)):
        if not isinstance(b, (list, tuple)) or len(a) != len(b):
            return False
        return all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(b, (Mapping, list, tuple)):
        return False
    return bool(a == b)


def _array_union(current: Any, values: List[Any]) -> List[Any]:
    if not isinstance(current, list):
        return copy_value(values)
    result = list(current)
    for item in values:
        if not any(values_equal(item, existing) for existing in result):
            result.append(copy_value(item))
    return result


def _array_remove(current: Any, values: List[Any]) -> List[Any]:
    if not isinstance(current, list):
        return []
    return [item for item in current if not any(values_equal(item, v) for v in values)]


def _resolve_list(items: Sequence[Any], server_time: ServerTimeFn) -> List[Any]:
    resolved = []
    for raw in items:
        item = coerce_sentinel(raw)
        if isinstance(item, DeleteField):
            continue
        resolved.append(resolve_value(item, MISSING, server_time))
    return resolved


def resolve_value(value: Any, current: Any, server_time: ServerTimeFn) -> Any:
    """
    Resolve an incoming (non-delete) value against whatever is stored at the target.

    `current` is MISSING when the target does not exist yet. Nested maps are
    written whole (resolved against an empty map), not merged.
    """
    value = coerce_sentinel(value)
    if isinstance(value, ServerTimestamp):
        return server_time()
    if isinstance(value, ArrayUnion):
        return _array_union(current, value.values)
    if isinstance(value, ArrayRemove):
        return _array_remove(current, value.values)
    if isinstance(value, Mapping):
        return merge_into({}, value, server_time)
    if isinstance(value, (list, tuple)):
        return _resolve_list(value, server_time)
    return value


def merge_into(target: Dict[str, Any], payload: Mapping, server_time: ServerTimeFn) -> Dict[str, Any]:
    """Deep-merge `payload` into `target` in place and return it."""
    for key, raw in payload.items():
        if not isinstance(key, str) or not key:
            raise InvalidArgumentError(f"Field names must be non-empty strings, got {key!r}")
        value = coerce_sentinel(raw)
        if isinstance(value, DeleteField):
            target.pop(key, None)
            continue
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                merge_into(existing, value, server_time)
            else:
                target[key] = merge_into({}, value, server_time)
            continue
        target[key] = resolve_value(value, target.get(key, MISSING), server_time)
    return target


def _require_mapping(payload: Any) -> Mapping:
    if not isinstance(payload, Mapping):
        raise InvalidArgumentError(
            f"Document data must be a mapping, got {type(payload).__name__}"
        )
    return payload


def apply_replace(payload: Any, server_time: ServerTimeFn) -> Dict[str, Any]:
    return merge_into({}, _require_mapping(payload), server_time)


def apply_merge(current: Dict[str, Any], payload: Any, server_time: ServerTimeFn) -> Dict[str, Any]:
    return merge_into(copy_value(current), _require_mapping(payload), server_time)


def apply_field_updates(
    current: Dict[str, Any], updates: FieldUpdates, server_time: ServerTimeFn
) -> Dict[str, Any]:
    """Apply (path, value) pairs left to right; later pairs see earlier ones."""
    working = copy_value(current)
    for path, raw in updates:
        value = coerce_sentinel(raw)
        if isinstance(value, DeleteField):
            delete_value(working, path)
            continue
        set_value(working, path, resolve_value(value, get_value(working, path), server_time))
    return working


def parse_update_args(args: Tuple[Any, ...]) -> Union[Mapping, FieldUpdates]:
    """
    Validate `update()` arguments: a single mapping, or alternating
    designator/value pairs normalized to (FieldPath, value).
    """
    if not args:
        raise InvalidArgumentError("update() requires a mapping or field/value pairs")
    if len(args) == 1:
        if isinstance(args[0], Mapping):
            return args[0]
        raise InvalidArgumentError("update() with one argument requires a mapping")
    if len(args) % 2:
        raise InvalidArgumentError(
            f"update() requires an even number of field/value arguments, got {len(args)}"
        )
    return [(to_field_path(args[i]), args[i + 1]) for i in range(0, len(args), 2)]
