from __future__ import annotations

import secrets
import string
from typing import List

from .errors import InvalidPathError

_AUTO_ID_ALPHABET = string.ascii_letters + string.digits
_AUTO_ID_LENGTH = 20


def split_path(path: str) -> List[str]:
    if not isinstance(path, str) or not path:
        raise InvalidPathError(f"Path must be a non-empty string, got {path!r}")
    segments = path.split("/")
    if any(not s for s in segments):
        raise InvalidPathError(f"Invalid path {path!r}: empty segment")
    return segments


def collection_segments(path: str) -> List[str]:
    # collection/doc/collection: always an odd count
    segments = split_path(path)
    if len(segments) % 2 == 0:
        raise InvalidPathError(f"{path!r} is a document path, expected a collection path")
    return segments


def document_segments(path: str) -> List[str]:
    segments = split_path(path)
    if len(segments) % 2:
        raise InvalidPathError(f"{path!r} is a collection path, expected a document path")
    return segments


def validate_id(node_id: str) -> str:
    if not isinstance(node_id, str) or not node_id or "/" in node_id:
        raise InvalidPathError(f"Invalid id {node_id!r}")
    return node_id


def auto_id() -> str:
    """Random 20-character id, the same shape Firestore generates."""
    return "".join(secrets.choice(_AUTO_ID_ALPHABET) for _ in range(_AUTO_ID_LENGTH))
