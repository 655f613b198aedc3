from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from loguru import logger
from pydantic import ValidationError

from .collection import FakeCollectionRef
from .config import get_project_id
from .document import FakeDocumentRef
from .errors import InvalidArgumentError
from .models import CollectionDescription, DatabaseDescription
from .paths import collection_segments, document_segments
from .timestamp import Timestamp

ServerTime = Union[None, Timestamp, datetime, Callable[[], Union[Timestamp, datetime]]]


def _to_timestamp(value: Any) -> Timestamp:
    if isinstance(value, Timestamp):
        return value
    if isinstance(value, datetime):
        return Timestamp.from_datetime(value)
    raise TypeError(f"Server time must be a Timestamp or datetime, got {type(value).__name__}")


class FakeFirestore:
    """
    In-memory stand-in for an async Firestore client.

    Owns the whole collection/document tree. Every instance is independent, so
    tests get isolation by creating a fresh one (see the `fake_db` fixture).
    """

    def __init__(self, project: Optional[str] = None, server_time: ServerTime = None):
        self._project = project or get_project_id()
        self._collections: Dict[str, FakeCollectionRef] = {}
        self._server_time: ServerTime = None
        self.server_time = server_time

    @property
    def project(self) -> str:
        return self._project

    @property
    def server_time(self) -> ServerTime:
        return self._server_time

    @server_time.setter
    def server_time(self, value: ServerTime) -> None:
        if value is not None and not callable(value):
            value = _to_timestamp(value)
        self._server_time = value

    def current_server_time(self) -> Timestamp:
        # Read on every call: swapping the provider affects later writes only.
        source = self._server_time
        if source is None:
            return Timestamp.now()
        if callable(source):
            return _to_timestamp(source())
        return source

    # Path resolution

    def collection(self, path: str) -> FakeCollectionRef:
        return self._resolve(collection_segments(path))

    def document(self, path: str) -> FakeDocumentRef:
        return self._resolve(document_segments(path))

    def collections(self) -> List[FakeCollectionRef]:
        return list(self._collections.values())

    def _resolve(self, segments: Sequence[str]) -> Any:
        collection_id = segments[0]
        collection = self._collections.get(collection_id)
        if collection is None:
            collection = FakeCollectionRef(self, collection_id)
            self._collections[collection_id] = collection
        if len(segments) == 1:
            return collection
        return collection._resolve(segments[1:])

    # Harness interface

    def set_collection(self, collection: FakeCollectionRef) -> None:
        if collection.firestore is not self:
            raise InvalidArgumentError(f"{collection.path!r} belongs to another FakeFirestore")
        if collection.parent is None:
            self._collections[collection.id] = collection
        else:
            collection.parent._register_collection(collection)

    def load_database(self, database: Mapping[str, Any]) -> None:
        """Seed pre-existing documents. Not a write: listeners are not notified."""
        try:
            description = DatabaseDescription.model_validate(database)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid database description: {e}") from e

        loaded = 0
        for path, collection_description in description.root.items():
            loaded += self._load_collection(self.collection(path), collection_description)
        logger.info(f"Loaded {loaded} documents into {len(description.root)} collection(s)")

    def load_collection(self, path: str, documents: Mapping[str, Dict[str, Any]]) -> None:
        self.load_database({path: {"docs": {doc_id: {"data": data} for doc_id, data in documents.items()}}})

    def _load_collection(self, collection: FakeCollectionRef, description: CollectionDescription) -> int:
        loaded = 0
        for doc_id, doc_description in description.docs.items():
            document = collection.document(doc_id)
            if doc_description.data is not None:
                document._load(doc_description.data)
                loaded += 1
            for sub_path, sub_description in doc_description.collections.items():
                loaded += self._load_collection(document.collection(sub_path), sub_description)
        return loaded

    def reset(self) -> None:
        # Drops the whole tree (and every listener with it); server_time is kept.
        self._collections = {}
        logger.info(f"Reset in-memory Firestore for project {self._project}")
