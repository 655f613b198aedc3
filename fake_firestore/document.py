from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from .engine import (
    ServerTimeFn,
    apply_field_updates,
    apply_merge,
    apply_replace,
    copy_value,
    parse_update_args,
)
from .errors import AlreadyExistsError, FakeFirestoreError, InvalidArgumentError, NotFoundError
from .field_path import MISSING, get_value, to_field_path
from .paths import collection_segments, validate_id

if TYPE_CHECKING:  # pragma: no cover
    from .client import FakeFirestore
    from .collection import FakeCollectionRef

SnapshotCallback = Callable[["FakeDocumentSnapshot"], Any]


@dataclass(frozen=True)
class FakeDocumentSnapshot:
    reference: "FakeDocumentRef"
    _data: Optional[Dict[str, Any]] = field(repr=False)

    @property
    def id(self) -> str:
        return self.reference.id

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        if self._data is None:
            return None
        # Deep copy so callers can't reach back into the captured state.
        return copy_value(self._data)

    def get(self, field_path: Any, default: Any = None) -> Any:
        if self._data is None:
            return default
        value = get_value(self._data, to_field_path(field_path))
        return default if value is MISSING else copy_value(value)


class Subscription:
    """Handle returned by on_snapshot(); call it (or unsubscribe()) to stop listening."""

    def __init__(self, document: "FakeDocumentRef", callback: SnapshotCallback):
        self._document = document
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._document._remove_subscription(self)

    def __call__(self) -> None:
        self.unsubscribe()


class FakeDocumentRef:
    def __init__(self, firestore: "FakeFirestore", doc_id: str, collection: "FakeCollectionRef"):
        self._firestore = firestore
        self._id = validate_id(doc_id)
        self._collection = collection
        self._path = f"{collection.path}/{doc_id}"
        self._data: Dict[str, Any] = {}
        self._exists = False
        self._subscriptions: List[Subscription] = []
        self._collections: Dict[str, "FakeCollectionRef"] = {}

    @property
    def id(self) -> str:
        return self._id

    @property
    def path(self) -> str:
        return self._path

    @property
    def parent(self) -> "FakeCollectionRef":
        return self._collection

    @property
    def firestore(self) -> "FakeFirestore":
        return self._firestore

    @property
    def exists(self) -> bool:
        return self._exists

    @property
    def data(self) -> Dict[str, Any]:
        return copy_value(self._data)

    # Tree navigation

    def collection(self, path: str) -> "FakeCollectionRef":
        return self._resolve(collection_segments(path))

    def collections(self) -> List["FakeCollectionRef"]:
        return list(self._collections.values())

    def _resolve(self, segments: Sequence[str]) -> Any:
        from .collection import FakeCollectionRef

        collection_id = segments[0]
        collection = self._collections.get(collection_id)
        if collection is None:
            collection = FakeCollectionRef(self._firestore, collection_id, self)
            self._collections[collection_id] = collection
        if len(segments) == 1:
            return collection
        return collection._resolve(segments[1:])

    def _register_collection(self, collection: "FakeCollectionRef") -> None:
        self._collections[collection.id] = collection

    # Reads

    async def get(self) -> FakeDocumentSnapshot:
        return self._snapshot()

    def _snapshot(self) -> FakeDocumentSnapshot:
        data = copy_value(self._data) if self._exists else None
        return FakeDocumentSnapshot(reference=self, _data=data)

    # Writes

    async def set(self, document_data: Dict[str, Any], merge: bool = False) -> None:
        self._set(document_data, merge, self._firestore.current_server_time)

    def _set(self, document_data: Dict[str, Any], merge: bool, server_time: ServerTimeFn) -> None:
        if not isinstance(merge, bool):
            raise InvalidArgumentError("merge must be True or False")
        try:
            if merge:
                new_data = apply_merge(self._data, document_data, server_time)
            else:
                new_data = apply_replace(document_data, server_time)
        except FakeFirestoreError as e:
            logger.debug(f"set {self._path} rejected: {e}")
            raise
        self._commit(new_data, exists=True, operation="merge" if merge else "set")

    async def create(self, document_data: Dict[str, Any]) -> None:
        self._create(document_data, self._firestore.current_server_time)

    def _create(self, document_data: Dict[str, Any], server_time: ServerTimeFn) -> None:
        if self._exists:
            logger.debug(f"create {self._path} rejected: document exists")
            raise AlreadyExistsError(self._path)
        self._set(document_data, False, server_time)

    async def update(self, *args: Any) -> None:
        """
        Update an existing document.

        Accepts either a single mapping, deep-merged into the current data, or
        alternating field/value arguments where each field is a dotted string or
        a FieldPath:

            await ref.update({"profile": {"name": "Alice"}})
            await ref.update("profile.name", "Alice", FieldPath("stats", "visits"), 3)
        """
        updates = parse_update_args(args)
        if not self._exists:
            logger.debug(f"update {self._path} rejected: document does not exist")
            raise NotFoundError(self._path)
        server_time = self._firestore.current_server_time
        try:
            if isinstance(updates, list):
                new_data = apply_field_updates(self._data, updates, server_time)
            else:
                new_data = apply_merge(self._data, updates, server_time)
        except FakeFirestoreError as e:
            logger.debug(f"update {self._path} rejected: {e}")
            raise
        self._commit(new_data, exists=True, operation="update")

    async def delete(self) -> None:
        self._commit({}, exists=False, operation="delete")

    def _commit(self, data: Dict[str, Any], exists: bool, operation: str) -> None:
        self._data = data
        self._exists = exists
        logger.debug(f"{operation} {self._path} committed (exists={exists})")
        self._notify()

    def _load(self, data: Dict[str, Any]) -> None:
        # Bulk load: not a committed write, so no listener fan-out. Sentinels
        # still resolve so stored data never holds one.
        self._data = apply_replace(data, self._firestore.current_server_time)
        self._exists = True

    # Observation

    def on_snapshot(self, callback: SnapshotCallback) -> Subscription:
        if not callable(callback):
            raise InvalidArgumentError("on_snapshot() requires a callable")
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        try:
            callback(self._snapshot())
        except Exception:
            self._remove_subscription(subscription)
            raise
        return subscription

    def listeners(self) -> List[SnapshotCallback]:
        return [s.callback for s in self._subscriptions]

    def _remove_subscription(self, subscription: Subscription) -> None:
        self._subscriptions = [s for s in self._subscriptions if s is not subscription]

    def _notify(self) -> None:
        # Iterate a copy: callbacks may unsubscribe (themselves or others) mid-fan-out.
        subscriptions = list(self._subscriptions)
        if not subscriptions:
            return
        snapshot = self._snapshot()
        logger.debug(f"Notifying {len(subscriptions)} listener(s) of {self._path}")
        for subscription in subscriptions:
            if subscription.active:
                subscription.callback(snapshot)

    # Identity

    def is_equal(self, other: object) -> bool:
        return (
            isinstance(other, FakeDocumentRef)
            and other._firestore is self._firestore
            and other._path == self._path
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FakeDocumentRef):
            return NotImplemented
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash((id(self._firestore), "document", self._path))

    def __repr__(self) -> str:
        return f"FakeDocumentRef({self._path!r})"
