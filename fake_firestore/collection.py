from __future__ import annotations

from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from .document import FakeDocumentRef, FakeDocumentSnapshot
from .errors import InvalidArgumentError, InvalidPathError
from .paths import auto_id, split_path, validate_id
from .timestamp import Timestamp

if TYPE_CHECKING:  # pragma: no cover
    from .client import FakeFirestore


class FakeCollectionRef:
    def __init__(
        self,
        firestore: "FakeFirestore",
        collection_id: str,
        parent: Optional[FakeDocumentRef] = None,
    ):
        self._firestore = firestore
        self._id = validate_id(collection_id)
        self._parent = parent
        self._path = f"{parent.path}/{collection_id}" if parent is not None else collection_id
        self._documents: Dict[str, FakeDocumentRef] = {}

    @property
    def id(self) -> str:
        return self._id

    @property
    def path(self) -> str:
        return self._path

    @property
    def parent(self) -> Optional[FakeDocumentRef]:
        return self._parent

    @property
    def firestore(self) -> "FakeFirestore":
        return self._firestore

    @property
    def documents(self) -> Dict[str, FakeDocumentRef]:
        # Every registered node, including placeholders that don't exist yet.
        return dict(self._documents)

    def document(self, document_path: Optional[str] = None) -> FakeDocumentRef:
        """
        Resolve a document relative to this collection, creating placeholders.

        With no argument a fresh document with a random id is returned.
        """
        if document_path is None:
            return self._resolve([auto_id()])
        segments = split_path(document_path)
        if len(segments) % 2 == 0:
            raise InvalidPathError(
                f"{document_path!r} resolves to a collection under {self._path!r}"
            )
        return self._resolve(segments)

    def _resolve(self, segments: Sequence[str]) -> Any:
        doc_id = segments[0]
        document = self._documents.get(doc_id)
        if document is None:
            document = FakeDocumentRef(self._firestore, doc_id, self)
            self._documents[doc_id] = document
        if len(segments) == 1:
            return document
        return document._resolve(segments[1:])

    def set_document(self, document: FakeDocumentRef) -> None:
        if document.firestore is not self._firestore or document.parent.path != self._path:
            raise InvalidArgumentError(
                f"{document.path!r} does not belong to collection {self._path!r}"
            )
        self._documents[document.id] = document

    def find_document(self, doc_id: str) -> Optional[FakeDocumentRef]:
        document = self._documents.get(doc_id)
        if document is None or not document.exists:
            return None
        return document

    def list_documents(self) -> List[FakeDocumentRef]:
        return [d for d in self._documents.values() if d.exists]

    async def stream(self) -> AsyncIterator[FakeDocumentSnapshot]:
        for document in self.list_documents():
            yield document._snapshot()

    async def get(self) -> List[FakeDocumentSnapshot]:
        return [snapshot async for snapshot in self.stream()]

    async def add(
        self, document_data: Dict[str, Any], document_id: Optional[str] = None
    ) -> Tuple[Timestamp, FakeDocumentRef]:
        document = self.document(document_id) if document_id is not None else self.document()
        # One server-time read per write: SERVER_TIMESTAMP values match update_time.
        update_time = self._firestore.current_server_time()
        document._create(document_data, lambda: update_time)
        return update_time, document

    def is_equal(self, other: object) -> bool:
        return (
            isinstance(other, FakeCollectionRef)
            and other._firestore is self._firestore
            and other._path == self._path
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FakeCollectionRef):
            return NotImplemented
        return self.is_equal(other)

    def __hash__(self) -> int:
        return hash((id(self._firestore), "collection", self._path))

    def __repr__(self) -> str:
        return f"FakeCollectionRef({self._path!r})"
