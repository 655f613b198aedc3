from loguru import logger

from .client import FakeFirestore
from .collection import FakeCollectionRef
from .document import FakeDocumentRef, FakeDocumentSnapshot, Subscription
from .errors import (
    AlreadyExistsError,
    FakeFirestoreError,
    FieldTypeConflictError,
    InvalidArgumentError,
    InvalidPathError,
    NotFoundError,
)
from .field_path import FieldPath
from .sentinels import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    FieldValue,
)
from .timestamp import Timestamp

# Library convention for loguru: silent until the host opts in (see config.configure_logging).
logger.disable("fake_firestore")

__all__ = [
    "DELETE_FIELD",
    "SERVER_TIMESTAMP",
    "AlreadyExistsError",
    "ArrayRemove",
    "ArrayUnion",
    "FakeCollectionRef",
    "FakeDocumentRef",
    "FakeDocumentSnapshot",
    "FakeFirestore",
    "FakeFirestoreError",
    "FieldPath",
    "FieldTypeConflictError",
    "FieldValue",
    "InvalidArgumentError",
    "InvalidPathError",
    "NotFoundError",
    "Subscription",
    "Timestamp",
]
