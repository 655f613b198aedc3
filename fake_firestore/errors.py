from __future__ import annotations


class FakeFirestoreError(Exception):
    """Base class for every error raised by the in-memory Firestore."""


class NotFoundError(FakeFirestoreError, KeyError):
    # KeyError keeps `except KeyError` callers of the old fake working.
    def __init__(self, path: str):
        super().__init__(f"Document {path} does not exist")
        self.path = path

    def __str__(self) -> str:
        return self.args[0]


class AlreadyExistsError(FakeFirestoreError):
    def __init__(self, path: str):
        super().__init__(f"Document {path} already exists")
        self.path = path


class FieldTypeConflictError(FakeFirestoreError, TypeError):
    """A field path walked through a value that is not a mapping."""

    def __init__(self, field_path: str, segment: str):
        super().__init__(
            f"Cannot resolve field path {field_path!r}: {segment!r} is not a map"
        )
        self.field_path = field_path
        self.segment = segment


class InvalidArgumentError(FakeFirestoreError, ValueError):
    pass


class InvalidPathError(FakeFirestoreError, ValueError):
    pass
