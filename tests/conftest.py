import pytest

from fake_firestore.client import FakeFirestore


@pytest.fixture()
def fake_db() -> FakeFirestore:
    return FakeFirestore(project="test-project")


@pytest.fixture()
def list_db(fake_db):
    """A database with one existing document, list/a = {first: 1, second: 2}."""
    fake_db.load_database({"list": {"docs": {"a": {"data": {"first": 1, "second": 2}}}}})
    return fake_db
