import asyncio
from datetime import datetime, timezone

import pytest

from fake_firestore.sentinels import (
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    ArrayRemove,
    ArrayUnion,
    FieldValue,
)
from fake_firestore.timestamp import Timestamp


def _table_doc(fake_db, data):
    fake_db.load_database({"list": {"docs": {"a": {"data": data}}}})
    return fake_db.document("list/a")


# Delete sentinel


def test_delete_field_on_the_top_level(list_db):
    ref = list_db.document("list/a")
    asyncio.run(ref.update({"first": FieldValue.delete()}))
    assert ref.data == {"second": 2}
    assert "first" not in ref.data


def test_delete_field_from_sub_object(list_db):
    ref = list_db.document("list/a")

    async def _run():
        await ref.set({"third": {"sub": {"A": 1, "B": 2, "C": 3}}}, merge=True)
        await ref.update({"third": {"sub": {"B": DELETE_FIELD}}})

    asyncio.run(_run())
    assert ref.data == {"first": 1, "second": 2, "third": {"sub": {"A": 1, "C": 3}}}


def test_delete_field_with_field_path_update(list_db):
    ref = list_db.document("list/a")
    asyncio.run(ref.update("first", DELETE_FIELD, "nested.missing", DELETE_FIELD))
    assert ref.data == {"second": 2}


def test_delete_field_in_merge_removes_key(list_db):
    ref = list_db.document("list/a")
    asyncio.run(ref.set({"second": DELETE_FIELD, "third": 3}, merge=True))
    assert ref.data == {"first": 1, "third": 3}


def test_delete_field_in_replace_leaves_key_absent(fake_db):
    ref = fake_db.document("list/a")
    asyncio.run(ref.set({"a": 1, "b": DELETE_FIELD}))
    assert ref.data == {"a": 1}


def test_delete_field_inside_array_is_dropped(fake_db):
    ref = fake_db.document("list/a")
    asyncio.run(ref.set({"items": [1, DELETE_FIELD, 2]}))
    assert ref.data == {"items": [1, 2]}


def test_array_transforms_reject_sentinel_values():
    with pytest.raises(ValueError):
        ArrayUnion([DELETE_FIELD])
    with pytest.raises(ValueError):
        ArrayRemove([SERVER_TIMESTAMP])


# Timestamp sentinel


def test_server_timestamp_without_server_time(list_db):
    ref = list_db.document("list/a")
    asyncio.run(ref.update({"first": FieldValue.server_timestamp()}))
    assert isinstance(ref.data["first"], Timestamp)


def test_server_timestamp_with_fixed_timestamp(list_db):
    timestamp = Timestamp.from_datetime(datetime(2019, 3, 11, 20, 47, tzinfo=timezone.utc))
    list_db.server_time = timestamp
    ref = list_db.document("list/a")
    asyncio.run(ref.update({"first": SERVER_TIMESTAMP}))
    assert isinstance(ref.data["first"], Timestamp)
    assert timestamp.is_equal(ref.data["first"])


def test_server_timestamp_with_provider(list_db):
    timestamp = Timestamp.from_datetime(datetime(2019, 3, 11, 21, 47, tzinfo=timezone.utc))
    list_db.server_time = lambda: timestamp
    ref = list_db.document("list/a")
    asyncio.run(ref.update({"first": SERVER_TIMESTAMP}))
    assert ref.data["first"] == timestamp


def test_server_time_datetime_is_converted(list_db):
    list_db.server_time = datetime(2020, 1, 1, tzinfo=timezone.utc)
    ref = list_db.document("list/a")
    asyncio.run(ref.update("first", SERVER_TIMESTAMP))
    assert ref.data["first"] == Timestamp.from_datetime(datetime(2020, 1, 1, tzinfo=timezone.utc))


def test_server_time_provider_is_read_per_resolution(fake_db):
    calls = []

    def provider():
        calls.append(1)
        return Timestamp(len(calls))

    fake_db.server_time = provider
    ref = fake_db.document("list/a")
    asyncio.run(ref.set({"created": SERVER_TIMESTAMP, "meta": {"updated": SERVER_TIMESTAMP}}))
    assert ref.data == {"created": Timestamp(1), "meta": {"updated": Timestamp(2)}}


def test_changing_server_time_affects_later_writes_only(fake_db):
    first, second = fake_db.document("list/a"), fake_db.document("list/b")
    fake_db.server_time = Timestamp(100)
    asyncio.run(first.set({"at": SERVER_TIMESTAMP}))
    fake_db.server_time = lambda: Timestamp(200)
    asyncio.run(second.set({"at": SERVER_TIMESTAMP}))
    assert first.data["at"] == Timestamp(100)
    assert second.data["at"] == Timestamp(200)


def test_same_provider_snapshot_compares_equal_across_documents(fake_db):
    fake_db.server_time = lambda: Timestamp(42, 7)
    first, second = fake_db.document("list/a"), fake_db.document("other/b")

    async def _run():
        await first.set({"at": SERVER_TIMESTAMP})
        await second.set({"at": SERVER_TIMESTAMP})

    asyncio.run(_run())
    assert first.data["at"] == second.data["at"]


def test_server_timestamp_inside_array_of_maps(fake_db):
    fake_db.server_time = Timestamp(5)
    ref = fake_db.document("list/a")
    asyncio.run(ref.set({"events": [{"at": SERVER_TIMESTAMP, "kind": "created"}]}))
    assert ref.data == {"events": [{"at": Timestamp(5), "kind": "created"}]}


def test_invalid_server_time(fake_db):
    with pytest.raises(TypeError):
        fake_db.server_time = "now"
    fake_db.server_time = lambda: "later"
    with pytest.raises(TypeError):
        asyncio.run(fake_db.document("list/a").set({"at": SERVER_TIMESTAMP}))
    assert fake_db.document("list/a").exists is False


# Array sentinels


def test_array_union_adds_new_value_to_the_end(fake_db):
    ref = _table_doc(fake_db, {"table": [1, 2]})
    asyncio.run(ref.set({"table": FieldValue.array_union([3])}, merge=True))
    assert ref.data == {"table": [1, 2, 3]}


def test_array_union_adds_only_missing_values(fake_db):
    ref = _table_doc(fake_db, {"table": [1, 2]})
    asyncio.run(ref.set({"table": ArrayUnion([2, 3, 4])}, merge=True))
    assert ref.data == {"table": [1, 2, 3, 4]}


def test_array_union_overrides_non_array_value(fake_db):
    ref = _table_doc(fake_db, {"nottable": 1})
    asyncio.run(ref.set({"nottable": ArrayUnion([3, 4, 5])}, merge=True))
    assert ref.data == {"nottable": [3, 4, 5]}


def test_array_union_on_missing_field(fake_db):
    ref = _table_doc(fake_db, {})
    asyncio.run(ref.update("tags", ArrayUnion(["a", "b"])))
    assert ref.data == {"tags": ["a", "b"]}


def test_array_union_in_replace_write(fake_db):
    ref = _table_doc(fake_db, {"table": [1, 2]})
    asyncio.run(ref.set({"table": ArrayUnion([3])}))
    assert ref.data == {"table": [3]}


def test_array_union_uses_deep_value_equality(fake_db):
    ref = _table_doc(fake_db, {"table": [{"id": 1}, [1, 2], True]})
    asyncio.run(ref.update("table", ArrayUnion([{"id": 1}, [1, 2], 1, {"id": 2}])))
    assert ref.data == {"table": [{"id": 1}, [1, 2], True, 1, {"id": 2}]}


def test_array_union_suppresses_duplicates_among_new_values(fake_db):
    ref = _table_doc(fake_db, {"table": [1]})
    asyncio.run(ref.update("table", ArrayUnion([2, 2, 3, 1])))
    assert ref.data == {"table": [1, 2, 3]}


def test_array_remove_removes_a_value(fake_db):
    ref = _table_doc(fake_db, {"table": [1, 2]})
    asyncio.run(ref.set({"table": FieldValue.array_remove([1])}, merge=True))
    assert ref.data == {"table": [2]}


def test_array_remove_removes_all_matching_values(fake_db):
    ref = _table_doc(fake_db, {"table": [1, 2]})
    asyncio.run(ref.set({"table": ArrayRemove([1, 2, 3, 4])}, merge=True))
    assert ref.data == {"table": []}


def test_array_remove_overrides_non_array_with_empty_array(fake_db):
    ref = _table_doc(fake_db, {"nottable": 1})
    asyncio.run(ref.set({"nottable": ArrayRemove([3, 4, 5])}, merge=True))
    assert ref.data == {"nottable": []}


def test_array_remove_keeps_survivor_order_and_removes_every_occurrence(fake_db):
    ref = _table_doc(fake_db, {"table": [3, 1, {"k": 1}, 2, 1, {"k": 2}]})
    asyncio.run(ref.update({"table": ArrayRemove([1, {"k": 1}])}))
    assert ref.data == {"table": [3, 2, {"k": 2}]}


def test_array_sentinels_in_nested_merge(fake_db):
    ref = _table_doc(fake_db, {"profile": {"tags": ["a"], "name": "x"}})
    asyncio.run(ref.set({"profile": {"tags": ArrayUnion(["b"])}}, merge=True))
    assert ref.data == {"profile": {"tags": ["a", "b"], "name": "x"}}


def test_array_transforms_reject_non_sequences():
    with pytest.raises(TypeError):
        ArrayUnion("abc")
    with pytest.raises(TypeError):
        ArrayRemove({"a": 1})


def test_sentinel_values_are_copied():
    values = [1, 2]
    union = ArrayUnion(values)
    values.append(3)
    assert union.values == [1, 2]
    assert union == ArrayUnion([1, 2])
    assert FieldValue.delete() is DELETE_FIELD
    assert FieldValue.server_timestamp() is SERVER_TIMESTAMP


def test_array_transform_equality_keeps_booleans_apart():
    assert ArrayUnion([True]) != ArrayUnion([1])
    assert ArrayRemove([{"k": [1, 2]}]) == ArrayRemove([{"k": [1, 2]}])
    assert ArrayUnion([1]) != ArrayRemove([1])
