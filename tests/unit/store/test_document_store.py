"""Unit tests for the document store and table handles."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from core.config import LemonOption
from core.errors import (
    LemonDecodeError,
    LemonEncodeError,
    LemonStorageError,
    LemonStorageNotFoundError,
)
from core.types import DumpRule
from store.document_store import LemonDb
from store.id_generator import LemonId, Snowflake


@dataclass
class User:
    name: str
    surname: str


def _memory_option(**overrides: object) -> LemonOption:
    return LemonOption(dump_rule=DumpRule.never(), **overrides)  # type: ignore[arg-type]


def test_new_creates_default_table_without_writing(tmp_path) -> None:
    """A fresh database holds only the default table and no file yet."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())

    assert db.tables() == ["_table"] and not (tmp_path / "db.json").exists()


def test_insert_adds_single_entry_document(tmp_path) -> None:
    """Each insert should add one document holding the encoded value."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())

    document_id = db.insert("hello", "world")

    assert db.table("_table").documents() == {document_id: {"hello": b'"world"'}}


def test_insert_names_documents_with_unique_ids(tmp_path) -> None:
    """Inserts within the same second must not overwrite each other."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())

    ids = [db.insert("n", index) for index in range(200)]

    assert len(set(ids)) == 200 and len(db.table("_table")) == 200


def test_reopened_store_does_not_reuse_persisted_ids(tmp_path, fake_clock) -> None:
    """A reopened store inserting in the same second must keep earlier documents."""
    db_path = tmp_path / "db.json"
    first_ids = LemonId("id", Snowflake(clock=fake_clock, sleep=fake_clock.sleep))
    first_id = LemonDb.new(db_path, LemonOption(), id_generator=first_ids).insert("a", 1)
    second_ids = LemonId("id", Snowflake(clock=fake_clock, sleep=fake_clock.sleep))
    reopened = LemonDb.open(db_path, LemonOption(), id_generator=second_ids)

    second_id = reopened.insert("b", 2)

    stored_keys = sorted(LemonDb.open(db_path).table("_table").keys())
    assert second_id != first_id and stored_keys == ["a", "b"]


def test_insert_ids_use_document_prefix(tmp_path) -> None:
    """Document ids should carry the ``id_`` prefix."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())

    document_id = db.insert("hello", "world")

    assert document_id.startswith("id_")


def test_tables_are_isolated_key_spaces(tmp_path) -> None:
    """Values inserted into one table should not appear in another."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())
    db.table("user").insert("name", "John Doe")

    default_table = db.table("_table")

    assert default_table.get("name") is None and "name" not in default_table


def test_table_handles_share_state(tmp_path) -> None:
    """Writes through one handle should be visible through any other."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())
    writer = db.table("user")
    reader = db.table("user")

    writer.insert("name", "John Doe")

    assert reader.get("name") == "John Doe" and len(reader) == 1


def test_configured_table_receives_database_inserts(tmp_path) -> None:
    """Inserts on the database go to the table named in the options."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option(table_name="user"))

    db.set("name", "John Doe")

    assert db.table("user").get("name") == "John Doe"


def test_get_returns_latest_value_for_key(tmp_path) -> None:
    """Later inserts shadow earlier ones for the same key."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())
    db.insert("counter", 1)
    db.insert("other", "x")
    db.insert("counter", 2)

    assert db.get("counter") == 2


def test_get_returns_none_for_missing_key(tmp_path) -> None:
    """Absent keys read as no value."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())

    assert db.get("missing") is None


def test_get_rebuilds_dataclass_values(tmp_path) -> None:
    """Dataclass values should read back through ``into``."""
    db = LemonDb.new(tmp_path / "db.yaml", _memory_option(serializer="yaml"))
    db.insert("user", User(name="John", surname="Doe"))

    assert db.get("user", into=User) == User(name="John", surname="Doe")


def test_insert_encode_failure_leaves_store_unchanged(tmp_path) -> None:
    """An unencodable value must not create a document or trigger a dump."""
    db = LemonDb.new(tmp_path / "db.json", LemonOption())

    with pytest.raises(LemonEncodeError):
        db.insert("bad", object())

    assert len(db.table("_table")) == 0 and db.scheduler.flush_count == 0


def test_delete_removes_every_document_with_key(tmp_path) -> None:
    """Delete should drop all documents holding the key."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())
    db.insert("a", 1)
    db.insert("a", 2)
    db.insert("b", 3)

    removed = db.delete("a")

    assert (removed, db.table("_table").keys()) == (2, ["b"])


def test_keys_lists_distinct_keys_newest_first(tmp_path) -> None:
    """Keys should be unique and ordered by latest insert."""
    table = LemonDb.new(tmp_path / "db.json", _memory_option()).table("t")
    for key in ("a", "b", "a", "c"):
        table.insert(key, key)

    assert table.keys() == ["c", "a", "b"]


def test_immediate_rule_writes_after_each_insert(tmp_path) -> None:
    """Immediate dumps should persist every insert."""
    db = LemonDb.new(tmp_path / "db.json", LemonOption(dump_rule=DumpRule.immediate()))
    db.insert("a", 1)
    db.insert("b", 2)

    assert db.scheduler.flush_count == 2 and (tmp_path / "db.json").exists()


def test_never_rule_keeps_data_in_memory(tmp_path) -> None:
    """Never dumps should not create the file however many inserts happen."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())
    for index in range(25):
        db.insert("n", index)

    assert not (tmp_path / "db.json").exists()


def test_periodic_rule_writes_once_interval_elapses(tmp_path, fake_clock) -> None:
    """Periodic dumps should wait for the interval between writes."""
    option = LemonOption(dump_rule=DumpRule.periodic(10))
    db = LemonDb.new(tmp_path / "db.json", option, dump_clock=fake_clock)
    db.insert("a", 1)
    fake_clock.advance(11)
    db.insert("b", 2)
    fake_clock.advance(2)
    db.insert("c", 3)

    assert db.scheduler.flush_count == 1


def test_flush_failure_reaches_insert_caller(tmp_path) -> None:
    """A failed immediate dump must be reported to the inserting caller."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    db = LemonDb.new(blocker / "db.json", LemonOption())

    with pytest.raises(LemonStorageError):
        db.insert("hello", "world")


def test_flush_writes_regardless_of_rule(tmp_path) -> None:
    """Explicit flush should persist even with dumps disabled."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())
    db.insert("hello", "world")

    db.flush()

    assert LemonDb.open(tmp_path / "db.json").get("hello") == "world"


def test_dump_applies_rule(tmp_path) -> None:
    """Dump should report whether the rule allowed a write."""
    db = LemonDb.new(tmp_path / "db.json", _memory_option())

    assert db.dump() is False


def test_open_raises_not_found_for_missing_file(tmp_path) -> None:
    """Opening a missing file must fail instead of returning an empty store."""
    with pytest.raises(LemonStorageNotFoundError):
        LemonDb.open(tmp_path / "missing.json")


def test_open_raises_decode_error_for_foreign_content(tmp_path) -> None:
    """Opening a file with invalid content should raise a decode error."""
    db_path = tmp_path / "db.json"
    db_path.write_bytes(b"\x00\x01 definitely not json")

    with pytest.raises(LemonDecodeError):
        LemonDb.open(db_path)


def test_open_ensures_configured_table_exists(tmp_path) -> None:
    """Opening with a new table name should make that table available."""
    db_path = tmp_path / "db.json"
    LemonDb.new(db_path, LemonOption()).flush()

    db = LemonDb.open(db_path, LemonOption(table_name="audit"))

    assert db.tables() == ["_table", "audit"]
