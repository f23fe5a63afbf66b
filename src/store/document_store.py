"""Document store and table handles.

This module owns the in-memory table -> document -> key -> value
hierarchy. Every insert creates a new single-entry document named by a
snowflake id, then hands control to the dump scheduler.

    Table "user"
      document "id_MTIz..."
        key "name" -> encoded value (bytes)

Table handles are lightweight views holding only a table name. They read
and mutate the snapshot owned by their ``LemonDb``, so writes made through
one handle are visible through every other handle.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable

from core.config import LemonOption
from core.constants import DOCUMENT_ID_PREFIX
from core.logging_config import get_logger
from core.types import Document, Snapshot
from serializer.base import ValueCodec
from serializer.registry import build_codec
from store.dump_scheduler import DumpScheduler
from store.id_generator import LemonId
from store.snapshot_storage import SnapshotStorage

_LOGGER = get_logger(__name__)


class LemonDb:
    """File-backed document store.

    Use ``LemonDb.new`` for a fresh database and ``LemonDb.open`` to load an
    existing file. Inserts on the database itself go to the active table
    chosen by ``LemonOption.table_name``.
    """

    def __init__(
        self,
        db_path: Path,
        option: LemonOption,
        snapshot: Snapshot,
        id_generator: LemonId | None = None,
        dump_clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Wire a store around an existing snapshot.

        Args:
            db_path: Backing database file.
            option: Validated database options.
            snapshot: Snapshot the store takes ownership of.
            id_generator: Document id generator; one per store.
            dump_clock: Monotonic clock driving the dump scheduler.
        """
        self.db_path = db_path
        self.table_name = option.resolved_table_name
        self._option = option
        self._snapshot = snapshot
        self._codec: ValueCodec = build_codec(option.serializer)
        self._storage = SnapshotStorage(db_path, self._codec)
        self._scheduler = DumpScheduler(option.dump_rule, clock=dump_clock)
        self._ids = id_generator or LemonId(DOCUMENT_ID_PREFIX)
        self._snapshot.ensure_table(self.table_name)
        self._active = LemonTable(self, self.table_name)

    @classmethod
    def new(
        cls,
        db_path: str | Path,
        option: LemonOption | None = None,
        **kwargs: Any,
    ) -> "LemonDb":
        """Create an empty database holding only the configured table.

        Nothing is written until the first flush.

        Args:
            db_path: Backing database file.
            option: Database options; defaults when omitted.
            **kwargs: Forwarded to the constructor (id generator, dump clock).

        Returns:
            New database handle.
        """
        resolved_option = option or LemonOption()
        db = cls(Path(db_path), resolved_option, Snapshot(), **kwargs)
        _LOGGER.info(
            "database_created",
            path=str(db.db_path),
            table=db.table_name,
            serializer=resolved_option.serializer,
            dump_rule=resolved_option.dump_rule.kind,
        )
        return db

    @classmethod
    def open(
        cls,
        db_path: str | Path,
        option: LemonOption | None = None,
        **kwargs: Any,
    ) -> "LemonDb":
        """Load a database from its file.

        Args:
            db_path: Backing database file.
            option: Database options; the serializer must match the file.
            **kwargs: Forwarded to the constructor (id generator, dump clock).

        Returns:
            Database handle over the loaded snapshot.

        Raises:
            LemonStorageNotFoundError: If the file does not exist.
            LemonStorageError: If the file cannot be read.
            LemonDecodeError: If the file is not a valid database.
        """
        resolved_option = option or LemonOption()
        path = Path(db_path)
        snapshot = SnapshotStorage(path, build_codec(resolved_option.serializer)).read()
        db = cls(path, resolved_option, snapshot, **kwargs)
        _LOGGER.info(
            "database_opened",
            path=str(path),
            table=db.table_name,
            table_count=len(snapshot.tables),
        )
        return db

    @property
    def option(self) -> LemonOption:
        return self._option

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def scheduler(self) -> DumpScheduler:
        return self._scheduler

    def table(self, name: str) -> "LemonTable":
        """Select a table, creating it empty when absent.

        Args:
            name: Table name.

        Returns:
            Handle sharing this database's snapshot.
        """
        created = name not in self._snapshot.tables
        self._snapshot.ensure_table(name)
        _LOGGER.debug("table_selected", table=name, created=created)
        return LemonTable(self, name)

    def tables(self) -> list[str]:
        """Return table names in creation order."""
        return list(self._snapshot.tables)

    def insert(self, key: str, value: object) -> str:
        """Insert a value into the active table; see ``LemonTable.insert``."""
        return self._active.insert(key, value)

    def set(self, key: str, value: object) -> str:
        """Alias for ``insert``."""
        return self._active.insert(key, value)

    def get(self, key: str, into: type | None = None) -> Any:
        """Read a value from the active table; see ``LemonTable.get``."""
        return self._active.get(key, into)

    def delete(self, key: str) -> int:
        """Delete a key from the active table; see ``LemonTable.delete``."""
        return self._active.delete(key)

    def dump(self) -> bool:
        """Apply the dump rule now.

        Returns:
            Whether the snapshot was written.

        Raises:
            LemonStorageError: If the rule calls for a write and it fails.
        """
        return self._scheduler.maybe_flush(self._write_snapshot)

    def flush(self) -> None:
        """Write the snapshot regardless of the dump rule."""
        self._scheduler.force_flush(self._write_snapshot)

    def _documents(self, table_name: str) -> Document:
        return self._snapshot.ensure_table(table_name)

    def _insert_document(self, table_name: str, key: str, value: object) -> str:
        encoded = self._codec.encode(value)
        document_id = self._next_document_id()
        self._documents(table_name)[document_id] = {key: encoded}
        _LOGGER.debug("document_inserted", table=table_name, key=key, document_id=document_id)
        self.dump()
        return document_id

    def _next_document_id(self) -> str:
        # A reopened store restarts its sequence, so ids already on disk can recur.
        document_id = self._ids.generate()
        while any(document_id in documents for documents in self._snapshot.tables.values()):
            document_id = self._ids.generate()
        return document_id

    def _find_value(self, table_name: str, key: str, into: type | None) -> Any:
        for data in reversed(self._documents(table_name).values()):
            if key in data:
                return self._codec.decode(data[key], into)
        return None

    def _delete_documents(self, table_name: str, key: str) -> int:
        documents = self._documents(table_name)
        matching_ids = [document_id for document_id, data in documents.items() if key in data]
        for document_id in matching_ids:
            del documents[document_id]
        if matching_ids:
            _LOGGER.info("documents_deleted", table=table_name, key=key, count=len(matching_ids))
            self.dump()
        return len(matching_ids)

    def _write_snapshot(self) -> int:
        return self._storage.write(self._snapshot)


class LemonTable:
    """View over one table of a ``LemonDb``."""

    def __init__(self, db: LemonDb, name: str) -> None:
        self._db = db
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def insert(self, key: str, value: object) -> str:
        """Insert a value as a new single-key document.

        The value is encoded before the table is touched, so an encode
        failure leaves the store unchanged. The dump rule runs afterwards.

        Args:
            key: Data key.
            value: Value accepted by the configured codec.

        Returns:
            Id of the created document.

        Raises:
            LemonEncodeError: If the value cannot be encoded.
            LemonStorageError: If the dump rule writes and the write fails.
        """
        return self._db._insert_document(self._name, key, value)

    def set(self, key: str, value: object) -> str:
        """Alias for ``insert``."""
        return self.insert(key, value)

    def get(self, key: str, into: type | None = None) -> Any:
        """Return the most recently inserted value stored under ``key``.

        Lookup scans documents newest first; there is no key index.

        Args:
            key: Data key.
            into: Optional type (for example a dataclass) to rebuild.

        Returns:
            Decoded value, or ``None`` when absent or undecodable.
        """
        return self._db._find_value(self._name, key, into)

    def delete(self, key: str) -> int:
        """Remove every document holding ``key`` and return how many were removed."""
        return self._db._delete_documents(self._name, key)

    def keys(self) -> list[str]:
        """Return distinct keys, newest first."""
        seen: dict[str, None] = {}
        for data in reversed(self._db._documents(self._name).values()):
            for key in data:
                seen.setdefault(key, None)
        return list(seen)

    def documents(self) -> Mapping[str, Mapping[str, bytes]]:
        """Return a read-only view of the table's documents."""
        return MappingProxyType(self._db._documents(self._name))

    def __contains__(self, key: object) -> bool:
        return any(key in data for data in self._db._documents(self._name).values())

    def __len__(self) -> int:
        return len(self._db._documents(self._name))
