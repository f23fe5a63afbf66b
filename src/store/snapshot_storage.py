"""Whole-database snapshot persistence.

This module reads and writes the full database as one codec-encoded
blob. Every write replaces the file in full; there is no incremental
update. Values are persisted as lists of byte integers inside a
sequence of table maps.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

from core.constants import TEMP_FILE_SUFFIX
from core.errors import LemonDecodeError, LemonStorageError, LemonStorageNotFoundError
from core.logging_config import get_logger
from core.types import Data, Document, Snapshot, Table
from serializer.base import ValueCodec
from store.id_generator import now_timestamp

_LOGGER = get_logger(__name__)


class SnapshotStorage:
    """File gateway for database snapshots."""

    def __init__(self, path: Path, codec: ValueCodec) -> None:
        """Initialize storage for one database file.

        Args:
            path: Backing database file.
            codec: Codec used to encode the snapshot.
        """
        self._path = path
        self._codec = codec

    @property
    def path(self) -> Path:
        return self._path

    def write(self, snapshot: Snapshot) -> int:
        """Encode and write the whole snapshot.

        The payload is written to a sibling temp file and renamed over the
        database file, so readers never observe a truncated snapshot.

        Args:
            snapshot: Snapshot to persist.

        Returns:
            Completion time in seconds since the Unix epoch.

        Raises:
            LemonEncodeError: If the codec cannot encode the snapshot.
            LemonStorageError: If the file cannot be written.
        """
        payload = self._codec.encode(_payload_from_snapshot(snapshot))
        temp_path = self._path.with_name(self._path.name + TEMP_FILE_SUFFIX)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(payload)
            temp_path.replace(self._path)
        except OSError as error:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise LemonStorageError(
                f"Failed to write database at {self._path}: {error}. "
                "Check write permissions and available disk space."
            ) from error
        completed_at = now_timestamp()
        _LOGGER.info(
            "snapshot_written",
            path=str(self._path),
            serializer=self._codec.name,
            table_count=len(snapshot.tables),
            byte_count=len(payload),
        )
        return completed_at

    def read(self) -> Snapshot:
        """Read and decode the whole snapshot.

        Returns:
            Decoded snapshot.

        Raises:
            LemonStorageNotFoundError: If the database file is missing.
            LemonStorageError: If the file exists but cannot be read.
            LemonDecodeError: If the content is not a valid snapshot.
        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError as error:
            raise LemonStorageNotFoundError(
                f"Database file not found at {self._path}. "
                "Create it with LemonDb.new before opening."
            ) from error
        except OSError as error:
            raise LemonStorageError(
                f"Failed to read database at {self._path}: {error}. "
                "Check that the path is a readable file."
            ) from error
        payload = self._codec.decode(raw)
        if payload is None:
            raise LemonDecodeError(
                f"Failed to decode database at {self._path} as {self._codec.name}. "
                "The file is corrupt or was written with another serializer."
            )
        snapshot = _snapshot_from_payload(payload, self._path)
        _LOGGER.info(
            "snapshot_read",
            path=str(self._path),
            serializer=self._codec.name,
            table_count=len(snapshot.tables),
        )
        return snapshot


def _payload_from_snapshot(snapshot: Snapshot) -> list[dict[str, object]]:
    """Render a snapshot as a codec-friendly sequence of table maps."""
    table_map: dict[str, object] = {
        table_name: {
            document_id: {key: list(value) for key, value in data.items()}
            for document_id, data in documents.items()
        }
        for table_name, documents in snapshot.tables.items()
    }
    return [table_map]


def _snapshot_from_payload(payload: object, path: Path) -> Snapshot:
    """Validate a decoded payload and rebuild the snapshot.

    A sequence holding several table maps is merged in order.
    """
    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        raise LemonDecodeError(
            f"Invalid database at {path}: expected a sequence of tables, "
            f"got {type(payload).__name__}."
        )
    tables: Table = {}
    for index, element in enumerate(payload):
        table_map = _expect_mapping(element, f"table map #{index}", path)
        for table_name, documents in table_map.items():
            tables.setdefault(table_name, {}).update(
                _parse_documents(documents, table_name, path)
            )
    if len(payload) > 1:
        _LOGGER.warning("snapshot_merged", path=str(path), element_count=len(payload))
    return Snapshot(tables=tables)


def _parse_documents(value: object, table_name: str, path: Path) -> Document:
    documents: Document = {}
    for document_id, data in _expect_mapping(value, f"table '{table_name}'", path).items():
        documents[document_id] = _parse_data(data, document_id, path)
    return documents


def _parse_data(value: object, document_id: str, path: Path) -> Data:
    data: Data = {}
    for key, raw in _expect_mapping(value, f"document '{document_id}'", path).items():
        data[key] = _parse_value(raw, f"{document_id}.{key}", path)
    return data


def _parse_value(value: object, context: str, path: Path) -> bytes:
    if not isinstance(value, list) or not all(
        isinstance(item, int) and not isinstance(item, bool) and 0 <= item <= 255
        for item in value
    ):
        raise LemonDecodeError(
            f"Invalid database at {path}: value '{context}' must be a list of byte integers."
        )
    return bytes(value)


def _expect_mapping(value: object, context: str, path: Path) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise LemonDecodeError(
            f"Invalid database at {path}: expected mapping for {context}, "
            f"got {type(value).__name__}."
        )
    for key in value:
        if not isinstance(key, str):
            raise LemonDecodeError(
                f"Invalid database at {path}: {context} has non-string key {key!r}."
            )
    return value
