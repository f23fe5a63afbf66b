"""Public SDK surface for LemonDB.

LemonDB is a lightweight document-oriented key/value store. Documents
live in named tables and the whole database is persisted as one JSON
or YAML file. This module re-exports the primary handle and typed
option models.
"""

from __future__ import annotations

from core.config import LemonOption, parse_dump_rule
from core.errors import (
    LemonConfigError,
    LemonDecodeError,
    LemonEncodeError,
    LemonError,
    LemonIdError,
    LemonStorageError,
    LemonStorageNotFoundError,
)
from core.types import DecodedSnowflake, DumpRule, Snapshot
from serializer.json_codec import JsonCodec
from serializer.registry import build_codec, serializer_from_code
from serializer.yaml_codec import YamlCodec
from store.document_store import LemonDb, LemonTable
from store.dump_scheduler import DumpScheduler
from store.id_generator import LemonId, Snowflake
from store.snapshot_storage import SnapshotStorage

__all__ = [
    "DecodedSnowflake",
    "DumpRule",
    "DumpScheduler",
    "JsonCodec",
    "LemonConfigError",
    "LemonDb",
    "LemonDecodeError",
    "LemonEncodeError",
    "LemonError",
    "LemonId",
    "LemonIdError",
    "LemonOption",
    "LemonStorageError",
    "LemonStorageNotFoundError",
    "LemonTable",
    "Snapshot",
    "SnapshotStorage",
    "Snowflake",
    "YamlCodec",
    "build_codec",
    "parse_dump_rule",
    "serializer_from_code",
]
