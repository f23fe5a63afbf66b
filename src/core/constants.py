"""Core constants used across LemonDB modules.

This module centralizes defaults and the identifier bit layout.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

DEFAULT_TABLE_NAME = "_table"
DEFAULT_SERIALIZER = "json"
DOCUMENT_ID_PREFIX = "id"
DEFAULT_EPOCH = 1_666_595_382
TIMESTAMP_SHIFT = 22
MAX_SEQUENCE = 4095
SEQUENCE_MASK = 0b1111_1111_1111
SEQUENCE_WAIT_SECONDS = 0.001
TEMP_FILE_SUFFIX = ".tmp"
ENV_TABLE_NAME = "LEMONDB_TABLE_NAME"
ENV_DUMP_RULE = "LEMONDB_DUMP_RULE"
ENV_SERIALIZER = "LEMONDB_SERIALIZER"
