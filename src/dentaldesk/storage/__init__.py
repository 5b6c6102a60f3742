"""Key-value storage backends for dentaldesk."""

from dentaldesk.storage.abc import (
    DEFAULT_QUOTA_BYTES,
    INCIDENTS_KEY,
    PATIENTS_KEY,
    USER_KEY,
    KeyValueStore,
)
from dentaldesk.storage.file import JsonFileKeyValueStore
from dentaldesk.storage.memory import MemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "PATIENTS_KEY",
    "INCIDENTS_KEY",
    "USER_KEY",
    "DEFAULT_QUOTA_BYTES",
]
