"""Persistence package - delta codec and key-value storage for progress."""

from campaigntree.persistence.codec import (
    LEGACY_LOCK_THRESHOLD,
    decode,
    dumps,
    encode,
    loads,
)
from campaigntree.persistence.documents import CURRENT_VERSION
from campaigntree.persistence.store import (
    DEFAULT_STORAGE_KEY,
    JsonFileProgressStore,
    MemoryProgressStore,
    ProgressStore,
)

__all__ = [
    "CURRENT_VERSION",
    "DEFAULT_STORAGE_KEY",
    "LEGACY_LOCK_THRESHOLD",
    "JsonFileProgressStore",
    "MemoryProgressStore",
    "ProgressStore",
    "decode",
    "dumps",
    "encode",
    "loads",
]
