"""Key-value store adapters - Local persistence implementations."""

from .json_file import JsonFileKeyValueStore
from .memory import InMemoryKeyValueStore

__all__ = ["InMemoryKeyValueStore", "JsonFileKeyValueStore"]
