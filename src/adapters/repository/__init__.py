"""Repository adapters - Account and session persistence implementations."""

from .keyvalue import KeyValueAccountRepository, StoredAccount

__all__ = ["KeyValueAccountRepository", "StoredAccount"]
