"""
Shared fixtures for adversarial tests.

Provides a credential store over a real JSON file so tampering tests can
edit the persisted store directly.
"""

from pathlib import Path

import pytest

from src.adapters.kvstore.json_file import JsonFileKeyValueStore
from src.adapters.repository.keyvalue import KeyValueAccountRepository
from src.domain.credentials import CredentialStore


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "auth_store.json"


@pytest.fixture
def file_credential_store(store_path: Path) -> CredentialStore:
    """Credential store persisted to a temporary JSON file."""
    repository = KeyValueAccountRepository(JsonFileKeyValueStore(store_path))
    return CredentialStore(repository=repository)


def reopen(store_path: Path) -> CredentialStore:
    """Fresh credential store over the same file, as after a restart."""
    return CredentialStore(repository=KeyValueAccountRepository(JsonFileKeyValueStore(store_path)))
