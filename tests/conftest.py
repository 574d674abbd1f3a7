"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory key-value store and account repository
- Credential store wired to the repository
- Enrollment policy tuned for fast tests
"""

from datetime import date

import pytest

from src.adapters.kvstore.memory import InMemoryKeyValueStore
from src.adapters.repository.keyvalue import KeyValueAccountRepository
from src.domain.credentials import CredentialStore
from src.domain.enrollment import EnrollmentPolicy

# Fixed "today" so age checks do not drift.
TODAY = date(2026, 10, 18)


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(kv_store: InMemoryKeyValueStore) -> KeyValueAccountRepository:
    return KeyValueAccountRepository(kv_store)


@pytest.fixture
def credential_store(repository: KeyValueAccountRepository) -> CredentialStore:
    return CredentialStore(repository=repository)


@pytest.fixture
def policy() -> EnrollmentPolicy:
    """Enrollment policy with an immediate OTP auto-completion."""
    return EnrollmentPolicy(otp_completion_delay_seconds=0)
