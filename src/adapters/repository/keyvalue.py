"""
Key-value repository adapter - Implements AccountRepository protocol.

Accounts and the session pointer live under two independent keys of a
KeyValueStore:

- accounts key: JSON array of account records (camelCase fields)
- session key: the signed-in account id as a plain string

Record Validation
=================

Every record must carry all fields (id, fullName, email, passwordHash,
passwordSalt, createdAt) with well-formed values. One invalid record
rejects the whole collection: the read degrades to an empty list and a
WARNING is logged. Partially loaded collections are never returned.
"""

import logging
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from src.domain.models import AccountRecord, Session
from src.domain.ports import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS_KEY = "fondy.auth.users"
DEFAULT_SESSION_KEY = "fondy.auth.userRecordID"


class StoredAccount(BaseModel):
    """Persisted shape of an AccountRecord."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    full_name: str = Field(..., alias="fullName")
    email: str = Field(..., min_length=1)
    password_hash: str = Field(..., alias="passwordHash", pattern=r"^[0-9a-f]{64}$")
    password_salt: str = Field(..., alias="passwordSalt", pattern=r"^[0-9a-f]+$")
    created_at: datetime = Field(..., alias="createdAt")

    @classmethod
    def from_record(cls, record: AccountRecord) -> "StoredAccount":
        return cls(
            id=record.id,
            full_name=record.full_name,
            email=record.email,
            password_hash=record.password_hash,
            password_salt=record.password_salt,
            created_at=record.created_at,
        )

    def to_record(self) -> AccountRecord:
        return AccountRecord(
            id=self.id,
            full_name=self.full_name,
            email=self.email,
            password_hash=self.password_hash,
            password_salt=self.password_salt,
            created_at=self.created_at,
        )


_accounts_adapter = TypeAdapter(list[StoredAccount])


class KeyValueAccountRepository:
    """
    Implements AccountRepository protocol over a KeyValueStore.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        store: KeyValueStore,
        accounts_key: str = DEFAULT_ACCOUNTS_KEY,
        session_key: str = DEFAULT_SESSION_KEY,
    ) -> None:
        """
        Initialize repository with its backing store and keys.

        Args:
            store: Local key-value store holding both keys
            accounts_key: Key of the serialized account collection
            session_key: Key of the session pointer
        """
        self._store = store
        self._accounts_key = accounts_key
        self._session_key = session_key

    def load_accounts(self) -> list[AccountRecord]:
        raw = self._store.get(self._accounts_key)
        if raw is None:
            return []

        try:
            stored = _accounts_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Account collection under %r is invalid, treating as empty (%d error(s))",
                self._accounts_key,
                e.error_count(),
            )
            return []

        return [account.to_record() for account in stored]

    def save_accounts(self, accounts: list[AccountRecord]) -> None:
        stored = [StoredAccount.from_record(account) for account in accounts]
        payload = _accounts_adapter.dump_json(stored, by_alias=True).decode()
        self._store.set(self._accounts_key, payload)

    def load_session(self) -> Session | None:
        account_id = self._store.get(self._session_key)
        if not account_id:
            return None
        return Session(account_id=account_id)

    def save_session(self, session: Session) -> None:
        self._store.set(self._session_key, session.account_id)

    def clear_session(self) -> None:
        self._store.delete(self._session_key)
