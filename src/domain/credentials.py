"""
Credential store domain service - Accounts, authentication and session.

This module contains the core business logic for local accounts:

- Account creation with normalized, unique emails
- Salted SHA-256 password hashing (fresh 16-byte salt per account)
- Authentication that never reveals whether the email or the password failed
- A single persisted session pointer owned by the store instance

Security Notes
==============

- Hash comparison uses secrets.compare_digest() (constant time).
- An unknown email still hashes the candidate password against a dummy salt,
  so both failure paths do the same amount of work before raising the same
  InvalidCredentialsError.
- A stale session pointer (referencing no account) reads as no session.
"""

import hashlib
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from .exceptions import DuplicateEmailError, InvalidCredentialsError
from .models import AccountRecord, Session
from .ports import AccountRepository

logger = logging.getLogger(__name__)

SALT_BYTES = 16

# Salt used for unknown emails so the hash still runs.
_DUMMY_SALT = "00" * SALT_BYTES
_DUMMY_HASH = hashlib.sha256(("dummy_password_for_timing_safety" + _DUMMY_SALT).encode()).hexdigest()


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def generate_salt() -> str:
    """Generate a random 16-byte salt as a hex string."""
    return secrets.token_hex(SALT_BYTES)


def hash_password(password: str, salt: str) -> str:
    """Hash password concatenated with salt using SHA-256, hex-encoded."""
    return hashlib.sha256((password + salt).encode("utf-8", "surrogatepass")).hexdigest()


class PasswordStrength(Enum):
    """Password strength indicator levels for sign-up forms."""

    NONE = "none"
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"

    @property
    def label(self) -> str:
        return _STRENGTH_LABELS[self]

    @property
    def progress(self) -> float:
        return _STRENGTH_PROGRESS[self]

    @classmethod
    def of(cls, password: str) -> "PasswordStrength":
        """Classify a password by length."""
        length = len(password)
        if length == 0:
            return cls.NONE
        if length < 6:
            return cls.WEAK
        if length < 10:
            return cls.MEDIUM
        return cls.STRONG


_STRENGTH_LABELS = {
    PasswordStrength.NONE: "",
    PasswordStrength.WEAK: "Weak",
    PasswordStrength.MEDIUM: "Fair",
    PasswordStrength.STRONG: "Strong",
}

_STRENGTH_PROGRESS = {
    PasswordStrength.NONE: 0.0,
    PasswordStrength.WEAK: 0.33,
    PasswordStrength.MEDIUM: 0.66,
    PasswordStrength.STRONG: 1.0,
}


@dataclass
class CredentialStore:
    """
    Domain service for local accounts and the active session.

    All persistence goes through the repository port; the store is the only
    component that reads or writes accounts and the session pointer.
    """

    repository: AccountRepository

    def create_account(self, full_name: str, email: str, password: str) -> AccountRecord:
        """
        Create an account and sign it in.

        Args:
            full_name: User's display name (surrounding whitespace trimmed)
            email: User's email address (will be normalized)
            password: Plaintext password (hashed with a fresh salt)

        Returns:
            The created AccountRecord

        Raises:
            DuplicateEmailError: If an account already uses the normalized email
        """
        normalized_email = normalize_email(email)

        accounts = self.repository.load_accounts()
        if any(account.email == normalized_email for account in accounts):
            raise DuplicateEmailError()

        salt = generate_salt()
        account = AccountRecord(
            id=str(uuid.uuid4()),
            full_name=full_name.strip(),
            email=normalized_email,
            password_hash=hash_password(password, salt),
            password_salt=salt,
            created_at=datetime.now(timezone.utc),
        )

        self.repository.save_accounts([*accounts, account])
        self.repository.save_session(Session(account_id=account.id))

        logger.info("Account created: %s", account.id)
        return account

    def authenticate(self, email: str, password: str) -> AccountRecord:
        """
        Authenticate by email and password and sign the account in.

        Args:
            email: User's email (will be normalized)
            password: Plaintext password

        Returns:
            The authenticated AccountRecord

        Raises:
            InvalidCredentialsError: For unknown email and wrong password alike
        """
        normalized_email = normalize_email(email)
        account = self._find_by_email(normalized_email)

        if account is not None:
            stored_hash = account.password_hash
            candidate = hash_password(password, account.password_salt)
        else:
            stored_hash = _DUMMY_HASH
            candidate = hash_password(password, _DUMMY_SALT)

        password_valid = secrets.compare_digest(candidate.encode(), stored_hash.encode())

        if account is None or not password_valid:
            raise InvalidCredentialsError()

        self.repository.save_session(Session(account_id=account.id))
        return account

    def get_current_session(self) -> AccountRecord | None:
        """Resolve the session pointer to its account, or None if absent or stale."""
        session = self.repository.load_session()
        if session is None:
            return None

        for account in self.repository.load_accounts():
            if account.id == session.account_id:
                return account
        return None

    def logout(self) -> None:
        """Clear the session pointer. Safe to call with no active session."""
        self.repository.clear_session()

    def _find_by_email(self, normalized_email: str) -> AccountRecord | None:
        for account in self.repository.load_accounts():
            if account.email == normalized_email:
                return account
        return None
