"""
Domain models - Immutable records shared across the domain layer.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AccountRecord:
    """
    One registered user.

    Email is stored normalized (stripped + lowercased). The password hash is
    the hex SHA-256 digest of (password + password_salt) for this record's
    own salt.
    """

    id: str
    full_name: str
    email: str
    password_hash: str
    password_salt: str
    created_at: datetime


@dataclass(frozen=True)
class Session:
    """Pointer to the currently authenticated account."""

    account_id: str
