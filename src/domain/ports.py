"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import Protocol

from .models import AccountRecord, Session


class EnrollmentStep(str, Enum):
    """
    Steps of the phone-based sign-up flow, in forward order.

    Forward order:
        PHONE_ENTRY -> OTP_VERIFICATION -> NOTIFICATIONS -> COUNTRY_OF_RESIDENCE
        -> NAME_ENTRY -> EMAIL_ENTRY -> DATE_OF_BIRTH -> CREATE_PASSCODE

    Backward movement goes to the preceding step, except that leaving
    OTP_VERIFICATION backwards always lands on PHONE_ENTRY (phone
    confirmation is a modal, not a step). Completing CREATE_PASSCODE is the
    account creation hand-off, not a further step.
    """

    PHONE_ENTRY = "phoneEntry"
    OTP_VERIFICATION = "otpVerification"
    NOTIFICATIONS = "notifications"
    COUNTRY_OF_RESIDENCE = "countryOfResidence"
    NAME_ENTRY = "nameEntry"
    EMAIL_ENTRY = "emailEntry"
    DATE_OF_BIRTH = "dateOfBirth"
    CREATE_PASSCODE = "createPasscode"


class KeyValueStore(Protocol):
    """Port interface for a local persistent key-value store."""

    def get(self, key: str) -> str | None:
        """
        Read the value stored under key.

        Returns:
            Stored string, or None if the key is absent or unreadable
        """
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Remove key. Removing an absent key is not an error."""
        ...


class AccountRepository(Protocol):
    """Port interface for account collection and session persistence."""

    def load_accounts(self) -> list[AccountRecord]:
        """
        Load the full account collection.

        Unreadable or corrupt data degrades to an empty list; a single
        invalid record rejects the whole collection.
        """
        ...

    def save_accounts(self, accounts: list[AccountRecord]) -> None:
        """Persist the full account collection, replacing the stored one."""
        ...

    def load_session(self) -> Session | None:
        """Load the session pointer, or None if there is none."""
        ...

    def save_session(self, session: Session) -> None:
        """Persist the session pointer, overwriting any previous one."""
        ...

    def clear_session(self) -> None:
        """Remove the session pointer. Idempotent."""
        ...


class CodeDispatcher(Protocol):
    """Port interface for one-time passcode delivery."""

    def send_code(self, phone_number: str) -> None:
        """
        Request delivery of a one-time passcode.

        Args:
            phone_number: Full international number (dial code + digits)
        """
        ...
