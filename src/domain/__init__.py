"""
Domain layer - Pure business logic with zero framework imports.

This package contains the local credential store and the phone enrollment
state machine. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .countdown import ResendCountdown
from .credentials import CredentialStore, PasswordStrength
from .enrollment import EnrollmentDraft, EnrollmentPolicy
from .enrollment_machine import EnrollmentStateMachine
from .exceptions import (
    AuthError,
    DuplicateEmailError,
    EnrollmentClosedError,
    EnrollmentError,
    InvalidCredentialsError,
    UnknownCountryError,
)
from .models import AccountRecord, Session
from .ports import AccountRepository, CodeDispatcher, EnrollmentStep, KeyValueStore

__all__ = [
    "AccountRecord",
    "AccountRepository",
    "AuthError",
    "CodeDispatcher",
    "CredentialStore",
    "DuplicateEmailError",
    "EnrollmentClosedError",
    "EnrollmentDraft",
    "EnrollmentError",
    "EnrollmentPolicy",
    "EnrollmentStateMachine",
    "EnrollmentStep",
    "InvalidCredentialsError",
    "KeyValueStore",
    "PasswordStrength",
    "ResendCountdown",
    "Session",
    "UnknownCountryError",
]
