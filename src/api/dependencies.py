"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Depends, HTTPException, Request, status

from src.adapters.repository.keyvalue import KeyValueAccountRepository
from src.adapters.sms.console import ConsoleCodeDispatcher
from src.api.enrollments import EnrollmentRegistry
from src.config.settings import get_settings
from src.domain.credentials import CredentialStore
from src.domain.enrollment import EnrollmentPolicy
from src.domain.enrollment_machine import EnrollmentStateMachine
from src.domain.ports import KeyValueStore

# Module-level singleton - ConsoleCodeDispatcher is stateless
_code_dispatcher = ConsoleCodeDispatcher()


def get_store(request: Request) -> KeyValueStore:
    """
    Get key-value store from app state.

    The store is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.store


def get_repository(request: Request) -> KeyValueAccountRepository:
    """Create repository over the key-value store from app state."""
    settings = get_settings()
    return KeyValueAccountRepository(
        get_store(request),
        accounts_key=settings.accounts_key,
        session_key=settings.session_key,
    )


def get_credential_store(request: Request) -> CredentialStore:
    """Create credential store with injected repository."""
    return CredentialStore(repository=get_repository(request))


def get_code_dispatcher() -> ConsoleCodeDispatcher:
    """Get console code dispatcher (singleton)."""
    return _code_dispatcher


def get_enrollment_policy() -> EnrollmentPolicy:
    """Build the enrollment policy from settings."""
    return get_settings().enrollment_policy()


def get_enrollment_registry(request: Request) -> EnrollmentRegistry:
    """Get the open-enrollment registry from app state."""
    return request.app.state.enrollments


def get_enrollment(
    enrollment_id: str,
    registry: EnrollmentRegistry = Depends(get_enrollment_registry),
) -> EnrollmentStateMachine:
    """Resolve an open enrollment by id, or respond 404."""
    machine = registry.get(enrollment_id)
    if machine is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Enrollment not found",
        )
    return machine
