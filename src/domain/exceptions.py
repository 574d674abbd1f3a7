"""
Domain exceptions - Semantic error types for authentication and enrollment.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""


class AuthError(Exception):
    """Base class for credential store errors."""

    pass


class DuplicateEmailError(AuthError):
    """An account with this normalized email already exists."""

    def __init__(self) -> None:
        super().__init__("An account with this email already exists")


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    def __init__(self) -> None:
        super().__init__("Incorrect email or password")


class EnrollmentError(Exception):
    """Base class for enrollment flow errors."""

    pass


class EnrollmentClosedError(EnrollmentError):
    """Operation attempted on a finished or closed enrollment."""

    pass


class UnknownCountryError(EnrollmentError):
    """Country code is not part of the supported catalogue."""

    pass
