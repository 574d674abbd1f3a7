"""
Application settings - pydantic-settings configuration.

This module defines application configuration using pydantic-settings
for environment variable loading with validation and defaults.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.domain.enrollment import EnrollmentPolicy


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Local persistence
    storage_path: str = "data/auth_store.json"  # JSON key-value store file
    accounts_key: str = "fondy.auth.users"
    session_key: str = "fondy.auth.userRecordID"

    # Enrollment settings
    default_country: str = "SG"  # ISO code pre-selected for phone and residence
    resend_countdown_seconds: int = 15  # OTP resend cooldown
    otp_completion_delay_seconds: float = 0.4  # Pause before auto-advancing a full OTP
    passcode_min_length: int = 6
    passcode_max_length: int = 12
    minimum_age: int = 18
    maximum_age: int = 120
    placeholder_email_domain: str = "fondy.phone"  # Used when no email was entered
    enrollment_idle_ttl_seconds: float = 1800  # Open enrollments untouched this long are evicted

    def enrollment_policy(self) -> EnrollmentPolicy:
        """Build the domain enrollment policy from these settings."""
        return EnrollmentPolicy(
            resend_countdown_seconds=self.resend_countdown_seconds,
            otp_completion_delay_seconds=self.otp_completion_delay_seconds,
            passcode_min_length=self.passcode_min_length,
            passcode_max_length=self.passcode_max_length,
            minimum_age=self.minimum_age,
            maximum_age=self.maximum_age,
            placeholder_email_domain=self.placeholder_email_domain,
            default_country_code=self.default_country,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
