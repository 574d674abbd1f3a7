"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field, field_validator, model_validator

from src.domain.countries import Country
from src.domain.credentials import PasswordStrength
from src.domain.enrollment_machine import EnrollmentStateMachine
from src.domain.models import AccountRecord
from src.domain.ports import EnrollmentStep


def _reject_lone_surrogates(value: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError("Text must be valid Unicode") from None
    return value


# Free text that must survive UTF-8 encoding (JSON responses, the store file).
Text = Annotated[str, AfterValidator(_reject_lone_surrogates)]


class SignUpRequest(BaseModel):
    """Request model for email sign-up."""

    full_name: Text = Field(..., min_length=1, description="User's full name")
    email: EmailStr
    password: Text = Field(..., min_length=8, description="User password (min 8 characters)")
    confirm_password: Text

    @field_validator("full_name")
    @classmethod
    def full_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Full name must not be blank")
        return value

    @model_validator(mode="after")
    def passwords_match(self) -> "SignUpRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    """Request model for email login."""

    email: Text = Field(..., min_length=1)
    password: Text = Field(..., min_length=6, description="User password (min 6 characters)")


class AccountResponse(BaseModel):
    """Public view of an account (no hash or salt)."""

    id: str
    full_name: str
    email: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: AccountRecord) -> "AccountResponse":
        return cls(
            id=record.id,
            full_name=record.full_name,
            email=record.email,
            created_at=record.created_at,
        )


class PasswordStrengthRequest(BaseModel):
    """Request model for password strength feedback."""

    password: str


class PasswordStrengthResponse(BaseModel):
    """Response model for password strength feedback."""

    strength: str
    label: str
    progress: float

    @classmethod
    def from_strength(cls, strength: PasswordStrength) -> "PasswordStrengthResponse":
        return cls(strength=strength.value, label=strength.label, progress=strength.progress)


class CountryModel(BaseModel):
    """Country as offered by the pickers."""

    code: str
    name: str
    dial_code: str
    flag_url: str

    @classmethod
    def from_country(cls, country: Country) -> "CountryModel":
        return cls(
            code=country.code,
            name=country.name,
            dial_code=country.dial_code,
            flag_url=country.flag_url,
        )


class EnrollmentResponse(BaseModel):
    """Snapshot of an in-progress enrollment."""

    id: str
    step: EnrollmentStep
    can_advance: bool

    country: CountryModel
    phone_number: str
    formatted_phone: str
    masked_phone: str

    otp_digits: list[str]
    focused_otp_index: int | None
    resend_countdown: int
    resend_countdown_formatted: str
    can_resend: bool

    notifications_enabled: bool | None
    residence_country: CountryModel

    first_name: str
    last_name: str
    alias: str
    email: str

    dob_month: str
    dob_day: str
    dob_year: str

    passcode_length: int = Field(..., description="Number of passcode digits entered")

    @classmethod
    def from_machine(cls, enrollment_id: str, machine: EnrollmentStateMachine) -> "EnrollmentResponse":
        draft = machine.draft
        countdown = machine.countdown
        return cls(
            id=enrollment_id,
            step=draft.step,
            can_advance=machine.can_advance,
            country=CountryModel.from_country(draft.country),
            phone_number=draft.phone_number,
            formatted_phone=draft.formatted_phone,
            masked_phone=draft.masked_phone,
            otp_digits=list(draft.otp_digits),
            focused_otp_index=draft.focused_otp_index,
            resend_countdown=countdown.remaining,
            resend_countdown_formatted=countdown.formatted,
            can_resend=countdown.can_resend,
            notifications_enabled=draft.notifications_enabled,
            residence_country=CountryModel.from_country(draft.residence_country),
            first_name=draft.first_name,
            last_name=draft.last_name,
            alias=draft.alias,
            email=draft.email,
            dob_month=draft.dob_month,
            dob_day=draft.dob_day,
            dob_year=draft.dob_year,
            passcode_length=len(draft.passcode_digits),
        )


class EnrollmentUpdateRequest(BaseModel):
    """Field edits for an enrollment; omitted fields are left unchanged."""

    country: str | None = Field(None, description="ISO code of the calling-code country")
    phone_number: str | None = None
    residence_country: str | None = Field(None, description="ISO code of the residence country")
    first_name: Text | None = None
    last_name: Text | None = None
    alias: Text | None = None
    email: Text | None = None
    dob_month: str | None = None
    dob_day: str | None = None
    dob_year: str | None = None


class OtpInputRequest(BaseModel):
    """Input typed or pasted into one OTP slot."""

    index: int = Field(..., ge=0, le=5, description="Targeted slot (0-5)")
    value: str = Field(..., max_length=32, description="Typed text; empty clears the slot")


class PasscodeDigitRequest(BaseModel):
    """One key press on the passcode keypad."""

    digit: str = Field(..., pattern=r"^[0-9]$", description="Single digit 0-9")


class AdvanceRequest(BaseModel):
    """Forward transition request; notifications_enabled answers the notifications prompt."""

    notifications_enabled: bool = True


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
