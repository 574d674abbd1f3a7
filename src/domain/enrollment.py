"""
Enrollment draft and pure transition functions for phone sign-up.

Every function in this module takes a frozen EnrollmentDraft (plus any
event data) and returns a new EnrollmentDraft; nothing here performs I/O or
touches timers. EnrollmentStateMachine applies these functions and owns the
asynchronous resources (resend countdown, OTP auto-completion).

Forward gates
=============

- PHONE_ENTRY: phone digits non-empty and at least the country's minimum
- OTP_VERIFICATION: all six slots filled
- NOTIFICATIONS: always open (opt-in or opt-out)
- COUNTRY_OF_RESIDENCE: a residence country is selected
- NAME_ENTRY: first and last name non-blank, alias optional
- EMAIL_ENTRY: structurally valid address
- DATE_OF_BIRTH: MM in 01-12, DD in 01-31 (no calendar check), YYYY giving
  an adult, plausible age
- CREATE_PASSCODE: 6 to 12 digits
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date

from .countries import CANADA, SINGAPORE, UNITED_STATES, Country, find_country
from .ports import EnrollmentStep

OTP_LENGTH = 6
EMPTY_OTP: tuple[str, ...] = ("",) * OTP_LENGTH

# Forward order of the wizard.
STEP_ORDER: tuple[EnrollmentStep, ...] = tuple(EnrollmentStep)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class EnrollmentPolicy:
    """Tunable limits for the enrollment flow."""

    resend_countdown_seconds: int = 15
    otp_completion_delay_seconds: float = 0.4
    passcode_min_length: int = 6
    passcode_max_length: int = 12
    minimum_age: int = 18
    maximum_age: int = 120
    placeholder_email_domain: str = "fondy.phone"
    default_country_code: str = SINGAPORE.code


@dataclass(frozen=True)
class EnrollmentDraft:
    """Immutable snapshot of an in-progress sign-up."""

    step: EnrollmentStep = EnrollmentStep.PHONE_ENTRY

    # Phone entry
    country: Country = SINGAPORE
    phone_number: str = ""

    # OTP verification
    otp_digits: tuple[str, ...] = EMPTY_OTP
    focused_otp_index: int | None = 0

    # Notifications prompt (None until answered)
    notifications_enabled: bool | None = None

    # Country of residence
    residence_country: Country = SINGAPORE

    # Name entry
    first_name: str = ""
    last_name: str = ""
    alias: str = ""

    # Email entry
    email: str = ""

    # Date of birth, raw digit strings
    dob_month: str = ""
    dob_day: str = ""
    dob_year: str = ""

    # Passcode
    passcode_digits: str = ""

    @property
    def otp_code(self) -> str:
        return "".join(self.otp_digits)

    @property
    def is_otp_complete(self) -> bool:
        return all(self.otp_digits)

    @property
    def full_name(self) -> str:
        """First and last name, trimmed and joined by a single space."""
        return f"{self.first_name.strip()} {self.last_name.strip()}".strip()

    @property
    def formatted_phone(self) -> str:
        """Phone number for display, e.g. "(650) 213-7390" for US/CA numbers."""
        if not self.phone_number:
            return ""
        if self.country in (UNITED_STATES, CANADA):
            return _format_north_american(self.phone_number)
        return self.phone_number

    @property
    def full_international_number(self) -> str:
        """Dial code plus digits grouped by three, e.g. "+1 650 213 739 0"."""
        return f"{self.country.dial_code} {_space_digits(self.phone_number, 3)}"

    @property
    def masked_phone(self) -> str:
        """Dial code plus digits grouped by four, e.g. "+65 9036 6027"."""
        return f"{self.country.dial_code} {_space_digits(self.phone_number, 4)}"


def new_draft(policy: EnrollmentPolicy) -> EnrollmentDraft:
    """Create a draft at PHONE_ENTRY with the policy's default countries."""
    country = find_country(policy.default_country_code)
    return EnrollmentDraft(country=country, residence_country=country)


# ---------------------------------------------------------------------------
# Forward gates
# ---------------------------------------------------------------------------


def is_phone_valid(draft: EnrollmentDraft) -> bool:
    digits = only_digits(draft.phone_number)
    return bool(digits) and len(digits) >= draft.country.min_phone_digits


def is_name_valid(draft: EnrollmentDraft) -> bool:
    return bool(draft.first_name.strip()) and bool(draft.last_name.strip())


def is_email_valid(draft: EnrollmentDraft) -> bool:
    return _EMAIL_PATTERN.match(draft.email.strip()) is not None


def is_date_of_birth_valid(draft: EnrollmentDraft, today: date, policy: EnrollmentPolicy) -> bool:
    """
    Check the structural date of birth gate.

    Day is bounded to 01-31 without checking it against the month or year,
    so February 30 passes.
    """
    if not _is_number_in_range(draft.dob_month, 2, 1, 12):
        return False
    if not _is_number_in_range(draft.dob_day, 2, 1, 31):
        return False
    if not _is_number_in_range(draft.dob_year, 4, 1, 9999):
        return False

    month, day, year = int(draft.dob_month), int(draft.dob_day), int(draft.dob_year)
    age = today.year - year - ((today.month, today.day) < (month, day))
    return policy.minimum_age <= age <= policy.maximum_age


def is_passcode_valid(draft: EnrollmentDraft, policy: EnrollmentPolicy) -> bool:
    length = len(draft.passcode_digits)
    return policy.passcode_min_length <= length <= policy.passcode_max_length


def can_advance(draft: EnrollmentDraft, today: date, policy: EnrollmentPolicy) -> bool:
    """Whether the forward gate of the draft's current step holds."""
    gates: dict[EnrollmentStep, Callable[[], bool]] = {
        EnrollmentStep.PHONE_ENTRY: lambda: is_phone_valid(draft),
        EnrollmentStep.OTP_VERIFICATION: lambda: draft.is_otp_complete,
        EnrollmentStep.NOTIFICATIONS: lambda: True,
        EnrollmentStep.COUNTRY_OF_RESIDENCE: lambda: draft.residence_country is not None,
        EnrollmentStep.NAME_ENTRY: lambda: is_name_valid(draft),
        EnrollmentStep.EMAIL_ENTRY: lambda: is_email_valid(draft),
        EnrollmentStep.DATE_OF_BIRTH: lambda: is_date_of_birth_valid(draft, today, policy),
        EnrollmentStep.CREATE_PASSCODE: lambda: is_passcode_valid(draft, policy),
    }
    return gates[draft.step]()


# ---------------------------------------------------------------------------
# Step transitions
# ---------------------------------------------------------------------------


def advance(draft: EnrollmentDraft, today: date, policy: EnrollmentPolicy) -> EnrollmentDraft:
    """
    Move to the next step if the current gate holds.

    CREATE_PASSCODE has no next step; its forward action is the account
    hand-off, so the draft is returned unchanged.
    """
    if draft.step is EnrollmentStep.CREATE_PASSCODE:
        return draft
    if not can_advance(draft, today, policy):
        return draft
    next_step = STEP_ORDER[STEP_ORDER.index(draft.step) + 1]
    return _enter(draft, next_step)


def go_back(draft: EnrollmentDraft) -> EnrollmentDraft:
    """Move to the preceding step; OTP_VERIFICATION goes back to PHONE_ENTRY."""
    if draft.step is EnrollmentStep.PHONE_ENTRY:
        return draft
    if draft.step is EnrollmentStep.OTP_VERIFICATION:
        return go_back_to_phone_entry(draft)
    previous_step = STEP_ORDER[STEP_ORDER.index(draft.step) - 1]
    return _enter(draft, previous_step)


def go_back_to_phone_entry(draft: EnrollmentDraft) -> EnrollmentDraft:
    if draft.step is not EnrollmentStep.OTP_VERIFICATION:
        return draft
    return replace(draft, step=EnrollmentStep.PHONE_ENTRY)


def reset_otp(draft: EnrollmentDraft) -> EnrollmentDraft:
    """Clear every OTP slot and focus the first one."""
    return replace(draft, otp_digits=EMPTY_OTP, focused_otp_index=0)


def _enter(draft: EnrollmentDraft, step: EnrollmentStep) -> EnrollmentDraft:
    entered = replace(draft, step=step)
    if step is EnrollmentStep.OTP_VERIFICATION:
        return reset_otp(entered)
    if step is EnrollmentStep.CREATE_PASSCODE:
        return replace(entered, passcode_digits="")
    return entered


# ---------------------------------------------------------------------------
# OTP digit entry
# ---------------------------------------------------------------------------


def enter_otp(draft: EnrollmentDraft, index: int, text: str) -> EnrollmentDraft:
    """
    Apply input typed into OTP slot `index`.

    - one digit: store it, focus the next slot (none after the last)
    - several digits (paste): fill left to right from `index`, drop overflow,
      focus the first empty slot (none when all six are filled)
    - empty: clear the slot, focus the previous slot if any

    Non-digit characters are discarded before the rules above apply. Input
    outside OTP_VERIFICATION is ignored.
    """
    if not 0 <= index < OTP_LENGTH:
        raise ValueError(f"OTP slot index out of range: {index}")
    if draft.step is not EnrollmentStep.OTP_VERIFICATION:
        return draft

    digits = only_digits(text)
    slots = list(draft.otp_digits)

    if not digits:
        slots[index] = ""
        focus: int | None = index - 1 if index > 0 else index
    elif len(digits) == 1:
        slots[index] = digits
        focus = index + 1 if index < OTP_LENGTH - 1 else None
    else:
        run = digits[: OTP_LENGTH - index]
        for offset, digit in enumerate(run):
            slots[index + offset] = digit
        focus = _first_empty_slot(slots, start=index + len(run))

    return replace(draft, otp_digits=tuple(slots), focused_otp_index=focus)


def _first_empty_slot(slots: list[str], start: int) -> int | None:
    for i in [*range(start, OTP_LENGTH), *range(0, start)]:
        if not slots[i]:
            return i
    return None


# ---------------------------------------------------------------------------
# Field edits
# ---------------------------------------------------------------------------


def set_phone_number(draft: EnrollmentDraft, text: str) -> EnrollmentDraft:
    return replace(draft, phone_number=only_digits(text))


def clear_phone(draft: EnrollmentDraft) -> EnrollmentDraft:
    return replace(draft, phone_number="")


def select_country(draft: EnrollmentDraft, code: str) -> EnrollmentDraft:
    return replace(draft, country=find_country(code))


def select_residence_country(draft: EnrollmentDraft, code: str) -> EnrollmentDraft:
    return replace(draft, residence_country=find_country(code))


def set_notifications(draft: EnrollmentDraft, enabled: bool) -> EnrollmentDraft:
    return replace(draft, notifications_enabled=enabled)


def set_names(
    draft: EnrollmentDraft,
    first_name: str | None = None,
    last_name: str | None = None,
    alias: str | None = None,
) -> EnrollmentDraft:
    return replace(
        draft,
        first_name=draft.first_name if first_name is None else first_name,
        last_name=draft.last_name if last_name is None else last_name,
        alias=draft.alias if alias is None else alias,
    )


def set_email(draft: EnrollmentDraft, email: str) -> EnrollmentDraft:
    return replace(draft, email=email)


def set_date_of_birth(
    draft: EnrollmentDraft,
    month: str | None = None,
    day: str | None = None,
    year: str | None = None,
) -> EnrollmentDraft:
    """Update date components, keeping digits only and capping at MM, DD, YYYY."""
    return replace(
        draft,
        dob_month=draft.dob_month if month is None else only_digits(month)[:2],
        dob_day=draft.dob_day if day is None else only_digits(day)[:2],
        dob_year=draft.dob_year if year is None else only_digits(year)[:4],
    )


def press_passcode_digit(draft: EnrollmentDraft, digit: str, policy: EnrollmentPolicy) -> EnrollmentDraft:
    """Append one keypad digit; ignored once the buffer is full."""
    if len(digit) != 1 or not only_digits(digit):
        raise ValueError(f"Passcode key must be a single digit, got {digit!r}")
    if len(draft.passcode_digits) >= policy.passcode_max_length:
        return draft
    return replace(draft, passcode_digits=draft.passcode_digits + digit)


def delete_passcode_digit(draft: EnrollmentDraft) -> EnrollmentDraft:
    if not draft.passcode_digits:
        return draft
    return replace(draft, passcode_digits=draft.passcode_digits[:-1])


def signup_email(draft: EnrollmentDraft, policy: EnrollmentPolicy) -> str:
    """Email used for the account: the entered one, or a phone-keyed placeholder."""
    entered = draft.email.strip().lower()
    if entered:
        return entered
    return f"{only_digits(draft.phone_number)}@{policy.placeholder_email_domain}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def only_digits(text: str) -> str:
    return "".join(ch for ch in text if "0" <= ch <= "9")


def _is_number_in_range(value: str, width: int, low: int, high: int) -> bool:
    if len(value) != width or only_digits(value) != value:
        return False
    return low <= int(value) <= high


def _space_digits(digits: str, every: int) -> str:
    return " ".join(digits[i : i + every] for i in range(0, len(digits), every))


def _format_north_american(digits: str) -> str:
    result = "("
    for i, ch in enumerate(digits[:10]):
        if i == 3:
            result += ") "
        if i == 6:
            result += "-"
        result += ch
    return result
