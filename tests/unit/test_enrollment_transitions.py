"""
Unit tests for the pure enrollment transitions.

Tests verify:
- Per-step forward gates
- Forward order, backward order and the OTP back exception
- OTP digit entry (single, paste, delete)
- Field filtering and the passcode keypad
"""

from dataclasses import replace

import pytest

from src.domain import enrollment
from src.domain.countries import SINGAPORE, UNITED_STATES
from src.domain.enrollment import (
    EMPTY_OTP,
    STEP_ORDER,
    EnrollmentDraft,
    EnrollmentPolicy,
)
from src.domain.ports import EnrollmentStep
from tests.conftest import TODAY

POLICY = EnrollmentPolicy()


def at(step: EnrollmentStep, **fields: object) -> EnrollmentDraft:
    return replace(EnrollmentDraft(), step=step, **fields)


def valid_draft_for(step: EnrollmentStep) -> EnrollmentDraft:
    """A draft at `step` whose gate holds."""
    return at(
        step,
        phone_number="90366027",
        otp_digits=("1", "2", "3", "4", "5", "6"),
        first_name="Jane",
        last_name="Doe",
        email="jane@example.com",
        dob_month="03",
        dob_day="15",
        dob_year="1990",
        passcode_digits="123456",
    )


class TestStepOrder:
    """Tests for the fixed step sequence."""

    def test_step_order(self) -> None:
        assert [step.value for step in STEP_ORDER] == [
            "phoneEntry",
            "otpVerification",
            "notifications",
            "countryOfResidence",
            "nameEntry",
            "emailEntry",
            "dateOfBirth",
            "createPasscode",
        ]

    def test_new_draft_defaults(self) -> None:
        draft = enrollment.new_draft(POLICY)
        assert draft.step is EnrollmentStep.PHONE_ENTRY
        assert draft.country == SINGAPORE
        assert draft.residence_country == SINGAPORE
        assert draft.otp_digits == EMPTY_OTP

    def test_new_draft_uses_policy_country(self) -> None:
        draft = enrollment.new_draft(EnrollmentPolicy(default_country_code="US"))
        assert draft.country == UNITED_STATES
        assert draft.residence_country == UNITED_STATES


class TestForwardTransitions:
    """Tests for advance()."""

    def test_forward_walk_is_monotonic(self) -> None:
        """Repeated advance() visits every step in order."""
        draft = valid_draft_for(EnrollmentStep.PHONE_ENTRY)
        visited = [draft.step]
        for _ in range(len(STEP_ORDER) + 2):
            # Entering OTP clears the slots; refill so the gate holds again.
            if draft.step is EnrollmentStep.OTP_VERIFICATION:
                draft = replace(draft, otp_digits=("1",) * 6)
            if draft.step is EnrollmentStep.CREATE_PASSCODE:
                draft = replace(draft, passcode_digits="123456")
            draft = enrollment.advance(draft, TODAY, POLICY)
            if draft.step is not visited[-1]:
                visited.append(draft.step)

        assert visited == list(STEP_ORDER)

    def test_advance_past_create_passcode_is_noop(self) -> None:
        draft = valid_draft_for(EnrollmentStep.CREATE_PASSCODE)
        assert enrollment.advance(draft, TODAY, POLICY) == draft

    def test_closed_gate_blocks_advance(self) -> None:
        draft = at(EnrollmentStep.NAME_ENTRY, first_name="Jane")
        assert enrollment.advance(draft, TODAY, POLICY) == draft

    def test_entering_otp_resets_slots(self) -> None:
        draft = valid_draft_for(EnrollmentStep.PHONE_ENTRY)
        draft = replace(draft, focused_otp_index=None)

        advanced = enrollment.advance(draft, TODAY, POLICY)

        assert advanced.step is EnrollmentStep.OTP_VERIFICATION
        assert advanced.otp_digits == EMPTY_OTP
        assert advanced.focused_otp_index == 0

    def test_entering_create_passcode_clears_buffer(self) -> None:
        draft = replace(valid_draft_for(EnrollmentStep.DATE_OF_BIRTH), passcode_digits="999")
        advanced = enrollment.advance(draft, TODAY, POLICY)

        assert advanced.step is EnrollmentStep.CREATE_PASSCODE
        assert advanced.passcode_digits == ""


class TestBackwardTransitions:
    """Tests for go_back()."""

    @pytest.mark.parametrize("index", range(2, len(STEP_ORDER)))
    def test_back_goes_to_preceding_step(self, index: int) -> None:
        draft = at(STEP_ORDER[index])
        assert enrollment.go_back(draft).step is STEP_ORDER[index - 1]

    def test_back_from_otp_lands_on_phone_entry(self) -> None:
        draft = at(EnrollmentStep.OTP_VERIFICATION)
        assert enrollment.go_back(draft).step is EnrollmentStep.PHONE_ENTRY

    def test_back_to_phone_entry_only_from_otp(self) -> None:
        draft = at(EnrollmentStep.NAME_ENTRY)
        assert enrollment.go_back_to_phone_entry(draft) == draft

    def test_back_from_phone_entry_is_noop(self) -> None:
        draft = at(EnrollmentStep.PHONE_ENTRY)
        assert enrollment.go_back(draft) == draft

    def test_back_into_otp_starts_fresh(self) -> None:
        draft = at(EnrollmentStep.NOTIFICATIONS, otp_digits=("1",) * 6, focused_otp_index=None)
        back = enrollment.go_back(draft)

        assert back.step is EnrollmentStep.OTP_VERIFICATION
        assert back.otp_digits == EMPTY_OTP

    def test_back_keeps_entered_fields(self) -> None:
        draft = at(EnrollmentStep.EMAIL_ENTRY, first_name="Jane", last_name="Doe")
        back = enrollment.go_back(draft)
        assert (back.first_name, back.last_name) == ("Jane", "Doe")

    def test_forward_then_back_is_reversible(self) -> None:
        draft = valid_draft_for(EnrollmentStep.NAME_ENTRY)
        assert enrollment.go_back(enrollment.advance(draft, TODAY, POLICY)) == draft


class TestPhoneGate:
    """Tests for the phone entry gate."""

    def test_empty_phone_closed(self) -> None:
        assert not enrollment.can_advance(at(EnrollmentStep.PHONE_ENTRY), TODAY, POLICY)

    def test_minimum_length_per_country(self) -> None:
        sg = at(EnrollmentStep.PHONE_ENTRY, country=SINGAPORE, phone_number="9036602")
        assert not enrollment.is_phone_valid(sg)
        assert enrollment.is_phone_valid(replace(sg, phone_number="90366027"))

        us = at(EnrollmentStep.PHONE_ENTRY, country=UNITED_STATES, phone_number="650213739")
        assert not enrollment.is_phone_valid(us)
        assert enrollment.is_phone_valid(replace(us, phone_number="6502137390"))

    def test_phone_input_keeps_digits_only(self) -> None:
        draft = enrollment.set_phone_number(EnrollmentDraft(), "+65 (9036) 6027")
        assert draft.phone_number == "6590366027"

    def test_clear_phone(self) -> None:
        draft = enrollment.clear_phone(at(EnrollmentStep.PHONE_ENTRY, phone_number="123"))
        assert draft.phone_number == ""

    def test_select_country(self) -> None:
        draft = enrollment.select_country(EnrollmentDraft(), "us")
        assert draft.country == UNITED_STATES
        assert draft.residence_country == SINGAPORE


class TestSimpleGates:
    """Tests for the notifications, residence, name and email gates."""

    def test_notifications_always_open(self) -> None:
        assert enrollment.can_advance(at(EnrollmentStep.NOTIFICATIONS), TODAY, POLICY)

    def test_residence_preselected(self) -> None:
        assert enrollment.can_advance(at(EnrollmentStep.COUNTRY_OF_RESIDENCE), TODAY, POLICY)

    @pytest.mark.parametrize(
        ("first", "last", "expected"),
        [("Jane", "Doe", True), ("Jane", "", False), ("", "Doe", False), ("  ", "Doe", False)],
    )
    def test_name_gate(self, first: str, last: str, expected: bool) -> None:
        draft = enrollment.set_names(at(EnrollmentStep.NAME_ENTRY), first_name=first, last_name=last)
        assert enrollment.can_advance(draft, TODAY, POLICY) is expected

    def test_alias_optional(self) -> None:
        draft = at(EnrollmentStep.NAME_ENTRY, first_name="Jane", last_name="Doe", alias="")
        assert enrollment.is_name_valid(draft)

    def test_full_name_trimmed(self) -> None:
        draft = at(EnrollmentStep.NAME_ENTRY, first_name=" Jane ", last_name=" Doe ")
        assert draft.full_name == "Jane Doe"

    @pytest.mark.parametrize(
        ("email", "expected"),
        [
            ("jane@example.com", True),
            ("  jane.doe+tag@mail.example.org ", True),
            ("jane@example", False),
            ("jane.example.com", False),
            ("jane doe@example.com", False),
            ("", False),
        ],
    )
    def test_email_gate(self, email: str, expected: bool) -> None:
        draft = enrollment.set_email(at(EnrollmentStep.EMAIL_ENTRY), email)
        assert enrollment.is_email_valid(draft) is expected


class TestDateOfBirthGate:
    """Tests for the date of birth gate."""

    def dob(self, month: str, day: str, year: str) -> EnrollmentDraft:
        return at(EnrollmentStep.DATE_OF_BIRTH, dob_month=month, dob_day=day, dob_year=year)

    def test_valid_date(self) -> None:
        assert enrollment.is_date_of_birth_valid(self.dob("03", "15", "1990"), TODAY, POLICY)

    def test_month_13_rejected(self) -> None:
        assert not enrollment.is_date_of_birth_valid(self.dob("13", "15", "1990"), TODAY, POLICY)

    def test_month_00_rejected(self) -> None:
        assert not enrollment.is_date_of_birth_valid(self.dob("00", "15", "1990"), TODAY, POLICY)

    def test_day_40_rejected(self) -> None:
        assert not enrollment.is_date_of_birth_valid(self.dob("03", "40", "1990"), TODAY, POLICY)

    def test_day_99_rejected(self) -> None:
        assert not enrollment.is_date_of_birth_valid(self.dob("03", "99", "1990"), TODAY, POLICY)

    def test_february_30_accepted_structurally(self) -> None:
        """Day is not checked against the month."""
        assert enrollment.is_date_of_birth_valid(self.dob("02", "30", "1990"), TODAY, POLICY)

    def test_single_digit_fields_rejected(self) -> None:
        assert not enrollment.is_date_of_birth_valid(self.dob("3", "15", "1990"), TODAY, POLICY)
        assert not enrollment.is_date_of_birth_valid(self.dob("03", "5", "1990"), TODAY, POLICY)
        assert not enrollment.is_date_of_birth_valid(self.dob("03", "15", "90"), TODAY, POLICY)

    def test_minor_rejected(self) -> None:
        """Born 2008-10-19 is one day short of 18 on 2026-10-18."""
        assert not enrollment.is_date_of_birth_valid(self.dob("10", "19", "2008"), TODAY, POLICY)

    def test_eighteenth_birthday_accepted(self) -> None:
        assert enrollment.is_date_of_birth_valid(self.dob("10", "18", "2008"), TODAY, POLICY)

    def test_implausible_age_rejected(self) -> None:
        assert not enrollment.is_date_of_birth_valid(self.dob("01", "01", "1890"), TODAY, POLICY)

    def test_fields_keep_digits_and_are_capped(self) -> None:
        draft = enrollment.set_date_of_birth(EnrollmentDraft(), month="1a23", day="4/5/6", year="19905")
        assert (draft.dob_month, draft.dob_day, draft.dob_year) == ("12", "45", "1990")

    def test_partial_update_keeps_other_fields(self) -> None:
        draft = self.dob("03", "15", "1990")
        assert enrollment.set_date_of_birth(draft, day="20").dob_month == "03"


class TestOtpEntry:
    """Tests for OTP digit entry."""

    def otp(self, digits: tuple[str, ...] = EMPTY_OTP) -> EnrollmentDraft:
        return at(EnrollmentStep.OTP_VERIFICATION, otp_digits=digits)

    def test_single_digit_moves_focus_forward(self) -> None:
        draft = enrollment.enter_otp(self.otp(), 0, "7")
        assert draft.otp_digits[0] == "7"
        assert draft.focused_otp_index == 1

    def test_single_digit_in_last_slot_clears_focus(self) -> None:
        draft = enrollment.enter_otp(self.otp(), 5, "7")
        assert draft.otp_digits[5] == "7"
        assert draft.focused_otp_index is None

    def test_delete_moves_focus_back(self) -> None:
        draft = enrollment.enter_otp(self.otp(("1", "2", "3", "", "", "")), 2, "")
        assert draft.otp_digits == ("1", "2", "", "", "", "")
        assert draft.focused_otp_index == 1

    def test_delete_first_slot_keeps_focus(self) -> None:
        draft = enrollment.enter_otp(self.otp(("1", "", "", "", "", "")), 0, "")
        assert draft.otp_digits == EMPTY_OTP
        assert draft.focused_otp_index == 0

    def test_paste_fills_all_slots(self) -> None:
        draft = enrollment.enter_otp(self.otp(), 0, "123456")
        assert draft.otp_code == "123456"
        assert draft.is_otp_complete
        assert draft.focused_otp_index is None

    def test_paste_discards_overflow(self) -> None:
        draft = enrollment.enter_otp(self.otp(), 3, "98765")
        assert draft.otp_digits == ("", "", "", "9", "8", "7")
        assert draft.focused_otp_index == 0

    def test_partial_paste_focuses_next_empty(self) -> None:
        draft = enrollment.enter_otp(self.otp(), 0, "123")
        assert draft.otp_digits == ("1", "2", "3", "", "", "")
        assert draft.focused_otp_index == 3

    def test_non_digits_ignored(self) -> None:
        draft = enrollment.enter_otp(self.otp(), 0, "12-34 56")
        assert draft.otp_code == "123456"

    def test_letters_only_clear_slot(self) -> None:
        draft = enrollment.enter_otp(self.otp(("1", "", "", "", "", "")), 0, "a")
        assert draft.otp_digits[0] == ""

    def test_slots_always_six_single_digits(self) -> None:
        draft = self.otp()
        for index, text in [(0, "9"), (2, "1234567890"), (5, ""), (4, "3"), (1, "55")]:
            draft = enrollment.enter_otp(draft, index, text)
            assert len(draft.otp_digits) == 6
            assert all(len(slot) <= 1 for slot in draft.otp_digits)

    def test_index_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            enrollment.enter_otp(self.otp(), 6, "1")

    def test_input_outside_otp_step_ignored(self) -> None:
        draft = at(EnrollmentStep.NOTIFICATIONS)
        assert enrollment.enter_otp(draft, 0, "1") == draft


class TestPasscode:
    """Tests for the passcode keypad and gate."""

    def test_press_appends(self) -> None:
        draft = enrollment.press_passcode_digit(EnrollmentDraft(), "4", POLICY)
        assert draft.passcode_digits == "4"

    def test_press_capped_at_max(self) -> None:
        draft = at(EnrollmentStep.CREATE_PASSCODE, passcode_digits="1" * 12)
        assert enrollment.press_passcode_digit(draft, "2", POLICY) == draft

    def test_press_rejects_non_digit(self) -> None:
        with pytest.raises(ValueError):
            enrollment.press_passcode_digit(EnrollmentDraft(), "x", POLICY)

    def test_delete_removes_last(self) -> None:
        draft = at(EnrollmentStep.CREATE_PASSCODE, passcode_digits="123")
        assert enrollment.delete_passcode_digit(draft).passcode_digits == "12"

    def test_delete_on_empty_is_noop(self) -> None:
        draft = at(EnrollmentStep.CREATE_PASSCODE)
        assert enrollment.delete_passcode_digit(draft) == draft

    @pytest.mark.parametrize(("length", "expected"), [(5, False), (6, True), (12, True), (13, False)])
    def test_passcode_gate(self, length: int, expected: bool) -> None:
        draft = at(EnrollmentStep.CREATE_PASSCODE, passcode_digits="1" * length)
        assert enrollment.is_passcode_valid(draft, POLICY) is expected


class TestSignupEmailAndFormatting:
    """Tests for hand-off email and phone formatting."""

    def test_entered_email_normalized(self) -> None:
        draft = at(EnrollmentStep.CREATE_PASSCODE, email="  Jane@Example.COM ")
        assert enrollment.signup_email(draft, POLICY) == "jane@example.com"

    def test_placeholder_email_from_phone(self) -> None:
        draft = at(EnrollmentStep.CREATE_PASSCODE, phone_number="90366027")
        assert enrollment.signup_email(draft, POLICY) == "90366027@fondy.phone"

    def test_north_american_format(self) -> None:
        draft = at(EnrollmentStep.PHONE_ENTRY, country=UNITED_STATES, phone_number="6502137390")
        assert draft.formatted_phone == "(650) 213-7390"

    def test_other_countries_unformatted(self) -> None:
        draft = at(EnrollmentStep.PHONE_ENTRY, phone_number="90366027")
        assert draft.formatted_phone == "90366027"

    def test_masked_phone(self) -> None:
        draft = at(EnrollmentStep.PHONE_ENTRY, phone_number="90366027")
        assert draft.masked_phone == "+65 9036 6027"

    def test_full_international_number(self) -> None:
        draft = at(EnrollmentStep.PHONE_ENTRY, country=UNITED_STATES, phone_number="6502137390")
        assert draft.full_international_number == "+1 650 213 739 0"
