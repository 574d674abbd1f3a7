"""
Enrollment state machine - Drives one phone sign-up from draft to account.

The machine holds the current EnrollmentDraft, applies the pure transitions
from enrollment.py, and owns the two asynchronous resources of the flow:

- the resend countdown, started on every entry into OTP_VERIFICATION and
  cancelled on every exit from it
- the OTP auto-completion, scheduled once when all six slots are filled and
  re-checked when it fires

Step Changes
============

    entering OTP_VERIFICATION  -> slots cleared, fresh countdown
    leaving OTP_VERIFICATION   -> countdown and pending completion cancelled
    completing CREATE_PASSCODE -> CredentialStore.create_account(), machine closed

Timers are asyncio tasks, so OTP entry and step changes into
OTP_VERIFICATION must happen on the host's running event loop.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import date

from . import enrollment
from .countdown import ResendCountdown
from .credentials import CredentialStore
from .enrollment import EnrollmentDraft, EnrollmentPolicy
from .exceptions import EnrollmentClosedError
from .models import AccountRecord
from .ports import CodeDispatcher, EnrollmentStep

logger = logging.getLogger(__name__)


class EnrollmentStateMachine:
    """Host-facing driver for one in-progress phone sign-up."""

    def __init__(
        self,
        credential_store: CredentialStore,
        code_dispatcher: CodeDispatcher | None = None,
        policy: EnrollmentPolicy | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._credential_store = credential_store
        self._code_dispatcher = code_dispatcher
        self._policy = policy or EnrollmentPolicy()
        self._today = today
        self._draft: EnrollmentDraft | None = enrollment.new_draft(self._policy)
        self._countdown = ResendCountdown(self._policy.resend_countdown_seconds)
        self._completion_task: asyncio.Task[None] | None = None
        self._account: AccountRecord | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def draft(self) -> EnrollmentDraft:
        if self._draft is None:
            raise EnrollmentClosedError("Enrollment is no longer active")
        return self._draft

    @property
    def step(self) -> EnrollmentStep:
        return self.draft.step

    @property
    def policy(self) -> EnrollmentPolicy:
        return self._policy

    @property
    def countdown(self) -> ResendCountdown:
        return self._countdown

    @property
    def is_closed(self) -> bool:
        return self._draft is None

    @property
    def account(self) -> AccountRecord | None:
        """Account created by the hand-off, once the flow has completed."""
        return self._account

    @property
    def can_advance(self) -> bool:
        return enrollment.can_advance(self.draft, self._today(), self._policy)

    # ------------------------------------------------------------------
    # Field edits
    # ------------------------------------------------------------------

    def select_country(self, code: str) -> None:
        self._apply(enrollment.select_country(self.draft, code))

    def set_phone_number(self, text: str) -> None:
        self._apply(enrollment.set_phone_number(self.draft, text))

    def clear_phone(self) -> None:
        self._apply(enrollment.clear_phone(self.draft))

    def select_residence_country(self, code: str) -> None:
        self._apply(enrollment.select_residence_country(self.draft, code))

    def set_names(
        self,
        first_name: str | None = None,
        last_name: str | None = None,
        alias: str | None = None,
    ) -> None:
        self._apply(enrollment.set_names(self.draft, first_name, last_name, alias))

    def set_email(self, email: str) -> None:
        self._apply(enrollment.set_email(self.draft, email))

    def set_date_of_birth(
        self,
        month: str | None = None,
        day: str | None = None,
        year: str | None = None,
    ) -> None:
        self._apply(enrollment.set_date_of_birth(self.draft, month, day, year))

    def press_passcode_digit(self, digit: str) -> None:
        self._apply(enrollment.press_passcode_digit(self.draft, digit, self._policy))

    def delete_passcode_digit(self) -> None:
        self._apply(enrollment.delete_passcode_digit(self.draft))

    # ------------------------------------------------------------------
    # OTP verification
    # ------------------------------------------------------------------

    def enter_otp(self, index: int, text: str) -> None:
        """
        Apply input to one OTP slot and schedule completion when all are filled.

        The completion is scheduled at most once per visit to the step; it
        fires after the policy's delay and advances only if the step is still
        OTP_VERIFICATION with all slots filled.
        """
        self._apply(enrollment.enter_otp(self.draft, index, text))

        draft = self.draft
        if draft.step is not EnrollmentStep.OTP_VERIFICATION or not draft.is_otp_complete:
            return
        if self._completion_task is not None:
            return

        delay = self._policy.otp_completion_delay_seconds
        if delay <= 0:
            self._advance_from_otp()
            return
        self._completion_task = asyncio.create_task(self._complete_otp_after(delay))

    async def wait_for_pending_completion(self) -> None:
        """Wait until a scheduled OTP auto-completion has fired or been cancelled."""
        task = self._completion_task
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def resend_code(self) -> bool:
        """
        Request a new code once the countdown has reached zero.

        Clears the slots and restarts the countdown from its initial value.

        Returns:
            True if a resend was issued, False if it is not yet allowed
        """
        draft = self.draft
        if draft.step is not EnrollmentStep.OTP_VERIFICATION or not self._countdown.can_resend:
            return False

        self._apply(enrollment.reset_otp(draft))
        self._countdown.start()
        self._dispatch_code()
        return True

    async def _complete_otp_after(self, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            return
        self._completion_task = None
        if self._draft is not None:
            self._advance_from_otp()

    def _advance_from_otp(self) -> bool:
        draft = self.draft
        if draft.step is not EnrollmentStep.OTP_VERIFICATION:
            return False
        return self._advance()

    # ------------------------------------------------------------------
    # Forward transitions
    # ------------------------------------------------------------------

    def complete_phone_entry(self) -> bool:
        """Confirm the phone number, send the code and move to OTP entry."""
        if not self._complete(EnrollmentStep.PHONE_ENTRY):
            return False
        self._dispatch_code()
        return True

    def complete_otp(self) -> bool:
        self._cancel_pending_completion()
        return self._complete(EnrollmentStep.OTP_VERIFICATION)

    def complete_notifications(self, enabled: bool = True) -> bool:
        if self.step is not EnrollmentStep.NOTIFICATIONS:
            return False
        self._apply(enrollment.set_notifications(self.draft, enabled))
        return self._complete(EnrollmentStep.NOTIFICATIONS)

    def complete_country_selection(self) -> bool:
        return self._complete(EnrollmentStep.COUNTRY_OF_RESIDENCE)

    def complete_name(self) -> bool:
        return self._complete(EnrollmentStep.NAME_ENTRY)

    def complete_email(self) -> bool:
        return self._complete(EnrollmentStep.EMAIL_ENTRY)

    def complete_date_of_birth(self) -> bool:
        return self._complete(EnrollmentStep.DATE_OF_BIRTH)

    def complete_passcode(self) -> AccountRecord | None:
        """
        Hand the finished draft to the credential store.

        Returns:
            The created account, or None if the passcode gate is closed

        Raises:
            DuplicateEmailError: If the email is taken; the draft is kept at
                CREATE_PASSCODE so the user can go back and change it
        """
        draft = self.draft
        if draft.step is not EnrollmentStep.CREATE_PASSCODE:
            return None
        if not enrollment.is_passcode_valid(draft, self._policy):
            return None

        account = self._credential_store.create_account(
            draft.full_name,
            enrollment.signup_email(draft, self._policy),
            draft.passcode_digits,
        )

        self._account = account
        self.close()
        logger.info("Enrollment completed for account %s", account.id)
        return account

    # ------------------------------------------------------------------
    # Backward transitions
    # ------------------------------------------------------------------

    def go_back_from_current_step(self) -> None:
        self._apply(enrollment.go_back(self.draft))

    def go_back_to_phone_entry(self) -> None:
        self._apply(enrollment.go_back_to_phone_entry(self.draft))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Tear down the flow: cancel timers and discard the draft. Idempotent."""
        self._countdown.cancel()
        self._cancel_pending_completion()
        self._draft = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _complete(self, step: EnrollmentStep) -> bool:
        if self.step is not step:
            return False
        return self._advance()

    def _advance(self) -> bool:
        before = self.draft
        self._apply(enrollment.advance(before, self._today(), self._policy))
        return self.draft.step is not before.step

    def _apply(self, new_draft: EnrollmentDraft) -> None:
        old_step = self.draft.step
        self._draft = new_draft
        if new_draft.step is not old_step:
            self._on_step_change(old_step, new_draft.step)

    def _on_step_change(self, old_step: EnrollmentStep, new_step: EnrollmentStep) -> None:
        if old_step is EnrollmentStep.OTP_VERIFICATION:
            self._countdown.cancel()
            self._cancel_pending_completion()
        if new_step is EnrollmentStep.OTP_VERIFICATION:
            self._countdown.start()
        logger.debug("Enrollment step %s -> %s", old_step.value, new_step.value)

    def _cancel_pending_completion(self) -> None:
        task = self._completion_task
        self._completion_task = None
        if task is not None and not task.done():
            task.cancel()

    def _dispatch_code(self) -> None:
        if self._code_dispatcher is not None:
            self._code_dispatcher.send_code(self.draft.full_international_number)
