"""
API v1 enrollment routes.

Defines REST endpoints that drive the phone sign-up wizard. Every endpoint
returns the enrollment snapshot so the host can render the current step,
the continue affordance (can_advance) and the resend countdown.
"""

from collections.abc import Callable

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.dependencies import (
    get_code_dispatcher,
    get_credential_store,
    get_enrollment,
    get_enrollment_policy,
    get_enrollment_registry,
)
from src.api.enrollments import EnrollmentRegistry
from src.api.models import (
    AccountResponse,
    AdvanceRequest,
    CountryModel,
    EnrollmentResponse,
    EnrollmentUpdateRequest,
    ErrorResponse,
    OtpInputRequest,
    PasscodeDigitRequest,
)
from src.domain.countries import COUNTRIES, find_country
from src.domain.credentials import CredentialStore
from src.domain.enrollment import EnrollmentPolicy
from src.domain.enrollment_machine import EnrollmentStateMachine
from src.domain.exceptions import DuplicateEmailError, UnknownCountryError
from src.domain.ports import CodeDispatcher, EnrollmentStep

router = APIRouter(tags=["v1"])

_Completer = Callable[[EnrollmentStateMachine, AdvanceRequest], bool]

_COMPLETERS: dict[EnrollmentStep, _Completer] = {
    EnrollmentStep.PHONE_ENTRY: lambda m, r: m.complete_phone_entry(),
    EnrollmentStep.OTP_VERIFICATION: lambda m, r: m.complete_otp(),
    EnrollmentStep.NOTIFICATIONS: lambda m, r: m.complete_notifications(r.notifications_enabled),
    EnrollmentStep.COUNTRY_OF_RESIDENCE: lambda m, r: m.complete_country_selection(),
    EnrollmentStep.NAME_ENTRY: lambda m, r: m.complete_name(),
    EnrollmentStep.EMAIL_ENTRY: lambda m, r: m.complete_email(),
    EnrollmentStep.DATE_OF_BIRTH: lambda m, r: m.complete_date_of_birth(),
}


@router.get(
    "/countries",
    response_model=list[CountryModel],
    summary="List selectable countries",
)
async def list_countries() -> list[CountryModel]:
    return [CountryModel.from_country(country) for country in COUNTRIES]


@router.post(
    "/enrollments",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a phone sign-up",
)
async def start_enrollment(
    registry: EnrollmentRegistry = Depends(get_enrollment_registry),
    store: CredentialStore = Depends(get_credential_store),
    dispatcher: CodeDispatcher = Depends(get_code_dispatcher),
    policy: EnrollmentPolicy = Depends(get_enrollment_policy),
) -> EnrollmentResponse:
    machine = EnrollmentStateMachine(store, code_dispatcher=dispatcher, policy=policy)
    enrollment_id = registry.open(machine)
    return EnrollmentResponse.from_machine(enrollment_id, machine)


@router.get(
    "/enrollments/{enrollment_id}",
    response_model=EnrollmentResponse,
    responses={404: {"model": ErrorResponse, "description": "Enrollment not found"}},
    summary="Get enrollment state",
)
async def get_enrollment_state(
    enrollment_id: str,
    machine: EnrollmentStateMachine = Depends(get_enrollment),
) -> EnrollmentResponse:
    return EnrollmentResponse.from_machine(enrollment_id, machine)


@router.delete(
    "/enrollments/{enrollment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Abandon a phone sign-up",
)
async def abandon_enrollment(
    enrollment_id: str,
    registry: EnrollmentRegistry = Depends(get_enrollment_registry),
) -> Response:
    """Close the enrollment, stopping its countdown. Unknown ids are ignored."""
    registry.discard(enrollment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/enrollments/{enrollment_id}",
    response_model=EnrollmentResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Enrollment not found"},
        422: {"description": "Validation error or unknown country"},
    },
    summary="Edit enrollment fields",
)
async def update_enrollment(
    enrollment_id: str,
    request_data: EnrollmentUpdateRequest,
    machine: EnrollmentStateMachine = Depends(get_enrollment),
) -> EnrollmentResponse:
    """
    Apply field edits. Phone and date inputs keep digits only; dates are
    capped at MM, DD and YYYY. An unknown country code rejects the whole
    request before any field changes.
    """
    codes = [code for code in (request_data.country, request_data.residence_country) if code is not None]
    try:
        for code in codes:
            find_country(code)
    except UnknownCountryError:
        raise HTTPException(
            status_code=422,
            detail="Unknown country",
        ) from None

    if request_data.country is not None:
        machine.select_country(request_data.country)
    if request_data.residence_country is not None:
        machine.select_residence_country(request_data.residence_country)

    if request_data.phone_number is not None:
        machine.set_phone_number(request_data.phone_number)
    machine.set_names(request_data.first_name, request_data.last_name, request_data.alias)
    if request_data.email is not None:
        machine.set_email(request_data.email)
    machine.set_date_of_birth(request_data.dob_month, request_data.dob_day, request_data.dob_year)

    return EnrollmentResponse.from_machine(enrollment_id, machine)


@router.post(
    "/enrollments/{enrollment_id}/otp",
    response_model=EnrollmentResponse,
    responses={404: {"model": ErrorResponse, "description": "Enrollment not found"}},
    summary="Type or paste into an OTP slot",
)
async def enter_otp(
    enrollment_id: str,
    request_data: OtpInputRequest,
    machine: EnrollmentStateMachine = Depends(get_enrollment),
) -> EnrollmentResponse:
    """
    Apply OTP input. When the input completes all six slots, the response is
    returned after the automatic move to the notifications step.
    """
    machine.enter_otp(request_data.index, request_data.value)
    await machine.wait_for_pending_completion()
    return EnrollmentResponse.from_machine(enrollment_id, machine)


@router.post(
    "/enrollments/{enrollment_id}/resend",
    response_model=EnrollmentResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Enrollment not found"},
        409: {"model": ErrorResponse, "description": "Resend not available yet"},
    },
    summary="Resend the OTP",
)
async def resend_code(
    enrollment_id: str,
    machine: EnrollmentStateMachine = Depends(get_enrollment),
) -> EnrollmentResponse:
    if not machine.resend_code():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Resend not available yet",
        )
    return EnrollmentResponse.from_machine(enrollment_id, machine)


@router.post(
    "/enrollments/{enrollment_id}/passcode/digits",
    response_model=EnrollmentResponse,
    responses={404: {"model": ErrorResponse, "description": "Enrollment not found"}},
    summary="Press a passcode key",
)
async def press_passcode_digit(
    enrollment_id: str,
    request_data: PasscodeDigitRequest,
    machine: EnrollmentStateMachine = Depends(get_enrollment),
) -> EnrollmentResponse:
    machine.press_passcode_digit(request_data.digit)
    return EnrollmentResponse.from_machine(enrollment_id, machine)


@router.delete(
    "/enrollments/{enrollment_id}/passcode/digits/last",
    response_model=EnrollmentResponse,
    responses={404: {"model": ErrorResponse, "description": "Enrollment not found"}},
    summary="Delete the last passcode digit",
)
async def delete_passcode_digit(
    enrollment_id: str,
    machine: EnrollmentStateMachine = Depends(get_enrollment),
) -> EnrollmentResponse:
    machine.delete_passcode_digit()
    return EnrollmentResponse.from_machine(enrollment_id, machine)


@router.post(
    "/enrollments/{enrollment_id}/advance",
    response_model=EnrollmentResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Enrollment not found"},
        409: {"model": ErrorResponse, "description": "Current step is not complete"},
    },
    summary="Continue to the next step",
)
async def advance_enrollment(
    enrollment_id: str,
    request_data: AdvanceRequest | None = None,
    machine: EnrollmentStateMachine = Depends(get_enrollment),
) -> EnrollmentResponse:
    """
    Complete the current step. The final step is finished through
    the /complete endpoint instead.
    """
    completer = _COMPLETERS.get(machine.step)
    if completer is None or not completer(machine, request_data or AdvanceRequest()):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Current step is not complete",
        )
    return EnrollmentResponse.from_machine(enrollment_id, machine)


@router.post(
    "/enrollments/{enrollment_id}/back",
    response_model=EnrollmentResponse,
    responses={404: {"model": ErrorResponse, "description": "Enrollment not found"}},
    summary="Go back one step",
)
async def go_back(
    enrollment_id: str,
    machine: EnrollmentStateMachine = Depends(get_enrollment),
) -> EnrollmentResponse:
    machine.go_back_from_current_step()
    return EnrollmentResponse.from_machine(enrollment_id, machine)


@router.post(
    "/enrollments/{enrollment_id}/complete",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Enrollment not found"},
        409: {"model": ErrorResponse, "description": "Passcode incomplete or email taken"},
    },
    summary="Create the account from the finished enrollment",
)
async def complete_enrollment(
    enrollment_id: str,
    machine: EnrollmentStateMachine = Depends(get_enrollment),
    registry: EnrollmentRegistry = Depends(get_enrollment_registry),
) -> AccountResponse:
    """
    Hand the enrollment to the credential store and sign the new account in.

    A taken email keeps the enrollment open at the passcode step so the user
    can go back and change it.
    """
    try:
        account = machine.complete_passcode()
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None

    if account is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Passcode is not complete",
        )

    registry.discard(enrollment_id)
    return AccountResponse.from_record(account)
