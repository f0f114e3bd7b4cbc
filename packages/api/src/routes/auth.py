# This project was developed with assistance from AI tools.
"""Login, logout, OTP registration and password reset routes."""

from db import get_crm_db, get_db
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas.auth import (
    CompleteRegistrationRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PushTokenRequest,
    RequestOtpRequest,
    ResetPasswordRequest,
    VerifyOtpRequest,
    VerifyOtpResetRequest,
    VerifyUserRequest,
)
from ..services import identity

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_db),
    crm_session: AsyncSession = Depends(get_crm_db),
) -> LoginResponse:
    return await identity.login(session, crm_session, body.email, body.password)


@router.post("/logout", response_model=MessageResponse)
async def logout(user: CurrentUser, session: AsyncSession = Depends(get_db)) -> MessageResponse:
    """Invalidate every token issued to the caller up to now."""
    await identity.logout(session, user.user_id)
    return MessageResponse(message="Logout successful.")


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


@router.post("/verify-user", response_model=MessageResponse)
async def verify_user(
    body: VerifyUserRequest,
    crm_session: AsyncSession = Depends(get_crm_db),
) -> MessageResponse:
    await identity.verify_user(crm_session, body.customer_number, body.email)
    return MessageResponse(message="OTP sent successfully to your email.")


@router.post("/verify-otp", response_model=MessageResponse)
async def verify_otp(
    body: VerifyOtpRequest,
    crm_session: AsyncSession = Depends(get_crm_db),
) -> MessageResponse:
    await identity.verify_registration_otp(crm_session, body.customer_number, body.email, body.otp)
    return MessageResponse(message="OTP verified successfully.")


@router.post("/complete-registration", response_model=MessageResponse)
async def complete_registration(
    body: CompleteRegistrationRequest,
    session: AsyncSession = Depends(get_db),
    crm_session: AsyncSession = Depends(get_crm_db),
) -> MessageResponse:
    await identity.complete_registration(
        session,
        crm_session,
        body.customer_number,
        body.email,
        body.otp,
        body.new_password,
    )
    return MessageResponse(message="User registered successfully. You can now log in.")


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


@router.post("/request-otp", response_model=MessageResponse)
async def request_otp(body: RequestOtpRequest, session: AsyncSession = Depends(get_db)) -> MessageResponse:
    await identity.request_password_reset(session, body.email)
    return MessageResponse(message="OTP sent successfully to your email.")


@router.post("/verify-otp-reset", response_model=MessageResponse)
async def verify_otp_reset(
    body: VerifyOtpResetRequest,
    session: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await identity.verify_reset_otp(session, body.email, body.otp)
    return MessageResponse(message="OTP verified successfully.")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    session: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await identity.reset_password(session, body.email, body.otp, body.new_password)
    return MessageResponse(message="Password reset successfully. You can now log in.")


# ---------------------------------------------------------------------------
# Device
# ---------------------------------------------------------------------------


@router.post("/save-push-token", response_model=MessageResponse)
async def save_push_token(
    body: PushTokenRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await identity.save_push_token(session, user.user_id, body.push_token)
    return MessageResponse(message="Push token saved successfully.")
