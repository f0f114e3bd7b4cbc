# This project was developed with assistance from AI tools.
"""Identity service: OTP registration, password reset, login and logout.

Customers exist first in the CRM. Registration proves ownership of the CRM
email with an OTP stored on the customer row, then creates a portal User.
Password resets keep their OTPs in ``password_resets``; only the newest
row per user counts.
"""

import asyncio
import logging
from datetime import UTC, datetime
from functools import partial

from db import Customer, LeadFile, PasswordReset, User
from db.enums import UserType
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import generate_otp, hash_password, issue_access_token, otp_matches, verify_password
from ..core.errors import Conflict, InvalidArgument, NotFound, Unauthenticated
from ..schemas.auth import LoginResponse, LoginUser
from .email import get_email_service

logger = logging.getLogger(__name__)

_BAD_CREDENTIALS = "Invalid email or password."
_BAD_OTP = "The OTP is invalid or has expired. Please request a new OTP."


def _clean_password(password: str) -> str:
    # Surrounding whitespace is dropped on every path that sets or checks a password
    cleaned = password.strip()
    if not cleaned:
        raise InvalidArgument("Password cannot be empty.")
    return cleaned


async def _run_blocking(func, *args):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args))


async def _find_customer(crm_session: AsyncSession, customer_number: str, email: str) -> Customer | None:
    stmt = select(Customer).where(
        Customer.customer_no == customer_number.strip(),
        Customer.primary_email == email.strip(),
    )
    result = await crm_session.execute(stmt)
    return result.scalar_one_or_none()


async def _find_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.strip()))
    return result.scalar_one_or_none()


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def verify_user(crm_session: AsyncSession, customer_number: str, email: str) -> None:
    """Issue a registration OTP to a CRM customer's primary email.

    The OTP is committed before the email is sent, so an SMTP failure
    leaves a valid OTP in place and surfaces as UpstreamUnavailable.
    """
    customer = await _find_customer(crm_session, customer_number, email)
    if customer is None:
        raise NotFound("No matching customer found. Please verify your details or contact support.")

    otp = generate_otp()
    customer.otp = otp
    customer.otp_generated_at = datetime.now(UTC)
    await crm_session.commit()

    await get_email_service().send_otp(customer.primary_email, otp)
    logger.info("Registration OTP issued for customer %s", customer.customer_no)


async def _customer_with_valid_otp(
    crm_session: AsyncSession, customer_number: str, email: str, otp: str
) -> Customer:
    customer = await _find_customer(crm_session, customer_number, email)
    if customer is None:
        raise Unauthenticated("Customer not found. Please verify your customer number and email.")
    if not otp_matches(otp, customer.otp, customer.otp_generated_at):
        raise Unauthenticated(_BAD_OTP)
    return customer


async def verify_registration_otp(
    crm_session: AsyncSession, customer_number: str, email: str, otp: str
) -> None:
    await _customer_with_valid_otp(crm_session, customer_number, email, otp)


async def complete_registration(
    session: AsyncSession,
    crm_session: AsyncSession,
    customer_number: str,
    email: str,
    otp: str,
    new_password: str,
) -> User:
    """Create the portal user and clear the CRM OTP."""
    customer = await _customer_with_valid_otp(crm_session, customer_number, email, otp)

    if await _find_user_by_email(session, email) is not None:
        raise Conflict("User already exists. Please log in or use the forgot password option.")
    existing = await session.execute(
        select(User).where(User.customer_number == customer.customer_no)
    )
    if existing.scalar_one_or_none() is not None:
        raise Conflict("An account already exists for this customer number.")

    user = User(
        customer_number=customer.customer_no,
        email=email.strip(),
        password_hash=await _run_blocking(hash_password, _clean_password(new_password)),
        phone_number=customer.phone,
        verified=True,
        user_type=UserType.INDIVIDUAL,
    )
    session.add(user)
    await session.commit()

    customer.otp = None
    customer.otp_generated_at = None
    await crm_session.commit()

    logger.info("Registered user %s for customer %s", user.id, customer.customer_no)
    return user


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


async def request_password_reset(session: AsyncSession, email: str) -> None:
    user = await _find_user_by_email(session, email)
    if user is None:
        raise NotFound("No account is registered with this email.")

    otp = generate_otp()
    session.add(PasswordReset(user_id=user.id, otp=otp, otp_generated_at=datetime.now(UTC)))
    await session.commit()

    await get_email_service().send_otp(user.email, otp)
    logger.info("Password reset OTP issued for user %s", user.id)


async def _latest_reset(session: AsyncSession, user_id: int) -> PasswordReset | None:
    stmt = (
        select(PasswordReset)
        .where(PasswordReset.user_id == user_id)
        .order_by(PasswordReset.created_at.desc(), PasswordReset.id.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _user_with_valid_reset(
    session: AsyncSession, email: str, otp: str
) -> tuple[User, PasswordReset]:
    user = await _find_user_by_email(session, email)
    if user is None:
        raise Unauthenticated(_BAD_OTP)
    reset = await _latest_reset(session, user.id)
    if reset is None or not otp_matches(otp, reset.otp, reset.otp_generated_at):
        raise Unauthenticated(_BAD_OTP)
    return user, reset


async def verify_reset_otp(session: AsyncSession, email: str, otp: str) -> None:
    await _user_with_valid_reset(session, email, otp)


async def reset_password(session: AsyncSession, email: str, otp: str, new_password: str) -> None:
    user, reset = await _user_with_valid_reset(session, email, otp)
    user.password_hash = await _run_blocking(hash_password, _clean_password(new_password))
    await session.delete(reset)
    await session.commit()
    logger.info("Password reset completed for user %s", user.id)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


async def login(
    session: AsyncSession,
    crm_session: AsyncSession,
    email: str,
    password: str,
) -> LoginResponse:
    """Check credentials and return a bearer token with the user summary."""
    user = await _find_user_by_email(session, email)
    if user is None:
        raise Unauthenticated(_BAD_CREDENTIALS)
    if not await _run_blocking(verify_password, password.strip(), user.password_hash):
        raise Unauthenticated(_BAD_CREDENTIALS)

    customer_result = await crm_session.execute(
        select(Customer).where(Customer.customer_no == user.customer_number)
    )
    customer = customer_result.scalar_one_or_none()

    lead_result = await crm_session.execute(
        select(LeadFile.lead_file_no).where(
            LeadFile.customer_id == user.customer_number,
            LeadFile.lead_file_status_dropped == "No",
        )
    )
    lead_files = list(lead_result.scalars().all())

    token = issue_access_token(user.id)
    return LoginResponse(
        access_token=token,
        token=token,
        user=LoginUser(
            id=user.id,
            email=user.email,
            name=customer.customer_name if customer is not None else "",
            customer_number=user.customer_number,
            user_type=user.user_type,
            lead_files=lead_files,
        ),
    )


async def logout(session: AsyncSession, user_id: int) -> None:
    """Revoke every token issued before now."""
    await session.execute(
        update(User).where(User.id == user_id).values(last_logout_at=datetime.now(UTC))
    )
    await session.commit()


async def save_push_token(session: AsyncSession, user_id: int, push_token: str) -> None:
    await session.execute(update(User).where(User.id == user_id).values(push_token=push_token))
    await session.commit()
