# This project was developed with assistance from AI tools.
"""M-PESA payment orchestration.

Initiation sends an STK Push and records a Pending MpesaPayment keyed by
the gateway's CheckoutRequestID. Results arrive later, either through the
gateway callback or the reconcile sweep, and both go through
``apply_payment_result``:

1. Claim the payment with ``UPDATE ... WHERE status = 'Pending'``. Only the
   caller that changes exactly one row continues; duplicates stop here.
2. On success, lock the installment row (``FOR UPDATE``) and add the
   amount to ``amount_paid`` keeping
   ``amount_paid + remaining_amount == installment_amount``.
3. If step 2 fails the payment is put back to Pending so a later sweep can
   retry it.
4. Record a Notification and push it when the user has a token.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal

from db import InstallmentSchedule, MpesaPayment, User
from db.database import SessionLocal
from db.enums import PaidFlag, PaymentStatus
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import Internal, InvalidArgument
from ..schemas.auth import UserContext
from ..schemas.payment import PaymentInitiateRequest, PaymentInitiateResponse
from .daraja import get_daraja_client
from .money import ZERO, format_amount, format_display, parse_amount
from .notification import notify_user

logger = logging.getLogger(__name__)

SUCCESS_TITLE = "Payment Update"
FAILURE_TITLE = "Payment Failed"


class InstallmentUpdateError(Exception):
    """The installment linked to a successful payment could not be updated."""


@dataclass(frozen=True)
class InstallmentUpdate:
    installment_no: int | None
    plot_name: str
    payment_amount: Decimal
    amount_paid: Decimal
    remaining_amount: Decimal
    paid: PaidFlag
    overpayment: Decimal


# ---------------------------------------------------------------------------
# Initiation
# ---------------------------------------------------------------------------


async def _load_installment(crm_session: AsyncSession, installment_id: int) -> InstallmentSchedule | None:
    result = await crm_session.execute(
        select(InstallmentSchedule).where(InstallmentSchedule.id == installment_id)
    )
    return result.scalar_one_or_none()


async def _persist_pending_payment(payment: MpesaPayment) -> None:
    async with SessionLocal() as session:
        session.add(payment)
        await session.commit()


async def initiate_payment(
    crm_session: AsyncSession,
    user: UserContext,
    request: PaymentInitiateRequest,
) -> PaymentInitiateResponse:
    """Validate ownership, send the STK Push and record the Pending payment.

    The row is only written once the gateway accepted the prompt. Persistence
    runs shielded in its own session: a client that disconnects mid-request
    must not lose the correlation row for a callback that will still arrive.
    """
    if request.customer_number.strip() != user.customer_number:
        raise InvalidArgument("Customer number does not match the signed-in account.")

    installment = await _load_installment(crm_session, request.installment_schedule_id)
    if installment is None:
        raise InvalidArgument("Installment schedule not found.")
    if installment.member_no != user.customer_number:
        logger.warning(
            "User %s attempted payment on installment %s owned by %s",
            user.user_id,
            installment.id,
            installment.member_no,
        )
        raise InvalidArgument("Installment schedule does not belong to this customer.")

    plot_number = request.plot_number or installment.plot_no or ""

    result = await get_daraja_client().stk_push(
        amount=request.amount,
        phone_number=request.phone_number,
        account_reference=plot_number,
        description=settings.DARAJA_TRANSACTION_DESC,
    )

    payment = MpesaPayment(
        checkout_request_id=result.checkout_request_id,
        merchant_request_id=result.merchant_request_id,
        installment_schedule_id=installment.id,
        customer_number=user.customer_number,
        lead_file_no=installment.leadfile_no,
        phone_number=request.phone_number,
        amount=str(request.amount),
        plot_number=plot_number,
        status=PaymentStatus.PENDING,
    )
    try:
        await asyncio.shield(_persist_pending_payment(payment))
    except SQLAlchemyError as exc:
        logger.exception(
            "Failed to save M-PESA payment %s after gateway accepted it",
            result.checkout_request_id,
        )
        raise Internal("Failed to save M-PESA payment.") from exc

    logger.info(
        "STK Push sent: checkout=%s installment=%s customer=%s amount=%s",
        result.checkout_request_id,
        installment.id,
        user.customer_number,
        request.amount,
    )
    return PaymentInitiateResponse(
        checkout_request_id=result.checkout_request_id,
        merchant_request_id=result.merchant_request_id,
        response_code=result.response_code,
        response_description=result.response_description,
        customer_message=result.customer_message,
    )


# ---------------------------------------------------------------------------
# Result application (callback + reconcile sweep)
# ---------------------------------------------------------------------------


async def _claim_payment(
    session: AsyncSession,
    checkout_request_id: str,
    new_status: PaymentStatus,
    result_code: int,
    result_description: str,
) -> bool:
    """Move a payment out of Pending. True only for the caller that did it."""
    stmt = (
        update(MpesaPayment)
        .where(
            MpesaPayment.checkout_request_id == checkout_request_id,
            MpesaPayment.status == PaymentStatus.PENDING,
        )
        .values(
            status=new_status,
            result_code=result_code,
            result_description=result_description,
        )
    )
    result = await session.execute(stmt)
    await session.commit()
    return result.rowcount == 1


async def _revert_to_pending(session: AsyncSession, checkout_request_id: str) -> None:
    stmt = (
        update(MpesaPayment)
        .where(
            MpesaPayment.checkout_request_id == checkout_request_id,
            MpesaPayment.status == PaymentStatus.SUCCESS,
        )
        .values(status=PaymentStatus.PENDING, result_code=None, result_description=None)
    )
    await session.execute(stmt)
    await session.commit()


def compute_installment_update(installment: InstallmentSchedule, payment_amount: Decimal) -> InstallmentUpdate:
    """Apply a payment to an installment's balances without touching the row.

    Raises ValueError when a stored amount is not a number.
    """
    installment_amount = parse_amount(installment.installment_amount)
    current_paid = parse_amount(installment.amount_paid)

    # amount_paid never goes down, even on rows the CRM already overpaid
    cap = max(installment_amount, current_paid)
    uncapped = current_paid + payment_amount
    overpayment = min(payment_amount, max(uncapped - installment_amount, ZERO))
    new_paid = min(uncapped, cap)
    remaining = max(installment_amount - new_paid, ZERO)

    return InstallmentUpdate(
        installment_no=installment.installment_no,
        plot_name=installment.plot_name or installment.plot_no or "",
        payment_amount=payment_amount,
        amount_paid=new_paid,
        remaining_amount=remaining,
        paid=PaidFlag.YES if remaining == ZERO else PaidFlag.NO,
        overpayment=overpayment,
    )


async def _apply_to_installment(crm_session: AsyncSession, payment: MpesaPayment) -> InstallmentUpdate:
    stmt = (
        select(InstallmentSchedule)
        .where(InstallmentSchedule.id == payment.installment_schedule_id)
        .with_for_update()
    )
    result = await crm_session.execute(stmt)
    installment = result.scalar_one_or_none()
    if installment is None:
        raise InstallmentUpdateError(f"installment {payment.installment_schedule_id} not found")

    try:
        change = compute_installment_update(installment, parse_amount(payment.amount))
    except ValueError as exc:
        raise InstallmentUpdateError(str(exc)) from exc

    installment.amount_paid = format_amount(change.amount_paid)
    installment.remaining_amount = format_amount(change.remaining_amount)
    installment.paid = change.paid.value
    await crm_session.commit()

    if change.overpayment > ZERO:
        logger.warning(
            "Payment %s overpaid installment %s by %s",
            payment.checkout_request_id,
            installment.id,
            format_amount(change.overpayment),
        )
    return change


def success_message(change: InstallmentUpdate) -> str:
    paid = format_display(change.payment_amount)
    target = f"installment {change.installment_no}" if change.installment_no is not None else "your installment"
    if change.paid == PaidFlag.YES:
        return (
            f"Your payment of KES {paid} for {change.plot_name} has been received. "
            f"{target.capitalize()} is now fully paid."
        )
    return (
        f"Your payment of KES {paid} for {change.plot_name} has been received. "
        f"Remaining balance on {target}: KES {format_display(change.remaining_amount)}."
    )


FAILURE_MESSAGE = "Your M-PESA payment failed or was cancelled."


async def _load_payment(session: AsyncSession, checkout_request_id: str) -> MpesaPayment | None:
    result = await session.execute(
        select(MpesaPayment).where(MpesaPayment.checkout_request_id == checkout_request_id)
    )
    return result.scalar_one_or_none()


async def _notify_payment_owner(
    session: AsyncSession,
    payment: MpesaPayment,
    title: str,
    body: str,
    data: dict,
) -> None:
    result = await session.execute(select(User).where(User.customer_number == payment.customer_number))
    user = result.scalar_one_or_none()
    if user is None:
        logger.warning(
            "No portal user for customer %s (checkout=%s); notification skipped",
            payment.customer_number,
            payment.checkout_request_id,
        )
        return
    await notify_user(session, user.id, user.push_token, title, body, data)


async def apply_payment_result(
    session: AsyncSession,
    crm_session: AsyncSession,
    checkout_request_id: str,
    result_code: int,
    result_description: str = "",
) -> str:
    """Apply a gateway result to a payment exactly once.

    Returns one of ``"success"``, ``"failed"``, ``"ignored"`` (unknown or
    already terminal) or ``"reverted"`` (installment update failed; the
    payment is Pending again).
    """
    new_status = PaymentStatus.SUCCESS if result_code == 0 else PaymentStatus.FAILED

    if not await _claim_payment(session, checkout_request_id, new_status, result_code, result_description):
        logger.info("Payment %s unknown or already settled; ignoring result %s", checkout_request_id, result_code)
        return "ignored"

    payment = await _load_payment(session, checkout_request_id)
    if payment is None:
        return "ignored"

    data = {
        "type": "payment",
        "checkout_request_id": checkout_request_id,
        "installment_schedule_id": payment.installment_schedule_id,
        "status": new_status.value,
    }

    if new_status == PaymentStatus.FAILED:
        logger.info("Payment %s failed (code=%s): %s", checkout_request_id, result_code, result_description)
        await _notify_payment_owner(session, payment, FAILURE_TITLE, FAILURE_MESSAGE, data)
        return "failed"

    try:
        change = await _apply_to_installment(crm_session, payment)
    except (InstallmentUpdateError, SQLAlchemyError):
        logger.exception(
            "Installment update failed for payment %s; returning it to Pending",
            checkout_request_id,
        )
        await crm_session.rollback()
        try:
            await _revert_to_pending(session, checkout_request_id)
        except SQLAlchemyError:
            logger.error(
                "Payment %s is marked Success but its installment was not updated and the revert "
                "to Pending failed; the reconcile sweep will not pick it up, fix it by hand",
                checkout_request_id,
                exc_info=True,
            )
            raise
        return "reverted"

    data.update(
        amount=format_amount(change.payment_amount),
        amount_paid=format_amount(change.amount_paid),
        remaining_amount=format_amount(change.remaining_amount),
        paid=change.paid.value,
    )
    if change.overpayment > ZERO:
        data["overpayment"] = format_amount(change.overpayment)

    logger.info(
        "Payment %s applied to installment %s: paid=%s remaining=%s",
        checkout_request_id,
        payment.installment_schedule_id,
        data["amount_paid"],
        data["remaining_amount"],
    )
    await _notify_payment_owner(session, payment, SUCCESS_TITLE, success_message(change), data)
    return "success"


async def handle_callback(
    session: AsyncSession,
    crm_session: AsyncSession,
    checkout_request_id: str,
    result_code: int,
    result_description: str = "",
) -> str | None:
    """Gateway callback entry point. Never raises; the gateway always gets 200."""
    try:
        return await apply_payment_result(
            session, crm_session, checkout_request_id, result_code, result_description
        )
    except SQLAlchemyError:
        logger.exception("Callback processing failed for payment %s", checkout_request_id)
        return None
    except Exception:
        logger.exception("Unexpected error handling callback for payment %s", checkout_request_id)
        return None
