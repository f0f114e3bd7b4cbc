# This project was developed with assistance from AI tools.
"""Property, installment and receipt queries.

Every per-property read first resolves the lead file through
``get_owned_lead_file`` so a foreign or dropped plot fails with
NotAuthorized before any child rows are touched.
"""

import logging
from datetime import UTC, datetime

from db import InstallmentSchedule, LeadFile, MpesaPayment, Receipt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotAuthorized
from ..schemas.auth import UserContext
from ..schemas.property import TransactionItem
from .money import parse_amount_lenient
from .scope import get_owned_lead_file, list_owned_lead_files

logger = logging.getLogger(__name__)

POSTED = "Posted"
INSTALLMENT = "Installment"


async def list_properties(crm_session: AsyncSession, user: UserContext) -> list[LeadFile]:
    return await list_owned_lead_files(crm_session, user)


async def get_installment_schedule(
    crm_session: AsyncSession,
    user: UserContext,
    lead_file_no: str,
) -> tuple[LeadFile, list[InstallmentSchedule]]:
    """Installment rows for one of the caller's plots, earliest due first."""
    lead_file = await get_owned_lead_file(crm_session, user, lead_file_no)
    stmt = (
        select(InstallmentSchedule)
        .where(
            InstallmentSchedule.member_no == user.customer_number,
            InstallmentSchedule.leadfile_no == lead_file_no,
        )
        .order_by(InstallmentSchedule.due_date.asc(), InstallmentSchedule.installment_no.asc())
    )
    result = await crm_session.execute(stmt)
    return lead_file, list(result.scalars().all())


async def get_title_status(crm_session: AsyncSession, user: UserContext, lead_file_no: str) -> str | None:
    lead_file = await get_owned_lead_file(crm_session, user, lead_file_no)
    return lead_file.title_status


# ---------------------------------------------------------------------------
# Receipts
# ---------------------------------------------------------------------------


def _posted_receipts_stmt(user: UserContext, lead_file_no: str):
    return select(Receipt).where(
        Receipt.lead_file_no == lead_file_no,
        Receipt.customer_id == user.customer_number,
        Receipt.type == POSTED,
    )


async def list_receipts(
    crm_session: AsyncSession,
    ledger_session: AsyncSession,
    user: UserContext,
    lead_file_no: str,
) -> list[Receipt]:
    await get_owned_lead_file(crm_session, user, lead_file_no)
    stmt = _posted_receipts_stmt(user, lead_file_no).order_by(Receipt.id.desc())
    result = await ledger_session.execute(stmt)
    return list(result.scalars().all())


async def get_receipt(
    crm_session: AsyncSession,
    ledger_session: AsyncSession,
    user: UserContext,
    lead_file_no: str,
    receipt_id: int,
) -> tuple[LeadFile, Receipt]:
    lead_file = await get_owned_lead_file(crm_session, user, lead_file_no)
    stmt = _posted_receipts_stmt(user, lead_file_no).where(Receipt.id == receipt_id)
    result = await ledger_session.execute(stmt)
    receipt = result.scalar_one_or_none()
    if receipt is None:
        raise NotAuthorized("Receipt not found, does not belong to the user or the property, or is not posted.")
    return lead_file, receipt


async def total_spent(
    crm_session: AsyncSession,
    ledger_session: AsyncSession,
    user: UserContext,
) -> float:
    """Sum of posted receipts across the caller's active plots."""
    lead_files = await list_owned_lead_files(crm_session, user)
    lead_file_nos = [lf.lead_file_no for lf in lead_files]
    if not lead_file_nos:
        return 0.0
    stmt = select(func.coalesce(func.sum(Receipt.amount_lcy), 0)).where(
        Receipt.customer_id == user.customer_number,
        Receipt.type == POSTED,
        Receipt.lead_file_no.in_(lead_file_nos),
    )
    result = await ledger_session.execute(stmt)
    return float(result.scalar() or 0)


# ---------------------------------------------------------------------------
# Transactions (ledger receipts + M-PESA payments)
# ---------------------------------------------------------------------------


def _parse_ledger_datetime(raw: str | None) -> datetime | None:
    if not raw:
        return None
    text = raw.strip()
    for candidate in (text, text.replace("Z", "+00:00")):
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            continue
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def _receipt_transaction(receipt: Receipt) -> tuple[datetime | None, TransactionItem]:
    when = _parse_ledger_datetime(receipt.payment_date1)
    if when is None and receipt.payment_date1:
        logger.debug("Unparseable PAYMENT_DATE1 %r on receipt %s", receipt.payment_date1, receipt.id)
    return when, TransactionItem(
        id=str(receipt.id),
        date=when.strftime("%Y-%m-%d") if when else (receipt.payment_date1 or ""),
        time=when.strftime("%H:%M") if when else "",
        type=receipt.transaction_type or INSTALLMENT,
        amount=float(receipt.amount_lcy or 0),
        source="receipt",
    )


def _mpesa_transaction(payment: MpesaPayment) -> tuple[datetime | None, TransactionItem]:
    when = payment.created_at
    if when is not None and when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return when, TransactionItem(
        id=payment.checkout_request_id,
        date=when.strftime("%Y-%m-%d") if when else "",
        time=when.strftime("%H:%M") if when else "",
        type="M-PESA",
        amount=float(parse_amount_lenient(payment.amount)),
        source="mpesa",
        status=payment.status.value if payment.status is not None else None,
    )


async def list_transactions(
    session: AsyncSession,
    crm_session: AsyncSession,
    ledger_session: AsyncSession,
    user: UserContext,
    lead_file_no: str,
) -> list[TransactionItem]:
    """Posted installment receipts merged with portal M-PESA payments, newest first."""
    await get_owned_lead_file(crm_session, user, lead_file_no)

    receipt_stmt = _posted_receipts_stmt(user, lead_file_no).where(Receipt.transaction_type == INSTALLMENT)
    receipts = (await ledger_session.execute(receipt_stmt)).scalars().all()

    payment_stmt = select(MpesaPayment).where(
        MpesaPayment.customer_number == user.customer_number,
        MpesaPayment.lead_file_no == lead_file_no,
    )
    payments = (await session.execute(payment_stmt)).scalars().all()

    entries = [_receipt_transaction(r) for r in receipts] + [_mpesa_transaction(p) for p in payments]
    epoch = datetime.min.replace(tzinfo=UTC)
    entries.sort(key=lambda entry: entry[0] or epoch, reverse=True)
    return [item for _, item in entries]
