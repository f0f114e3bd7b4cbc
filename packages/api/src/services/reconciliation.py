# This project was developed with assistance from AI tools.
"""Sweep for payments still Pending after the callback window.

Covers lost callbacks and payments put back to Pending after a failed
installment update. Each stale payment is queried with STK Push Query and
the answer goes through the same ``apply_payment_result`` as a callback.
"""

import logging
from datetime import UTC, datetime, timedelta

from db import MpesaPayment
from db.enums import PaymentStatus
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import UpstreamUnavailable
from .daraja import DarajaClient
from .payment import apply_payment_result

logger = logging.getLogger(__name__)


async def find_stale_payments(
    session: AsyncSession,
    older_than_minutes: int,
    limit: int = 100,
) -> list[MpesaPayment]:
    cutoff = datetime.now(UTC) - timedelta(minutes=older_than_minutes)
    stmt = (
        select(MpesaPayment)
        .where(
            MpesaPayment.status == PaymentStatus.PENDING,
            MpesaPayment.created_at < cutoff,
        )
        .order_by(MpesaPayment.created_at.asc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def reconcile_pending_payments(
    session: AsyncSession,
    crm_session: AsyncSession,
    client: DarajaClient,
    older_than_minutes: int,
    limit: int = 100,
) -> dict[str, int]:
    """Query the gateway for every stale Pending payment and apply the answers.

    Returns counts per outcome, plus ``pending`` for payments the gateway
    still reports as in progress and ``errors`` for failed queries.
    """
    counts = {"checked": 0, "success": 0, "failed": 0, "ignored": 0, "reverted": 0, "pending": 0, "errors": 0}
    stale = await find_stale_payments(session, older_than_minutes, limit=limit)
    checkout_ids = [payment.checkout_request_id for payment in stale]

    for checkout_request_id in checkout_ids:
        counts["checked"] += 1
        try:
            answer = await client.stk_query(checkout_request_id)
        except UpstreamUnavailable:
            logger.warning("STK query failed for %s; will retry next sweep", checkout_request_id)
            counts["errors"] += 1
            continue

        if answer is None:
            counts["pending"] += 1
            continue

        try:
            outcome = await apply_payment_result(
                session,
                crm_session,
                checkout_request_id,
                answer.result_code,
                answer.result_description,
            )
        except SQLAlchemyError:
            logger.exception("Applying gateway answer for %s failed", checkout_request_id)
            await session.rollback()
            counts["errors"] += 1
            continue
        counts[outcome] += 1

    logger.info("Reconcile sweep finished: %s", counts)
    return counts
