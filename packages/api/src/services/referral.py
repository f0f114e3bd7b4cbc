# This project was developed with assistance from AI tools.
"""Customer referral programme.

A referral moves Pending -> Completed when the referred prospect buys
(updated by back-office staff), then Completed -> Redeemed when the
referrer claims the reward from the app.
"""

import logging

from db import Referral
from db.enums import ReferralStatus
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import Conflict, InvalidArgument, NotFound
from ..schemas.auth import UserContext
from ..schemas.referral import ReferralCreate

logger = logging.getLogger(__name__)


async def submit_referral(session: AsyncSession, user: UserContext, data: ReferralCreate) -> Referral:
    referral = Referral(
        referrer_id=user.customer_number,
        referred_name=data.referred_name.strip(),
        referred_email=data.referred_email.strip(),
        referred_phone=data.referred_phone,
        property_id=data.property_id,
        status=ReferralStatus.PENDING,
        amount_paid=0,
    )
    session.add(referral)
    await session.commit()
    logger.info("Referral %s submitted by customer %s", referral.id, user.customer_number)
    return referral


async def list_referrals(session: AsyncSession, user: UserContext) -> list[Referral]:
    stmt = (
        select(Referral)
        .where(Referral.referrer_id == user.customer_number)
        .order_by(Referral.created_at.desc(), Referral.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def redeem_referral(session: AsyncSession, user: UserContext, referral_id: int) -> None:
    """Redeem one of the caller's completed referrals.

    The Completed -> Redeemed step is a conditional update so a reward is
    never redeemed twice.
    """
    stmt = (
        update(Referral)
        .where(
            Referral.id == referral_id,
            Referral.referrer_id == user.customer_number,
            Referral.status == ReferralStatus.COMPLETED,
        )
        .values(status=ReferralStatus.REDEEMED)
    )
    result = await session.execute(stmt)
    if result.rowcount == 1:
        await session.commit()
        logger.info("Referral %s redeemed by customer %s", referral_id, user.customer_number)
        return

    await session.rollback()
    lookup = await session.execute(
        select(Referral).where(
            Referral.id == referral_id,
            Referral.referrer_id == user.customer_number,
        )
    )
    referral = lookup.scalar_one_or_none()
    if referral is None:
        raise NotFound("Referral not found.")
    if referral.status == ReferralStatus.REDEEMED:
        raise Conflict("Referral reward has already been redeemed.")
    raise InvalidArgument("Referral reward is not yet available for redemption.")
