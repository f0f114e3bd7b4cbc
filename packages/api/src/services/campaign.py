# This project was developed with assistance from AI tools.
"""Monthly featured campaign lookup and seeding."""

import logging
from datetime import UTC, datetime

from db import Campaign
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFound

logger = logging.getLogger(__name__)

DEFAULT_CAMPAIGN = {
    "title": "Summer Savings",
    "description": "Enjoy exclusive discounts on select properties this summer!",
    "banner_image_url": "https://images.unsplash.com/photo-1719937206168-f4c829152b91?q=80&w=2070&auto=format&fit=crop",
}


async def _featured_for_month(session: AsyncSession, month: int, year: int) -> Campaign | None:
    stmt = (
        select(Campaign)
        .where(Campaign.month == month, Campaign.year == year, Campaign.featured.is_(True))
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_monthly_campaign(session: AsyncSession, now: datetime | None = None) -> Campaign:
    now = now or datetime.now(UTC)
    campaign = await _featured_for_month(session, now.month, now.year)
    if campaign is None:
        raise NotFound("No featured campaign found for this month.")
    return campaign


async def seed_monthly_campaign(session: AsyncSession, now: datetime | None = None) -> dict:
    """Create this month's featured campaign unless one exists."""
    now = now or datetime.now(UTC)
    existing = await _featured_for_month(session, now.month, now.year)
    if existing is not None:
        logger.info("Featured campaign for %d-%02d already exists", now.year, now.month)
        return {"status": "already_seeded", "campaign_id": existing.id}

    campaign = Campaign(month=now.month, year=now.year, featured=True, **DEFAULT_CAMPAIGN)
    session.add(campaign)
    await session.commit()
    logger.info("Seeded featured campaign for %d-%02d", now.year, now.month)
    return {"status": "seeded", "campaign_id": campaign.id}
