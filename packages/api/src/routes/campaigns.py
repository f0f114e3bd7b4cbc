# This project was developed with assistance from AI tools.
"""Public campaign routes."""

from db import get_db
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.campaign import CampaignItem, CampaignResponse
from ..services.campaign import get_monthly_campaign

router = APIRouter()


@router.get("/campaigns/monthly", response_model=CampaignResponse)
async def monthly_campaign(session: AsyncSession = Depends(get_db)) -> CampaignResponse:
    campaign = await get_monthly_campaign(session)
    return CampaignResponse(campaign=CampaignItem.model_validate(campaign))
