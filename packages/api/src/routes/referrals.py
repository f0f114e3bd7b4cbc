# This project was developed with assistance from AI tools.
"""Referral submission, listing and reward redemption."""

from db import get_db
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas.auth import MessageResponse
from ..schemas.referral import ReferralCreate, ReferralItem, ReferralListResponse
from ..services import referral as referral_service

router = APIRouter()


@router.post("/referrals", response_model=ReferralItem)
async def submit_referral(
    body: ReferralCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ReferralItem:
    referral = await referral_service.submit_referral(session, user, body)
    return ReferralItem.model_validate(referral)


@router.get("/referrals", response_model=ReferralListResponse)
async def list_referrals(user: CurrentUser, session: AsyncSession = Depends(get_db)) -> ReferralListResponse:
    referrals = await referral_service.list_referrals(session, user)
    return ReferralListResponse(referrals=[ReferralItem.model_validate(r) for r in referrals])


@router.post("/referrals/{referral_id}/redeem", response_model=MessageResponse)
async def redeem_referral(
    referral_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await referral_service.redeem_referral(session, user, referral_id)
    return MessageResponse(message="Reward redeemed successfully.")
