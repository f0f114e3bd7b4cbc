# This project was developed with assistance from AI tools.
"""Referral request/response schemas."""

from db.enums import ReferralStatus
from pydantic import BaseModel, ConfigDict, Field


class ReferralCreate(BaseModel):
    referred_name: str = Field(min_length=1)
    referred_email: str = Field(min_length=3)
    referred_phone: str | None = None
    property_id: str | None = None


class ReferralItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    referrer_id: str
    referred_name: str
    referred_email: str
    referred_phone: str | None = None
    property_id: str | None = None
    status: ReferralStatus
    amount_paid: float


class ReferralListResponse(BaseModel):
    referrals: list[ReferralItem]
