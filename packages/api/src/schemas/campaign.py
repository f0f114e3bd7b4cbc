# This project was developed with assistance from AI tools.
"""Campaign response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CampaignItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    banner_image_url: str | None = None
    link: str | None = None
    month: int
    year: int
    featured: bool
    created_at: datetime | None = None


class CampaignResponse(BaseModel):
    campaign: CampaignItem
