# This project was developed with assistance from AI tools.
"""Shared ownership filtering for CRM lead-file queries.

A customer sees a lead file only when it is theirs and not dropped. Every
property, installment, receipt and project query starts from this filter
so the rule lives in one place.
"""

from db import LeadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotAuthorized
from ..schemas.auth import UserContext

ACTIVE = "No"


def apply_ownership_scope(stmt, user: UserContext):
    """Restrict a LeadFile query to the caller's active plots."""
    return stmt.where(
        LeadFile.customer_id == user.customer_number,
        LeadFile.lead_file_status_dropped == ACTIVE,
    )


async def get_owned_lead_file(crm_session: AsyncSession, user: UserContext, lead_file_no: str) -> LeadFile:
    """Return the caller's active lead file or raise NotAuthorized.

    Missing, foreign and dropped lead files are indistinguishable to the
    caller.
    """
    stmt = apply_ownership_scope(select(LeadFile).where(LeadFile.lead_file_no == lead_file_no), user)
    result = await crm_session.execute(stmt)
    lead_file = result.scalar_one_or_none()
    if lead_file is None:
        raise NotAuthorized("Property not found, does not belong to the user, or is dropped.")
    return lead_file


async def list_owned_lead_files(crm_session: AsyncSession, user: UserContext) -> list[LeadFile]:
    stmt = apply_ownership_scope(select(LeadFile), user).order_by(LeadFile.lead_file_no)
    result = await crm_session.execute(stmt)
    return list(result.scalars().all())
