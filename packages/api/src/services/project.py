# This project was developed with assistance from AI tools.
"""Project catalogue queries (ledger ``Projects`` joined to CRM lead files)."""

from db import LeadFile, Project
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFound
from ..schemas.auth import UserContext
from .scope import apply_ownership_scope, list_owned_lead_files

VISIBLE = "SHOW"


async def list_user_projects(
    crm_session: AsyncSession,
    ledger_session: AsyncSession,
    user: UserContext,
) -> list[Project]:
    """Projects the caller holds at least one active plot in."""
    lead_files = await list_owned_lead_files(crm_session, user)
    project_numbers = sorted({lf.project_number for lf in lead_files if lf.project_number})
    if not project_numbers:
        return []
    stmt = select(Project).where(Project.epr_id.in_(project_numbers)).order_by(Project.name.asc())
    result = await ledger_session.execute(stmt)
    return list(result.scalars().all())


async def list_properties_by_project(
    crm_session: AsyncSession,
    ledger_session: AsyncSession,
    user: UserContext,
    project_id: int,
) -> list[LeadFile]:
    result = await ledger_session.execute(select(Project).where(Project.project_id == project_id))
    project = result.scalar_one_or_none()
    if project is None or not project.epr_id:
        raise NotFound("Project not found.")

    stmt = apply_ownership_scope(
        select(LeadFile).where(LeadFile.project_number == project.epr_id), user
    ).order_by(LeadFile.lead_file_no)
    lead_result = await crm_session.execute(stmt)
    return list(lead_result.scalars().all())


async def list_featured_projects(ledger_session: AsyncSession) -> list[Project]:
    stmt = select(Project).where(Project.is_featured.is_(True)).order_by(Project.name.asc())
    result = await ledger_session.execute(stmt)
    return list(result.scalars().all())


async def list_visible_projects(ledger_session: AsyncSession) -> tuple[list[Project], list[Project]]:
    """Visible projects split into (featured, other), each ordered by name."""
    base = select(Project).where(Project.visibility == VISIBLE).order_by(Project.name.asc())
    featured = await ledger_session.execute(base.where(Project.is_featured.is_(True)))
    others = await ledger_session.execute(base.where(Project.is_featured.is_not(True)))
    return list(featured.scalars().all()), list(others.scalars().all())
