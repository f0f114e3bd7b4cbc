# This project was developed with assistance from AI tools.
"""Project catalogue routes. Featured and visible lists are public."""

from db import get_crm_db, get_ledger_db
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas.project import (
    ProjectItem,
    ProjectListResponse,
    ProjectPropertiesResponse,
    VisibleProjectsResponse,
)
from ..schemas.property import PropertyItem
from ..services import project as project_service

router = APIRouter()


@router.get("/projects/featured", response_model=ProjectListResponse)
async def featured_projects(ledger_session: AsyncSession = Depends(get_ledger_db)) -> ProjectListResponse:
    projects = await project_service.list_featured_projects(ledger_session)
    return ProjectListResponse(projects=[ProjectItem.model_validate(p) for p in projects])


@router.get("/projects/visible", response_model=VisibleProjectsResponse)
async def visible_projects(ledger_session: AsyncSession = Depends(get_ledger_db)) -> VisibleProjectsResponse:
    featured, others = await project_service.list_visible_projects(ledger_session)
    return VisibleProjectsResponse(
        featured_projects=[ProjectItem.model_validate(p) for p in featured],
        other_projects=[ProjectItem.model_validate(p) for p in others],
    )


@router.get("/projects", response_model=ProjectListResponse)
async def user_projects(
    user: CurrentUser,
    crm_session: AsyncSession = Depends(get_crm_db),
    ledger_session: AsyncSession = Depends(get_ledger_db),
) -> ProjectListResponse:
    projects = await project_service.list_user_projects(crm_session, ledger_session, user)
    return ProjectListResponse(projects=[ProjectItem.model_validate(p) for p in projects])


@router.get("/projects/{project_id}/properties", response_model=ProjectPropertiesResponse)
async def user_properties_by_project(
    project_id: int,
    user: CurrentUser,
    crm_session: AsyncSession = Depends(get_crm_db),
    ledger_session: AsyncSession = Depends(get_ledger_db),
) -> ProjectPropertiesResponse:
    lead_files = await project_service.list_properties_by_project(
        crm_session, ledger_session, user, project_id
    )
    return ProjectPropertiesResponse(properties=[PropertyItem.model_validate(lf) for lf in lead_files])
