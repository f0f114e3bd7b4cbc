# This project was developed with assistance from AI tools.
"""Tests for project catalogue queries."""

import pytest
from db import Project

from src.core.errors import NotFound
from src.services import project as project_service

from .factories import make_lead_file, make_session, make_user_context, result_all, result_one


def _project(project_id=1, name="Vipingo Ridge", epr_id="EPR-7", featured=False):
    return Project(project_id=project_id, name=name, epr_id=epr_id, visibility="SHOW", is_featured=featured)


@pytest.mark.asyncio
async def test_user_projects_come_from_owned_lead_files():
    crm = make_session(result_all([make_lead_file(project_number="EPR-7"), make_lead_file("LF-2", project_number=None)]))
    ledger = make_session(result_all([_project()]))
    projects = await project_service.list_user_projects(crm, ledger, make_user_context())
    assert [p.name for p in projects] == ["Vipingo Ridge"]


@pytest.mark.asyncio
async def test_user_without_plots_has_no_projects():
    crm = make_session(result_all([]))
    ledger = make_session()
    assert await project_service.list_user_projects(crm, ledger, make_user_context()) == []
    ledger.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_properties_by_unknown_project_is_not_found():
    ledger = make_session(result_one(None))
    with pytest.raises(NotFound):
        await project_service.list_properties_by_project(make_session(), ledger, make_user_context(), 99)


@pytest.mark.asyncio
async def test_properties_by_project_are_scoped():
    ledger = make_session(result_one(_project()))
    crm = make_session(result_all([make_lead_file()]))
    lead_files = await project_service.list_properties_by_project(crm, ledger, make_user_context(), 1)
    assert [lf.lead_file_no for lf in lead_files] == ["LF-100"]


@pytest.mark.asyncio
async def test_visible_projects_split_featured_and_others():
    ledger = make_session(
        result_all([_project(1, "Alpha", featured=True)]),
        result_all([_project(2, "Beta"), _project(3, "Gamma")]),
    )
    featured, others = await project_service.list_visible_projects(ledger)
    assert [p.name for p in featured] == ["Alpha"]
    assert [p.name for p in others] == ["Beta", "Gamma"]
