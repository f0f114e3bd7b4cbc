# This project was developed with assistance from AI tools.
"""Pydantic response models for project catalogue endpoints."""

from pydantic import BaseModel, ConfigDict

from .property import PropertyItem


class ProjectItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    project_id: int
    name: str | None = None
    link: str | None = None
    priority: str | None = None
    visibility: str | None = None
    epr_id: str | None = None
    description: str | None = None
    banner: str | None = None
    is_featured: bool | None = None


class ProjectListResponse(BaseModel):
    projects: list[ProjectItem]


class VisibleProjectsResponse(BaseModel):
    featured_projects: list[ProjectItem]
    other_projects: list[ProjectItem]


class ProjectPropertiesResponse(BaseModel):
    properties: list[PropertyItem]
