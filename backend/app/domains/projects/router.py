from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.api.deps import get_repository
from app.core.logging import get_logger
from app.repositories.sql import SqlRepository
from timebill.errors import NotFoundError
from timebill.models import Project, ProjectStatus

router = APIRouter(prefix="/projects", tags=["projects"])
logger = get_logger(__name__)


# Fields a PUT may clear by sending null
CLEARABLE = {
    "planned_start_date",
    "planned_end_date",
    "actual_start_date",
    "actual_end_date",
    "planned_hours",
    "observations",
    "description",
}

class ProjectBase(BaseModel):
    code: str
    client_id: int
    name: str
    status: ProjectStatus = ProjectStatus.BACKLOG
    planned_start_date: date | None = None
    planned_end_date: date | None = None
    actual_start_date: date | None = None
    actual_end_date: date | None = None
    planned_hours: Decimal | None = Field(default=None, ge=0)
    observations: str | None = None
    description: str | None = None


class ProjectCreate(ProjectBase):
    @model_validator(mode="after")
    def check_planned_window(self) -> "ProjectCreate":
        if self.planned_start_date and self.planned_end_date and self.planned_end_date < self.planned_start_date:
            raise ValueError("planned_end_date must not precede planned_start_date")
        return self


class ProjectUpdate(BaseModel):
    code: str | None = None
    client_id: int | None = None
    name: str | None = None
    status: ProjectStatus | None = None
    planned_start_date: date | None = None
    planned_end_date: date | None = None
    actual_start_date: date | None = None
    actual_end_date: date | None = None
    planned_hours: Decimal | None = Field(default=None, ge=0)
    observations: str | None = None
    description: str | None = None


class ProjectOut(ProjectBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime | None = None


@router.get("", response_model=list[ProjectOut])
def list_projects(repo: SqlRepository = Depends(get_repository)):
    return repo.projects.list()


@router.get("/by-client/{client_id}", response_model=list[ProjectOut])
def list_client_projects(client_id: int, repo: SqlRepository = Depends(get_repository)):
    return repo.projects.find(client_id=client_id)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: int, repo: SqlRepository = Depends(get_repository)):
    project = repo.projects.get(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.post("", response_model=ProjectOut, status_code=201)
def create_project(payload: ProjectCreate, repo: SqlRepository = Depends(get_repository)):
    if repo.clients.get(payload.client_id) is None:
        raise NotFoundError("Client", payload.client_id)
    project = repo.projects.add(Project(**payload.model_dump()))
    logger.info("project_created", project_id=project.id, status=project.status.value)
    return project


@router.put("/{project_id}", response_model=ProjectOut)
def update_project(project_id: int, payload: ProjectUpdate, repo: SqlRepository = Depends(get_repository)):
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in CLEARABLE
    }
    if "client_id" in changes and repo.clients.get(changes["client_id"]) is None:
        raise NotFoundError("Client", changes["client_id"])
    project = repo.projects.update(project_id, **changes)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.delete("/{project_id}", status_code=204)
def delete_project(project_id: int, repo: SqlRepository = Depends(get_repository)):
    if not repo.projects.delete(project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return None
