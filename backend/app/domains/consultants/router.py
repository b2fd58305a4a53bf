from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from app.api.deps import get_repository
from app.core.logging import get_logger
from app.repositories.sql import SqlRepository
from timebill.models import Consultant
from timebill.timesheet import hash_password

router = APIRouter(prefix="/consultants", tags=["consultants"])
logger = get_logger(__name__)


class ConsultantCreate(BaseModel):
    code: str
    name: str
    password: str = Field(..., min_length=4)


class ConsultantUpdate(BaseModel):
    code: str | None = None
    name: str | None = None
    password: str | None = Field(default=None, min_length=4)


class ConsultantOut(BaseModel):
    """Public view of a consultant; the password hash is never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str


@router.get("", response_model=list[ConsultantOut])
def list_consultants(repo: SqlRepository = Depends(get_repository)):
    return sorted(repo.consultants.list(), key=lambda c: c.name.lower())


@router.get("/{consultant_id}", response_model=ConsultantOut)
def get_consultant(consultant_id: int, repo: SqlRepository = Depends(get_repository)):
    consultant = repo.consultants.get(consultant_id)
    if consultant is None:
        raise HTTPException(status_code=404, detail="Consultant not found")
    return consultant


@router.post("", response_model=ConsultantOut, status_code=201)
def create_consultant(payload: ConsultantCreate, repo: SqlRepository = Depends(get_repository)):
    consultant = repo.consultants.add(
        Consultant(
            code=payload.code.strip(),
            name=payload.name.strip(),
            password_hash=hash_password(payload.password),
        )
    )
    logger.info("consultant_created", consultant_id=consultant.id, code=consultant.code)
    return consultant


@router.put("/{consultant_id}", response_model=ConsultantOut)
def update_consultant(
    consultant_id: int, payload: ConsultantUpdate, repo: SqlRepository = Depends(get_repository)
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"password"})
    if payload.password:
        changes["password_hash"] = hash_password(payload.password)
    consultant = repo.consultants.update(consultant_id, **changes)
    if consultant is None:
        raise HTTPException(status_code=404, detail="Consultant not found")
    return consultant


@router.delete("/{consultant_id}", status_code=204)
def delete_consultant(consultant_id: int, repo: SqlRepository = Depends(get_repository)):
    if not repo.consultants.delete(consultant_id):
        raise HTTPException(status_code=404, detail="Consultant not found")
    return None
