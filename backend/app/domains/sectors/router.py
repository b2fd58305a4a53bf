from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict

from app.api.deps import get_repository
from app.repositories.sql import SqlRepository
from timebill.errors import NotFoundError
from timebill.models import Sector

router = APIRouter(prefix="/sectors", tags=["sectors"])


class SectorCreate(BaseModel):
    code: str
    description: str
    client_id: int | None = None


class SectorUpdate(BaseModel):
    code: str | None = None
    description: str | None = None
    client_id: int | None = None


class SectorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    description: str
    client_id: int | None = None


@router.get("", response_model=list[SectorOut])
def list_sectors(repo: SqlRepository = Depends(get_repository)):
    return repo.sectors.list()


@router.get("/by-client/{client_id}", response_model=list[SectorOut])
def list_client_sectors(client_id: int, repo: SqlRepository = Depends(get_repository)):
    """Sectors usable for a client: its own plus the client-independent ones."""
    return [s for s in repo.sectors.list() if s.client_id in (None, client_id)]


@router.get("/{sector_id}", response_model=SectorOut)
def get_sector(sector_id: int, repo: SqlRepository = Depends(get_repository)):
    sector = repo.sectors.get(sector_id)
    if sector is None:
        raise HTTPException(status_code=404, detail="Sector not found")
    return sector


@router.post("", response_model=SectorOut, status_code=201)
def create_sector(payload: SectorCreate, repo: SqlRepository = Depends(get_repository)):
    if payload.client_id is not None and repo.clients.get(payload.client_id) is None:
        raise NotFoundError("Client", payload.client_id)
    return repo.sectors.add(Sector(**payload.model_dump()))


@router.put("/{sector_id}", response_model=SectorOut)
def update_sector(sector_id: int, payload: SectorUpdate, repo: SqlRepository = Depends(get_repository)):
    # client_id may be cleared to make the sector shared across clients
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "client_id"
    }
    if changes.get("client_id") is not None and repo.clients.get(changes["client_id"]) is None:
        raise NotFoundError("Client", changes["client_id"])
    sector = repo.sectors.update(sector_id, **changes)
    if sector is None:
        raise HTTPException(status_code=404, detail="Sector not found")
    return sector


@router.delete("/{sector_id}", status_code=204)
def delete_sector(sector_id: int, repo: SqlRepository = Depends(get_repository)):
    if not repo.sectors.delete(sector_id):
        raise HTTPException(status_code=404, detail="Sector not found")
    return None
