from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from app.api.deps import get_repository
from app.core.logging import get_logger
from app.repositories.sql import SqlRepository
from timebill.errors import NotFoundError
from timebill.models import Service

router = APIRouter(prefix="/services", tags=["services"])
logger = get_logger(__name__)


class ServiceCreate(BaseModel):
    code: str
    client_id: int
    description: str
    hourly_rate: Decimal = Field(..., ge=0)


class ServiceUpdate(BaseModel):
    code: str | None = None
    client_id: int | None = None
    description: str | None = None
    hourly_rate: Decimal | None = Field(default=None, ge=0)


class ServiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    client_id: int
    description: str
    hourly_rate: Decimal


def _require_client(repo: SqlRepository, client_id: int) -> None:
    if repo.clients.get(client_id) is None:
        raise NotFoundError("Client", client_id)


@router.get("", response_model=list[ServiceOut])
def list_services(repo: SqlRepository = Depends(get_repository)):
    return repo.services.list()


@router.get("/by-client/{client_id}", response_model=list[ServiceOut])
def list_client_services(client_id: int, repo: SqlRepository = Depends(get_repository)):
    return repo.services.find(client_id=client_id)


@router.get("/{service_id}", response_model=ServiceOut)
def get_service(service_id: int, repo: SqlRepository = Depends(get_repository)):
    service = repo.services.get(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.post("", response_model=ServiceOut, status_code=201)
def create_service(payload: ServiceCreate, repo: SqlRepository = Depends(get_repository)):
    _require_client(repo, payload.client_id)
    service = repo.services.add(Service(**payload.model_dump()))
    logger.info("service_created", service_id=service.id, rate=str(service.hourly_rate))
    return service


@router.put("/{service_id}", response_model=ServiceOut)
def update_service(service_id: int, payload: ServiceUpdate, repo: SqlRepository = Depends(get_repository)):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "client_id" in changes:
        _require_client(repo, changes["client_id"])
    service = repo.services.update(service_id, **changes)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    # Stored totals keep the old rate until POST /time-entries/recalculate
    if "hourly_rate" in changes:
        logger.info("service_rate_changed", service_id=service_id, rate=str(service.hourly_rate))
    return service


@router.delete("/{service_id}", status_code=204)
def delete_service(service_id: int, repo: SqlRepository = Depends(get_repository)):
    if not repo.services.delete(service_id):
        raise HTTPException(status_code=404, detail="Service not found")
    return None
