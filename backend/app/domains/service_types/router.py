from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict

from app.api.deps import get_repository
from app.repositories.sql import SqlRepository
from timebill.models import ServiceType

router = APIRouter(prefix="/service-types", tags=["service-types"])


class ServiceTypeCreate(BaseModel):
    code: str
    description: str


class ServiceTypeUpdate(BaseModel):
    code: str | None = None
    description: str | None = None


class ServiceTypeOut(ServiceTypeCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


@router.get("", response_model=list[ServiceTypeOut])
def list_service_types(repo: SqlRepository = Depends(get_repository)):
    return repo.service_types.list()


@router.get("/{service_type_id}", response_model=ServiceTypeOut)
def get_service_type(service_type_id: int, repo: SqlRepository = Depends(get_repository)):
    service_type = repo.service_types.get(service_type_id)
    if service_type is None:
        raise HTTPException(status_code=404, detail="Service type not found")
    return service_type


@router.post("", response_model=ServiceTypeOut, status_code=201)
def create_service_type(payload: ServiceTypeCreate, repo: SqlRepository = Depends(get_repository)):
    return repo.service_types.add(ServiceType(**payload.model_dump()))


@router.put("/{service_type_id}", response_model=ServiceTypeOut)
def update_service_type(
    service_type_id: int, payload: ServiceTypeUpdate, repo: SqlRepository = Depends(get_repository)
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    service_type = repo.service_types.update(service_type_id, **changes)
    if service_type is None:
        raise HTTPException(status_code=404, detail="Service type not found")
    return service_type


@router.delete("/{service_type_id}", status_code=204)
def delete_service_type(service_type_id: int, repo: SqlRepository = Depends(get_repository)):
    if not repo.service_types.delete(service_type_id):
        raise HTTPException(status_code=404, detail="Service type not found")
    return None
