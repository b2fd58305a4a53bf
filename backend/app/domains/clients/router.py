from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator

from app.api.deps import get_repository
from app.core.logging import get_logger
from app.repositories.sql import SqlRepository
from timebill.models import Client

router = APIRouter(prefix="/clients", tags=["clients"])
logger = get_logger(__name__)


def _check_email(value: str | None) -> str | None:
    if value is None:
        return value
    email = value.strip()
    if "@" not in email:
        raise ValueError("Invalid email format")
    return email


class ClientCreate(BaseModel):
    code: str
    name: str
    tax_id: str
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)


class ClientUpdate(BaseModel):
    code: str | None = None
    name: str | None = None
    tax_id: str | None = None
    email: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        return _check_email(value)


class ClientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    tax_id: str
    email: str


@router.get("", response_model=list[ClientOut])
def list_clients(repo: SqlRepository = Depends(get_repository)):
    return sorted(repo.clients.list(), key=lambda c: c.name.lower())


@router.get("/{client_id}", response_model=ClientOut)
def get_client(client_id: int, repo: SqlRepository = Depends(get_repository)):
    client = repo.clients.get(client_id)
    if client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.post("", response_model=ClientOut, status_code=201)
def create_client(payload: ClientCreate, repo: SqlRepository = Depends(get_repository)):
    client = repo.clients.add(Client(**payload.model_dump()))
    logger.info("client_created", client_id=client.id, code=client.code)
    return client


@router.put("/{client_id}", response_model=ClientOut)
def update_client(client_id: int, payload: ClientUpdate, repo: SqlRepository = Depends(get_repository)):
    client = repo.clients.update(client_id, **payload.model_dump(exclude_unset=True, exclude_none=True))
    if client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.delete("/{client_id}", status_code=204)
def delete_client(client_id: int, repo: SqlRepository = Depends(get_repository)):
    if not repo.clients.delete(client_id):
        raise HTTPException(status_code=404, detail="Client not found")
    logger.info("client_deleted", client_id=client_id)
    return None
