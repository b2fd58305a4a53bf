from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from app.api.deps import get_timesheet
from app.core.logging import get_logger
from timebill.timesheet import TimesheetService

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


class LoginRequest(BaseModel):
    code: str
    password: str = Field(..., min_length=1)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        code = value.strip()
        if not code:
            raise ValueError("Consultant code is required")
        return code


class LoginResponse(BaseModel):
    id: int
    code: str
    name: str


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, timesheet: TimesheetService = Depends(get_timesheet)) -> LoginResponse:
    logger.info("login_attempt", code=payload.code)
    consultant = timesheet.authenticate(payload.code, payload.password)
    if consultant is None:
        logger.info("login_rejected", code=payload.code)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    logger.info("login_success", consultant_id=consultant.id)
    return LoginResponse(id=consultant.id, code=consultant.code, name=consultant.name)
