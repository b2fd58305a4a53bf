from __future__ import annotations

import datetime as dt
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from app.api.deps import get_repository, get_timesheet
from app.core.logging import get_logger
from app.core.observability import entries_written
from app.repositories.sql import SqlRepository
from timebill.aggregation import EntryFilter, filter_entries
from timebill.models import ServiceLocation
from timebill.timesheet import TimesheetService
from timebill_reports.data import month_bounds

router = APIRouter(prefix="/time-entries", tags=["time-entries"])
logger = get_logger(__name__)

CLOCK = r"^\d{1,2}:\d{2}$"
# Fields a PUT may clear by sending null
CLEARABLE = {
    "break_start",
    "break_end",
    "sector_id",
    "service_type_id",
    "project_id",
    "delivery_forecast",
    "actual_delivery",
    "location",
}


class TimeEntryCreate(BaseModel):
    """Editable fields of a time entry; hours and value are always computed server-side."""

    date: dt.date
    consultant_id: int
    client_id: int
    service_id: int
    start_time: str = Field(..., pattern=CLOCK)
    end_time: str = Field(..., pattern=CLOCK)
    break_start: str | None = None
    break_end: str | None = None
    sector_id: int | None = None
    service_type_id: int | None = None
    project_id: int | None = None
    description: str = ""
    completed: bool = False
    delivery_forecast: dt.date | None = None
    actual_delivery: dt.date | None = None
    location: ServiceLocation | None = None


class TimeEntryUpdate(BaseModel):
    date: dt.date | None = None
    consultant_id: int | None = None
    client_id: int | None = None
    service_id: int | None = None
    start_time: str | None = Field(default=None, pattern=CLOCK)
    end_time: str | None = Field(default=None, pattern=CLOCK)
    break_start: str | None = None
    break_end: str | None = None
    sector_id: int | None = None
    service_type_id: int | None = None
    project_id: int | None = None
    description: str | None = None
    completed: bool | None = None
    delivery_forecast: dt.date | None = None
    actual_delivery: dt.date | None = None
    location: ServiceLocation | None = None


class TimeEntryOut(TimeEntryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    start_time: str
    end_time: str
    total_hours: Decimal
    total_value: Decimal


class RecalculationOut(BaseModel):
    updated: list[int]
    unchanged: list[int]
    failed: dict[int, str]


@router.get("", response_model=list[TimeEntryOut])
def list_time_entries(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=1900),
    repo: SqlRepository = Depends(get_repository),
):
    if (month is None) != (year is None):
        raise HTTPException(status_code=400, detail="month and year must be given together")
    if month is None:
        return repo.entries_between(None, None)
    return repo.entries_between(*month_bounds(month, year))


@router.get("/filtered", response_model=list[TimeEntryOut])
def list_filtered_entries(
    start_date: dt.date | None = None,
    end_date: dt.date | None = None,
    client_id: int | None = None,
    consultant_id: int | None = None,
    repo: SqlRepository = Depends(get_repository),
):
    entry_filter = EntryFilter(
        start_date=start_date, end_date=end_date, client_id=client_id, consultant_id=consultant_id
    )
    return filter_entries(repo.entries_between(start_date, end_date), entry_filter)


@router.get("/billing", response_model=list[TimeEntryOut])
def list_billing_entries(
    client_id: int,
    start_date: dt.date,
    end_date: dt.date,
    repo: SqlRepository = Depends(get_repository),
):
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not precede start_date")
    entries = repo.entries_between(start_date, end_date)
    return filter_entries(entries, EntryFilter(client_id=client_id))


@router.post("/recalculate", response_model=RecalculationOut)
def recalculate_entries(timesheet: TimesheetService = Depends(get_timesheet)):
    result = timesheet.recalculate_all()
    if result.updated:
        entries_written.add(len(result.updated), {"operation": "recalculate"})
    return RecalculationOut(updated=result.updated, unchanged=result.unchanged, failed=result.failed)


@router.get("/{entry_id}", response_model=TimeEntryOut)
def get_time_entry(entry_id: int, repo: SqlRepository = Depends(get_repository)):
    entry = repo.time_entries.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Time entry not found")
    return entry


@router.post("", response_model=TimeEntryOut, status_code=201)
def create_time_entry(payload: TimeEntryCreate, timesheet: TimesheetService = Depends(get_timesheet)):
    entry = timesheet.create_entry(payload.model_dump())
    entries_written.add(1, {"operation": "create"})
    return entry


@router.put("/{entry_id}", response_model=TimeEntryOut)
def update_time_entry(
    entry_id: int, payload: TimeEntryUpdate, timesheet: TimesheetService = Depends(get_timesheet)
):
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in CLEARABLE
    }
    entry = timesheet.update_entry(entry_id, changes)
    if entry is None:
        raise HTTPException(status_code=404, detail="Time entry not found")
    entries_written.add(1, {"operation": "update"})
    return entry


@router.delete("/{entry_id}", status_code=204)
def delete_time_entry(entry_id: int, timesheet: TimesheetService = Depends(get_timesheet)):
    if not timesheet.delete_entry(entry_id):
        raise HTTPException(status_code=404, detail="Time entry not found")
    logger.info("time_entry_deleted", entry_id=entry_id)
    return None
