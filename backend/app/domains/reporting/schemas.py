from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class GroupTotalsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: int | str | None
    label: str
    hours: Decimal
    value: Decimal
    entries: int


class DashboardStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: int
    year: int
    total_clients: int
    monthly_hours: Decimal
    monthly_revenue: Decimal
    active_consultants: int
    consultant_stats: list[GroupTotalsOut]
    client_stats: list[GroupTotalsOut]


class ReportSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_hours: Decimal
    total_value: Decimal
    total_entries: int
    total_clients: int
    client_breakdown: list[GroupTotalsOut]


class EntryRowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: dt.date
    client: str
    consultant: str
    service: str
    project: str
    description: str
    start: str
    end: str
    break_start: str
    break_end: str
    hours: Decimal
    value: Decimal
    completed: str
    location: str


class ReportDataOut(BaseModel):
    summary: ReportSummaryOut
    rows: list[EntryRowOut]


class AnalyticsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_hours: Decimal
    total_value: Decimal
    by_project: list[GroupTotalsOut]
    by_sector: list[GroupTotalsOut]
    by_service_type: list[GroupTotalsOut]
    by_location: list[GroupTotalsOut]
    by_consultant: list[GroupTotalsOut]
