from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class ProjectStatus(str, Enum):
    BACKLOG = "backlog"
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ServiceLocation(str, Enum):
    ON_SITE = "on_site"
    REMOTE = "remote"


@dataclass
class Client:
    code: str
    name: str
    tax_id: str
    email: str
    id: Optional[int] = None


@dataclass
class Consultant:
    code: str
    name: str
    password_hash: str
    id: Optional[int] = None


@dataclass
class Service:
    code: str
    client_id: int
    description: str
    hourly_rate: Decimal
    id: Optional[int] = None


@dataclass
class Sector:
    code: str
    description: str
    client_id: Optional[int] = None  # None for client-independent sectors
    id: Optional[int] = None


@dataclass
class ServiceType:
    code: str
    description: str
    id: Optional[int] = None


@dataclass
class Project:
    code: str
    client_id: int
    name: str
    status: ProjectStatus = ProjectStatus.BACKLOG
    planned_start_date: Optional[date] = None
    planned_end_date: Optional[date] = None
    actual_start_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    planned_hours: Optional[Decimal] = None
    observations: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    id: Optional[int] = None


@dataclass
class TimeEntry:
    date: date
    consultant_id: int
    client_id: int
    service_id: int
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    total_hours: Decimal
    total_value: Decimal
    sector_id: Optional[int] = None
    service_type_id: Optional[int] = None
    project_id: Optional[int] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None
    description: str = ""
    completed: bool = False
    delivery_forecast: Optional[date] = None
    actual_delivery: Optional[date] = None
    location: Optional[ServiceLocation] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class EntryTotals:
    hours: Decimal
    value: Decimal


@dataclass
class RecalculationResult:
    updated: list[int] = field(default_factory=list)
    unchanged: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)
