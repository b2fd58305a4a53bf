from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from timebill.aggregation import Aggregation, Dimension, EntryFilter, GroupTotals, aggregate, filter_entries
from timebill.calculator import money, quantize_hours
from timebill.models import Client, TimeEntry

from .data import Directory

DIMENSION_LABELS = {
    Dimension.CLIENT: "clients",
    Dimension.CONSULTANT: "consultants",
    Dimension.PROJECT: "projects",
    Dimension.SECTOR: "sectors",
    Dimension.SERVICE_TYPE: "service_types",
    Dimension.SERVICE: "services",
    Dimension.LOCATION: "locations",
}


@dataclass
class ReportRequest:
    report_type: str
    start_date: date | None = None
    end_date: date | None = None
    client_id: int | None = None
    consultant_id: int | None = None

    @property
    def entry_filter(self) -> EntryFilter:
        return EntryFilter(
            start_date=self.start_date,
            end_date=self.end_date,
            client_id=self.client_id,
            consultant_id=self.consultant_id,
        )


@dataclass(frozen=True)
class DashboardStats:
    month: int
    year: int
    total_clients: int
    monthly_hours: Decimal
    monthly_revenue: Decimal
    active_consultants: int
    consultant_stats: List[GroupTotals]
    client_stats: List[GroupTotals]


@dataclass(frozen=True)
class ReportSummary:
    total_hours: Decimal
    total_value: Decimal
    total_entries: int
    total_clients: int
    client_breakdown: List[GroupTotals]


@dataclass(frozen=True)
class AnalyticsReport:
    total_hours: Decimal
    total_value: Decimal
    by_project: List[GroupTotals]
    by_sector: List[GroupTotals]
    by_service_type: List[GroupTotals]
    by_location: List[GroupTotals]
    by_consultant: List[GroupTotals]


@dataclass(frozen=True)
class EntryRow:
    """One time entry with display names, as exported in detail reports."""

    date: date
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


@dataclass(frozen=True)
class AggregationRow:
    group: str
    label: str
    hours: Decimal
    value: Decimal
    entries: int


ReportRow = Union[EntryRow, AggregationRow]
ENTRY_COLUMNS = [f.name for f in fields(EntryRow)]
AGGREGATION_COLUMNS = [f.name for f in fields(AggregationRow)]


@dataclass(frozen=True)
class BillingLine:
    description: str
    detail: str
    hours: Decimal
    value: Decimal
    entries: int = 1


@dataclass
class BillingStatement:
    client_name: str
    client_tax_id: str
    client_email: str
    start_date: date
    end_date: date
    mode: str
    lines: List[BillingLine] = field(default_factory=list)
    total_hours: Decimal = Decimal("0")
    total_value: Decimal = Decimal("0")


def group_by(entries: Iterable[TimeEntry], dimension: Dimension, directory: Directory) -> Aggregation:
    labels = getattr(directory, DIMENSION_LABELS[Dimension(dimension)])
    return aggregate(entries, dimension, labels=labels)


def dashboard_stats(
    entries: Iterable[TimeEntry],
    directory: Directory,
    month: int,
    year: int,
    total_clients: int | None = None,
) -> DashboardStats:
    monthly = [e for e in entries if e.date.year == year and e.date.month == month]
    by_consultant = group_by(monthly, Dimension.CONSULTANT, directory)
    by_client = group_by(monthly, Dimension.CLIENT, directory)
    return DashboardStats(
        month=month,
        year=year,
        total_clients=len(directory.clients) if total_clients is None else total_clients,
        monthly_hours=quantize_hours(by_client.total_hours),
        monthly_revenue=money(by_client.total_value),
        active_consultants=sum(1 for g in by_consultant.groups if g.key is not None),
        consultant_stats=by_consultant.groups,
        client_stats=by_client.groups,
    )


def report_summary(
    entries: Iterable[TimeEntry], directory: Directory, entry_filter: Optional[EntryFilter] = None
) -> ReportSummary:
    filtered = filter_entries(entries, entry_filter)
    by_client = group_by(filtered, Dimension.CLIENT, directory)
    return ReportSummary(
        total_hours=quantize_hours(by_client.total_hours),
        total_value=money(by_client.total_value),
        total_entries=by_client.total_entries,
        total_clients=len({e.client_id for e in filtered}),
        client_breakdown=by_client.groups,
    )


def analytics(
    entries: Iterable[TimeEntry], directory: Directory, entry_filter: Optional[EntryFilter] = None
) -> AnalyticsReport:
    filtered = filter_entries(entries, entry_filter)
    by_project = group_by(filtered, Dimension.PROJECT, directory)
    return AnalyticsReport(
        total_hours=quantize_hours(by_project.total_hours),
        total_value=money(by_project.total_value),
        by_project=by_project.groups,
        by_sector=group_by(filtered, Dimension.SECTOR, directory).groups,
        by_service_type=group_by(filtered, Dimension.SERVICE_TYPE, directory).groups,
        by_location=group_by(filtered, Dimension.LOCATION, directory).groups,
        by_consultant=group_by(filtered, Dimension.CONSULTANT, directory).groups,
    )


def entry_rows(entries: Iterable[TimeEntry], directory: Directory) -> List[EntryRow]:
    rows: List[EntryRow] = []
    for entry in sorted(entries, key=lambda e: (e.date, e.id or 0)):
        location = entry.location.value if entry.location else None
        rows.append(
            EntryRow(
                date=entry.date,
                client=directory.name("clients", entry.client_id),
                consultant=directory.name("consultants", entry.consultant_id),
                service=directory.name("services", entry.service_id),
                project=directory.name("projects", entry.project_id),
                description=entry.description or "",
                start=entry.start_time,
                end=entry.end_time,
                break_start=entry.break_start or "",
                break_end=entry.break_end or "",
                hours=entry.total_hours,
                value=entry.total_value,
                completed="Yes" if entry.completed else "No",
                location=directory.locations.get(location, "") if location else "",
            )
        )
    return rows


def aggregation_rows(result: Aggregation) -> List[AggregationRow]:
    rows = [
        AggregationRow(
            group=result.dimension.value,
            label=group.label,
            hours=quantize_hours(group.hours),
            value=money(group.value),
            entries=group.entries,
        )
        for group in result.groups
    ]
    rows.append(
        AggregationRow(
            group=result.dimension.value,
            label="Total",
            hours=quantize_hours(result.total_hours),
            value=money(result.total_value),
            entries=result.total_entries,
        )
    )
    return rows


def billing_statement(
    client: Client,
    entries: Iterable[TimeEntry],
    directory: Directory,
    start_date: date,
    end_date: date,
    mode: str = "detailed",
) -> BillingStatement:
    if mode not in ("detailed", "synthetic"):
        raise ValueError(f"Unknown billing mode: {mode}")

    selected = sorted(
        (e for e in entries if e.client_id == client.id), key=lambda e: (e.date, e.id or 0)
    )
    statement = BillingStatement(
        client_name=client.name,
        client_tax_id=client.tax_id,
        client_email=client.email,
        start_date=start_date,
        end_date=end_date,
        mode=mode,
    )

    if mode == "detailed":
        for entry in selected:
            consultant = directory.name("consultants", entry.consultant_id)
            statement.lines.append(
                BillingLine(
                    description=f"{entry.date.isoformat()} {directory.name('services', entry.service_id)}",
                    detail=f"{consultant}: {entry.description}" if entry.description else consultant,
                    hours=entry.total_hours,
                    value=entry.total_value,
                )
            )
    else:
        buckets: Dict[Tuple[str, str, str], Dict[str, Any]] = defaultdict(
            lambda: {"hours": Decimal("0"), "value": Decimal("0"), "entries": 0}
        )
        for entry in selected:
            key = (
                directory.name("projects", entry.project_id, "No project"),
                directory.name("sectors", entry.sector_id, "No sector"),
                directory.name("service_types", entry.service_type_id, "No service type"),
            )
            buckets[key]["hours"] += entry.total_hours
            buckets[key]["value"] += entry.total_value
            buckets[key]["entries"] += 1
        for (project, sector, service_type), totals in sorted(buckets.items()):
            statement.lines.append(
                BillingLine(
                    description=project,
                    detail=f"{sector} - {service_type}",
                    hours=totals["hours"],
                    value=totals["value"],
                    entries=totals["entries"],
                )
            )

    statement.total_hours = quantize_hours(sum((e.total_hours for e in selected), Decimal("0")))
    statement.total_value = money(sum((e.total_value for e in selected), Decimal("0")))
    return statement


REPORT_DIMENSIONS = {
    "client-summary": Dimension.CLIENT,
    "consultant-summary": Dimension.CONSULTANT,
    "project-summary": Dimension.PROJECT,
    "sector-summary": Dimension.SECTOR,
    "service-type-summary": Dimension.SERVICE_TYPE,
    "service-summary": Dimension.SERVICE,
    "location-summary": Dimension.LOCATION,
}

REPORT_TYPES = [*REPORT_DIMENSIONS, "entry-detail"]


def build_report(request: ReportRequest, entries: Iterable[TimeEntry], directory: Directory) -> List[ReportRow]:
    filtered = filter_entries(entries, request.entry_filter)
    if request.report_type == "entry-detail":
        return entry_rows(filtered, directory)
    try:
        dimension = REPORT_DIMENSIONS[request.report_type]
    except KeyError as exc:
        raise ValueError(f"Unknown report type: {request.report_type}") from exc
    return aggregation_rows(group_by(filtered, dimension, directory))


def report_columns(report_type: str) -> List[str]:
    """Column names of the rows ``build_report`` produces for ``report_type``."""
    if report_type == "entry-detail":
        return list(ENTRY_COLUMNS)
    if report_type in REPORT_DIMENSIONS:
        return list(AGGREGATION_COLUMNS)
    raise ValueError(f"Unknown report type: {report_type}")
