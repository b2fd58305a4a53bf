from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response

from app.api.deps import get_repository
from app.core.logging import get_logger
from app.core.observability import reports_exported
from app.domains.reporting.schemas import AnalyticsOut, ReportDataOut
from app.repositories.sql import SqlRepository
from timebill.aggregation import EntryFilter
from timebill_reports.data import load_directory, load_entries
from timebill_reports.exporter import render_csv, render_report_pdf
from timebill_reports.reports import (
    ReportRequest,
    analytics,
    build_report,
    entry_rows,
    report_columns,
    report_summary,
)

router = APIRouter(prefix="/reports", tags=["reporting"])
logger = get_logger(__name__)


def report_filter(
    start_date: date | None = None,
    end_date: date | None = None,
    client_id: int | None = None,
    consultant_id: int | None = None,
) -> EntryFilter:
    if start_date and end_date and end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not precede start_date")
    return EntryFilter(start_date=start_date, end_date=end_date, client_id=client_id, consultant_id=consultant_id)


def _filter_labels(entry_filter: EntryFilter, repo: SqlRepository) -> dict[str, str]:
    labels = {
        "Period": f"{entry_filter.start_date or 'start'} to {entry_filter.end_date or 'today'}",
    }
    if entry_filter.client_id is not None:
        client = repo.clients.get(entry_filter.client_id)
        labels["Client"] = client.name if client else str(entry_filter.client_id)
    if entry_filter.consultant_id is not None:
        consultant = repo.consultants.get(entry_filter.consultant_id)
        labels["Consultant"] = consultant.name if consultant else str(entry_filter.consultant_id)
    return labels


@router.get("/data", response_model=ReportDataOut)
def report_data(entry_filter: EntryFilter = Depends(report_filter), repo: SqlRepository = Depends(get_repository)):
    entries = load_entries(repo, entry_filter)
    directory = load_directory(repo)
    return {"summary": report_summary(entries, directory), "rows": entry_rows(entries, directory)}


@router.get("/analytics", response_model=AnalyticsOut)
def report_analytics(
    entry_filter: EntryFilter = Depends(report_filter), repo: SqlRepository = Depends(get_repository)
):
    return analytics(load_entries(repo, entry_filter), load_directory(repo))


@router.get("/export")
def export_report_csv(
    report_type: str = "entry-detail",
    entry_filter: EntryFilter = Depends(report_filter),
    repo: SqlRepository = Depends(get_repository),
) -> Response:
    request = ReportRequest(
        report_type=report_type,
        start_date=entry_filter.start_date,
        end_date=entry_filter.end_date,
        client_id=entry_filter.client_id,
        consultant_id=entry_filter.consultant_id,
    )
    try:
        columns = report_columns(report_type)
        rows = build_report(request, load_entries(repo, entry_filter), load_directory(repo))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    reports_exported.add(1, {"format": "csv", "report": report_type})
    logger.info("report_exported", format="csv", report=report_type, rows=len(rows))
    return Response(
        content=render_csv(rows, columns=columns),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{report_type}.csv"'},
    )


@router.get("/pdf")
def export_report_pdf(
    entry_filter: EntryFilter = Depends(report_filter), repo: SqlRepository = Depends(get_repository)
) -> Response:
    entries = load_entries(repo, entry_filter)
    directory = load_directory(repo)
    pdf = render_report_pdf(
        "Activity Report",
        entry_rows(entries, directory),
        summary=report_summary(entries, directory),
        filters=_filter_labels(entry_filter, repo),
    )
    reports_exported.add(1, {"format": "pdf", "report": "activity"})
    logger.info("report_exported", format="pdf", report="activity", entries=len(entries))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="activity-report.pdf"'},
    )
