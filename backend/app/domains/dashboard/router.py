from datetime import date

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_repository
from app.domains.reporting.schemas import DashboardStatsOut
from app.repositories.sql import SqlRepository
from timebill_reports.data import load_directory, month_bounds
from timebill_reports.reports import dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsOut)
def get_dashboard_stats(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=1900),
    repo: SqlRepository = Depends(get_repository),
):
    """Hours and revenue for one calendar month, defaulting to the current one."""
    today = date.today()
    month = month or today.month
    year = year or today.year
    entries = repo.entries_between(*month_bounds(month, year))
    return dashboard_stats(entries, load_directory(repo), month=month, year=year)
