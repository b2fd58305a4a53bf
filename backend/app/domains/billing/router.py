from __future__ import annotations

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, model_validator

from app.api.deps import get_repository
from app.core.logging import get_logger
from app.core.observability import reports_exported
from app.repositories.sql import SqlRepository
from timebill.aggregation import EntryFilter
from timebill_reports.data import load_directory, load_entries
from timebill_reports.exporter import render_billing_pdf
from timebill_reports.reports import billing_statement

router = APIRouter(prefix="/billing", tags=["billing"])
logger = get_logger(__name__)


class BillingRequest(BaseModel):
    client_id: int
    start_date: date
    end_date: date
    entry_ids: list[int] | None = None
    mode: Literal["detailed", "synthetic"] = "detailed"

    @model_validator(mode="after")
    def check_period(self) -> "BillingRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


@router.post("/pdf")
def billing_pdf(payload: BillingRequest, repo: SqlRepository = Depends(get_repository)) -> Response:
    """Render a client billing statement; ``entry_ids`` narrows the period to selected entries."""
    client = repo.clients.get(payload.client_id)
    if client is None:
        raise HTTPException(status_code=404, detail="Client not found")

    entries = load_entries(
        repo, EntryFilter(start_date=payload.start_date, end_date=payload.end_date, client_id=client.id)
    )
    if payload.entry_ids is not None:
        selected = set(payload.entry_ids)
        entries = [e for e in entries if e.id in selected]

    statement = billing_statement(
        client, entries, load_directory(repo), payload.start_date, payload.end_date, mode=payload.mode
    )
    pdf = render_billing_pdf(statement)
    reports_exported.add(1, {"format": "pdf", "report": "billing"})
    logger.info("billing_exported", client_id=client.id, mode=payload.mode, lines=len(statement.lines))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="billing-{client.code}.pdf"'},
    )
