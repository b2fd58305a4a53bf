from datetime import date
from decimal import Decimal

import pytest

from timebill_reports.exporter import (
    _money,
    export_report,
    render_billing_pdf,
    render_csv,
    render_report_pdf,
)
from timebill_reports.reports import (
    AggregationRow,
    BillingLine,
    BillingStatement,
    EntryRow,
    ReportSummary,
    report_columns,
)


def entry_row(day, client, hours, value, description=""):
    return EntryRow(
        date=day,
        client=client,
        consultant="Leon",
        service="Support",
        project="No project",
        description=description,
        start="08:00",
        end="17:00",
        break_start="12:00",
        break_end="13:00",
        hours=Decimal(hours),
        value=Decimal(value),
        completed="No",
        location="",
    )


ROWS = [
    entry_row(date(2024, 12, 1), "SkyStone", "8", "1136"),
    entry_row(date(2024, 12, 2), "Ação & Cia", "7.5", "1065", description="x"),
]
ENTRY_HEADER = (
    "date;client;consultant;service;project;description;start;end;"
    "break_start;break_end;hours;value;completed;location"
)


def test_csv_uses_semicolons_and_a_byte_order_mark():
    content = render_csv(ROWS)

    assert content.startswith(b"\xef\xbb\xbf")
    lines = content.decode("utf-8-sig").splitlines()
    assert lines[0] == ENTRY_HEADER
    assert lines[1] == "2024-12-01;SkyStone;Leon;Support;No project;;08:00;17:00;12:00;13:00;8.00;1136.00;No;"
    assert lines[2].startswith("2024-12-02;Ação & Cia;Leon;Support;No project;x;")


def test_csv_of_no_rows_keeps_the_header():
    content = render_csv([], columns=report_columns("entry-detail"))

    assert content.startswith(b"\xef\xbb\xbf")
    assert content.decode("utf-8-sig").splitlines() == [ENTRY_HEADER]


def test_csv_writes_only_the_requested_columns():
    rows = [
        AggregationRow(group="client", label="SkyStone", hours=Decimal("24.00"), value=Decimal("3408.00"), entries=3)
    ]

    content = render_csv(rows, columns=["label", "value"])

    assert content.decode("utf-8-sig").splitlines() == ["label;value", "SkyStone;3408.00"]


def test_export_report_writes_csv_and_pdf(tmp_path):
    csv_path = export_report(ROWS, tmp_path / "out" / "report.csv", title="entry-detail")
    pdf_path = export_report(ROWS, tmp_path / "report.pdf", title="entry-detail")

    assert csv_path.read_bytes().startswith(b"\xef\xbb\xbf")
    assert pdf_path.read_bytes().startswith(b"%PDF")


def test_export_report_of_no_rows_writes_the_header(tmp_path):
    columns = report_columns("client-summary")

    csv_path = export_report([], tmp_path / "empty.csv", title="client-summary", columns=columns)

    assert csv_path.read_text(encoding="utf-8-sig").splitlines() == ["group;label;hours;value;entries"]


def test_missing_amounts_render_blank():
    assert _money(None) == ""
    assert _money(Decimal("3408")) == "3,408.00"


def test_export_report_rejects_other_formats(tmp_path):
    with pytest.raises(ValueError, match="Unsupported export format"):
        export_report(ROWS, tmp_path / "report.xlsx", title="entry-detail")


def test_report_pdf_renders_summary_and_escapes_text():
    summary = ReportSummary(
        total_hours=Decimal("15.50"),
        total_value=Decimal("2201.00"),
        total_entries=2,
        total_clients=2,
        client_breakdown=[],
    )

    pdf = render_report_pdf("Activity Report", ROWS, summary=summary, filters={"Client": "<All> & more"})

    assert pdf.startswith(b"%PDF")


def test_report_pdf_without_rows():
    assert render_report_pdf("Activity Report", []).startswith(b"%PDF")


def test_billing_pdf():
    statement = BillingStatement(
        client_name="SkyStone",
        client_tax_id="12.345.678/0001-90",
        client_email="contato@skystone.com.br",
        start_date=date(2024, 12, 1),
        end_date=date(2024, 12, 31),
        mode="synthetic",
        lines=[BillingLine("ERP rollout", "IT - CONS", Decimal("8.00"), Decimal("1136.00"))],
        total_hours=Decimal("8.00"),
        total_value=Decimal("1136.00"),
    )

    assert render_billing_pdf(statement).startswith(b"%PDF")
