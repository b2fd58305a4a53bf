from __future__ import annotations

import csv
import io
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import IO, Any, Dict, Iterable, List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .reports import BillingStatement, ReportRow, ReportSummary

CSV_DELIMITER = ";"
PDF_DETAIL_COLUMNS = ["date", "client", "consultant", "service", "project", "hours", "value", "completed"]


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    return str(value)


def _money(value: Decimal | None) -> str:
    if value is None:
        return ""
    return f"{value:,.2f}"


def _columns(rows: List[Dict[str, Any]], columns: Optional[Sequence[str]]) -> List[str]:
    if columns:
        return list(columns)
    return list(rows[0]) if rows else []


def write_csv(
    rows: Iterable[ReportRow],
    handle: IO[str],
    columns: Optional[Sequence[str]] = None,
    delimiter: str = CSV_DELIMITER,
) -> None:
    """Write a header and one line per row; the header is written even when ``rows`` is empty."""
    records = [asdict(row) for row in rows]
    fieldnames = _columns(records, columns)
    if not fieldnames:
        return
    writer = csv.DictWriter(handle, fieldnames=fieldnames, delimiter=delimiter)
    writer.writeheader()
    for record in records:
        writer.writerow({key: _stringify(record[key]) for key in fieldnames})


def render_csv(
    rows: Iterable[ReportRow], columns: Optional[Sequence[str]] = None, delimiter: str = CSV_DELIMITER
) -> bytes:
    """CSV bytes with a UTF-8 byte order mark so spreadsheets detect the encoding."""
    buffer = io.StringIO()
    write_csv(rows, buffer, columns=columns, delimiter=delimiter)
    return buffer.getvalue().encode("utf-8-sig")


def export_csv(rows: Iterable[ReportRow], output_path: Path, columns: Optional[Sequence[str]] = None) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(render_csv(rows, columns=columns))
    return output_path


def _styled_table(data: List[List[Any]], col_widths: Sequence[float] | None = None) -> Table:
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.whitesmoke),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 4),
                ("RIGHTPADDING", (0, 0), (-1, -1), 4),
                ("TOPPADDING", (0, 0), (-1, -1), 3),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ]
        )
    )
    return table


def _rows_table(rows: List[ReportRow], columns: Sequence[str] | None = None) -> Table:
    records = [asdict(row) for row in rows]
    headers = _columns(records, columns)
    data: List[List[Any]] = [[h.replace("_", " ").title() for h in headers]]
    for record in records:
        data.append([_stringify(record.get(h)) for h in headers])
    return _styled_table(data)


def _build(story: List[Any], pagesize=letter) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=pagesize,
        leftMargin=0.6 * inch,
        rightMargin=0.6 * inch,
        topMargin=0.6 * inch,
        bottomMargin=0.6 * inch,
    )
    doc.build(story)
    return buffer.getvalue()


def render_report_pdf(
    title: str,
    rows: Iterable[ReportRow],
    summary: ReportSummary | None = None,
    filters: Dict[str, str] | None = None,
) -> bytes:
    """Printable activity report: filters, summary, client breakdown and entry details."""
    styles = getSampleStyleSheet()
    header_style = ParagraphStyle("report_header", parent=styles["Heading3"], fontSize=11)
    body_style = ParagraphStyle("report_body", parent=styles["Normal"], fontSize=9.5)
    rows = list(rows)

    story: List[Any] = [Paragraph(title, styles["Title"])]
    for label, value in (filters or {}).items():
        story.append(Paragraph(f"<b>{escape(label)}:</b> {escape(value)}", body_style))
    story.append(HRFlowable(width="100%"))
    story.append(Spacer(1, 8))

    if summary is not None:
        story.append(Paragraph("Summary", header_style))
        story.append(
            _styled_table(
                [
                    ["Total hours", "Total value", "Entries", "Clients"],
                    [
                        _money(summary.total_hours),
                        _money(summary.total_value),
                        str(summary.total_entries),
                        str(summary.total_clients),
                    ],
                ]
            )
        )
        story.append(Spacer(1, 10))
        if summary.client_breakdown:
            story.append(Paragraph("By client", header_style))
            breakdown = [["Client", "Hours", "Value", "Entries"]]
            for group in summary.client_breakdown:
                breakdown.append([group.label, _money(group.hours), _money(group.value), str(group.entries)])
            story.append(_styled_table(breakdown, col_widths=[3.5 * inch, 1.2 * inch, 1.4 * inch, 0.9 * inch]))
            story.append(Spacer(1, 10))

    story.append(Paragraph("Activities", header_style))
    if rows:
        present = asdict(rows[0])
        columns = [c for c in PDF_DETAIL_COLUMNS if c in present] or None
        story.append(_rows_table(rows, columns))
    else:
        story.append(Paragraph("No entries in the selected period.", body_style))

    return _build(story, pagesize=landscape(letter))


def render_billing_pdf(statement: BillingStatement) -> bytes:
    styles = getSampleStyleSheet()
    header_style = ParagraphStyle("billing_header", parent=styles["Heading3"], fontSize=11)
    body_style = ParagraphStyle("billing_body", parent=styles["Normal"], fontSize=9.5)

    story: List[Any] = [Paragraph("BILLING STATEMENT", styles["Title"])]
    story.append(
        Paragraph(
            (
                f"<b>{escape(statement.client_name)}</b><br/>Tax ID: {escape(statement.client_tax_id)}<br/>"
                f"{escape(statement.client_email)}<br/>"
                f"Period: {statement.start_date.isoformat()} to {statement.end_date.isoformat()}"
            ),
            body_style,
        )
    )
    story.append(HRFlowable(width="100%"))
    story.append(Spacer(1, 8))

    heading = "Activity detail" if statement.mode == "detailed" else "Summary by project"
    story.append(Paragraph(heading, header_style))
    lines = [["Item", "Detail", "Entries", "Hours", "Value"]]
    for line in statement.lines:
        lines.append(
            [
                Paragraph(escape(line.description), body_style),
                Paragraph(escape(line.detail), body_style),
                str(line.entries),
                _money(line.hours),
                _money(line.value),
            ]
        )
    lines.append(["Total", "", "", _money(statement.total_hours), _money(statement.total_value)])
    table = _styled_table(lines, col_widths=[1.9 * inch, 2.6 * inch, 0.6 * inch, 0.8 * inch, 1.0 * inch])
    table.setStyle(
        TableStyle(
            [
                ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("LINEABOVE", (0, -1), (-1, -1), 0.75, colors.black),
            ]
        )
    )
    story.append(table)
    return _build(story)


def export_pdf(
    rows: Iterable[ReportRow], output_path: Path, title: str, columns: Optional[Sequence[str]] = None
) -> Path:
    rows = list(rows)
    styles = getSampleStyleSheet()
    story: List[Any] = [Paragraph(title, styles["Title"]), Spacer(1, 8)]
    if rows:
        story.append(_rows_table(rows, columns))
    else:
        story.append(Paragraph("No rows returned", styles["Normal"]))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(_build(story, pagesize=landscape(letter)))
    return output_path


def export_report(
    rows: Iterable[ReportRow], output_path: Path, title: str, columns: Optional[Sequence[str]] = None
) -> Path:
    if output_path.suffix.lower() == ".csv":
        return export_csv(rows, output_path, columns=columns)
    if output_path.suffix.lower() == ".pdf":
        return export_pdf(rows, output_path, title=title, columns=columns)
    raise ValueError("Unsupported export format. Use .csv or .pdf")
