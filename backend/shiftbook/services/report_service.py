# Overview: Shift report archive queries and printable (CSV) rendering of sheets and reports.

from __future__ import annotations

import csv
import io

from flask import current_app

from ..extensions import db
from ..models import ShiftReport
from shiftbook.time_utils import to_utc_z
from . import catalog_service, reconciliation
from .reconciliation import ShiftSummary


class ReportNotFoundError(LookupError):
    """Raised when a shift report id does not exist."""
    pass


SHEET_HEADER = ["Item", "Category", "Unit", "Beg", "Prod", "BO", "Total", "End", "Sold", "Price", "Amount"]


def _money(cents: int | None) -> str:
    if cents is None:
        return ""
    return f"{cents / 100:.2f}"


def list_reports(limit: int | None = None) -> list[ShiftReport]:
    """Most recent reports first."""
    if limit is None:
        limit = current_app.config.get("REPORT_HISTORY_LIMIT", 20)
    limit = max(1, min(int(limit), 500))
    return (
        db.session.query(ShiftReport)
        .order_by(ShiftReport.end_time.desc(), ShiftReport.id.desc())
        .limit(limit)
        .all()
    )


def get_report(report_id: int) -> ShiftReport:
    report = db.session.get(ShiftReport, report_id)
    if report is None:
        raise ReportNotFoundError(f"Shift report {report_id} not found")
    return report


def _write_sheet_rows(writer, rows) -> None:
    writer.writerow(SHEET_HEADER)
    for row in rows:
        writer.writerow([
            row.name, row.category, row.unit,
            row.beg, row.prod, row.bo, row.total,
            "" if row.end is None else row.end,
            row.sold, _money(row.selling_price_cents), _money(row.amount_cents),
        ])


def render_inventory_sheet_csv(shift, summary: ShiftSummary) -> str:
    """
    Printable inventory sheet for a live shift.

    Uncounted items print an empty End cell; their Sold and Amount are 0.
    """
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow([current_app.config.get("BUSINESS_NAME", ""), "Daily Shift Report"])
    writer.writerow(["Shift", shift.id, "Status", shift.status])
    writer.writerow(["Start", to_utc_z(shift.start_time) or "", "End", to_utc_z(shift.end_time) or ""])
    writer.writerow([])
    _write_sheet_rows(writer, summary.rows)
    writer.writerow([])
    writer.writerow(["Total revenue", _money(summary.total_revenue_cents)])
    writer.writerow(["Total cost", _money(summary.total_cost_cents)])
    writer.writerow(["Estimated profit", _money(summary.estimated_profit_cents)])
    writer.writerow(["Discharged units", summary.discharges.count])
    writer.writerow(["Discharge loss", _money(summary.discharges.cost_cents)])
    return buf.getvalue()


def render_report_csv(report: ShiftReport) -> str:
    """
    Printable archive copy of a closed shift.

    The item table is rebuilt from the closed shift's counts and ledgers, so
    it carries the same columns as the live inventory sheet. Deactivated
    items are included when the shift touched them. Unit prices are the
    catalog's current prices; the totals below the table are the values
    archived at close.
    """
    shift = report.shift
    touched = set(report.inventory_start) | set(report.inventory_end)
    touched.update(e.item_id for e in shift.production)
    touched.update(e.item_id for e in shift.discharges)
    catalog = catalog_service.list_items(include_inactive=True)
    items = [item for item in catalog if item.id in touched]
    names = {item.id: item.name for item in catalog}

    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow([current_app.config.get("BUSINESS_NAME", ""), "Shift Report"])
    writer.writerow(["Report", report.id, "Shift", report.shift_id])
    writer.writerow(["Operator", report.user_display_name or "Unknown"])
    writer.writerow(["Start", to_utc_z(report.start_time) or "", "End", to_utc_z(report.end_time) or ""])
    writer.writerow(["Opening cash", _money(report.opening_cash_cents)])
    writer.writerow(["Closing cash", _money(report.closing_cash_cents)])
    writer.writerow([])
    _write_sheet_rows(writer, reconciliation.inventory_sheet(items, shift))
    writer.writerow([])
    writer.writerow(["Units produced", report.total_produced])
    writer.writerow(["Units sold", report.total_sold])
    writer.writerow(["Units discharged", report.total_discharged])
    writer.writerow(["Total revenue", _money(report.total_revenue_cents)])
    writer.writerow(["Total cost", _money(report.total_cost_cents)])
    writer.writerow(["Estimated profit", _money(report.estimated_profit_cents)])
    writer.writerow(["Discharge loss", _money(report.discharge_cost_cents)])
    writer.writerow([])
    writer.writerow(["Production Log"])
    writer.writerow(["Item", "Quantity", "Time"])
    for entry in shift.production:
        writer.writerow([names.get(entry.item_id, entry.item_id), entry.quantity, to_utc_z(entry.created_at) or ""])
    return buf.getvalue()
