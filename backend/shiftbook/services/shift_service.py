# Overview: Shift lifecycle controller and ledger operations; every write is committed before it is announced.

"""
Shift Lifecycle and Ledger Service

WHY: The shift is the unit of accountability for the bakery. It gates which
mutations are legal and carries the physical counts that revenue is
reconciled from.

LIFECYCLE:
- CLOSED -> OPEN via start_shift()
- OPEN -> CLOSED via end_shift(), which also writes the ShiftReport
- Any other transition raises InvalidStateError; writes to a closed shift
  raise ShiftClosedError. Nothing is silently ignored.

CLOSING PROTOCOL (two steps, not enforced here):
1. prefill_ending_inventory() suggests ending counts from the logs
2. operator edits counts with set_ending_inventory(), then end_shift()
end_shift() may be called directly; uncounted items then recognize no revenue.

DESIGN PRINCIPLES:
- One current shift: the most recent row, created CLOSED on first use
- Write-through: each command commits (with retry) before it returns and
  raises PersistenceError if the write cannot be made durable
- One change notification per successful command
- Single writer assumed; concurrent terminals are last-write-wins
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import (
    Shift, ShiftInventoryCount, ShiftReport,
    ProductionEntry, SaleEntry, DischargeEntry,
    SHIFT_STATUS_OPEN, SHIFT_STATUS_CLOSED, DISCHARGE_REASONS,
)
from ..events import publish_change
from ..validation import ValidationError, parse_cents, parse_choice, parse_quantity, parse_text
from shiftbook.time_utils import utcnow
from . import catalog_service, reconciliation
from .concurrency import lock_for_update, run_with_retry


class InvalidStateError(Exception):
    """Raised when a transition is requested in the wrong shift status."""
    pass


class ShiftClosedError(InvalidStateError):
    """Raised when a ledger or count mutation targets a closed shift."""
    pass


class EntryNotFoundError(LookupError):
    """Raised when a ledger entry id is not part of the current shift."""
    pass


# Ledger kind -> (model, Shift collection attribute, event prefix)
LEDGER_KINDS = {
    "production": (ProductionEntry, "production_entries", "production"),
    "sales": (SaleEntry, "sale_entries", "sale"),
    "discharges": (DischargeEntry, "discharge_entries", "discharge"),
}

DEFAULT_DISCHARGE_REASON = "Other"


def _ledger(kind: str):
    try:
        return LEDGER_KINDS[kind]
    except KeyError:
        raise ValidationError(f"Unknown ledger kind: {kind}") from None


def _user_id(user) -> int | None:
    return user.id if user is not None else None


# =============================================================================
# CURRENT SHIFT
# =============================================================================

def get_current_shift() -> Shift:
    """The current shift, created CLOSED (no times, empty ledgers) on first use."""
    shift = db.session.query(Shift).order_by(Shift.id.desc()).first()
    if shift is not None:
        return shift

    def _op():
        placeholder = Shift(status=SHIFT_STATUS_CLOSED, opening_cash_cents=0)
        db.session.add(placeholder)
        db.session.commit()
        return placeholder

    return run_with_retry(_op)


def _locked_current_shift() -> Shift:
    shift = lock_for_update(db.session.query(Shift).order_by(Shift.id.desc())).first()
    return shift if shift is not None else get_current_shift()


def _require_open(shift: Shift) -> None:
    if not shift.is_open:
        raise ShiftClosedError("Shift is closed. Start a new shift first.")


# =============================================================================
# LIFECYCLE
# =============================================================================

def _validate_inventory_map(counts: dict) -> dict[str, int]:
    if not isinstance(counts, dict):
        raise ValidationError("inventory_start must be an object of item_id -> count")
    cleaned = {}
    for item_id, count in counts.items():
        item = catalog_service.get_item(item_id)
        cleaned[item.id] = parse_quantity(count, field=f"inventory_start[{item_id}]", allow_zero=True)
    return cleaned


def start_shift(
    *,
    opening_cash_cents=0,
    inventory_start: dict | None = None,
    user=None,
) -> Shift:
    """
    Open a new shift, replacing the current one.

    Beginning counts are carried forward item by item from the previous
    shift's ending counts; items without one (new items, uncounted items,
    first shift) start at 0. inventory_start overrides individual items with
    counts the operator verified on the shelf.

    Raises:
        InvalidStateError: a shift is already open
        ValidationError / UnknownItemError: bad opening cash or overrides
    """
    def _op():
        previous = _locked_current_shift()
        if previous.is_open:
            raise InvalidStateError(f"Shift {previous.id} is already open")
        opening = parse_cents(opening_cash_cents, field="opening_cash_cents")
        overrides = _validate_inventory_map(inventory_start) if inventory_start is not None else {}

        carried = previous.inventory_end
        shift = Shift(
            status=SHIFT_STATUS_OPEN,
            start_time=utcnow(),
            opening_cash_cents=opening,
            opened_by_user_id=_user_id(user),
        )
        for item in catalog_service.list_items():
            shift.inventory_counts.append(ShiftInventoryCount(
                item_id=item.id,
                beginning_quantity=overrides.get(item.id, carried.get(item.id, 0)),
                ending_quantity=None,
            ))
        db.session.add(shift)
        db.session.commit()
        return shift

    shift = run_with_retry(_op)
    current_app.logger.info("Shift %s opened (opening cash %s cents)", shift.id, shift.opening_cash_cents)
    publish_change("shift.started", shift_id=shift.id)
    return shift


def _count_row(shift: Shift, item_id: str) -> ShiftInventoryCount:
    row = shift.count_for(item_id)
    if row is None:
        # Item added to the catalog after the shift opened
        row = ShiftInventoryCount(item_id=item_id, beginning_quantity=0, ending_quantity=None)
        shift.inventory_counts.append(row)
    return row


def set_ending_inventory(item_id: str, count) -> ShiftInventoryCount:
    """
    Record the physical ending count for one item. count=None unsets it.

    Raises:
        ShiftClosedError, UnknownItemError, InvalidQuantityError
    """
    def _op():
        shift = get_current_shift()
        _require_open(shift)
        item = catalog_service.get_item(item_id)
        qty = None if count is None else parse_quantity(count, field="count", allow_zero=True)
        row = _count_row(shift, item.id)
        row.ending_quantity = qty
        db.session.commit()
        return row

    row = run_with_retry(_op)
    publish_change("inventory.end_set", shift_id=row.shift_id, item_id=row.item_id)
    return row


def prefill_ending_inventory() -> dict[str, int]:
    """
    Overwrite every item's ending count with the expected value
    max(0, beg + produced - sold_logged - discharged). Does not close the shift.

    Idempotent while the ledgers are unchanged.

    Raises:
        ShiftClosedError: no open shift
    """
    def _op():
        shift = get_current_shift()
        _require_open(shift)
        expected = reconciliation.expected_ending_inventory(catalog_service.list_items(), shift)
        for item_id, qty in expected.items():
            _count_row(shift, item_id).ending_quantity = qty
        db.session.commit()
        return shift, expected

    shift, expected = run_with_retry(_op)
    publish_change("inventory.prefilled", shift_id=shift.id)
    return expected


def end_shift(closing_cash_cents, *, user=None) -> ShiftReport:
    """
    Close the current shift and archive its ShiftReport in the same commit.

    Raises:
        InvalidStateError: no open shift
        ValidationError: bad closing cash
    """
    closing = parse_cents(closing_cash_cents, field="closing_cash_cents")

    def _op():
        shift = _locked_current_shift()
        if not shift.is_open:
            raise InvalidStateError("No open shift to end")

        summary = reconciliation.summarize(catalog_service.list_items(), shift)

        shift.status = SHIFT_STATUS_CLOSED
        shift.end_time = utcnow()
        shift.closing_cash_cents = closing
        shift.closed_by_user_id = _user_id(user)

        report = ShiftReport(
            shift=shift,
            user_id=_user_id(user),
            user_display_name=user.label if user is not None else None,
            start_time=shift.start_time,
            end_time=shift.end_time,
            opening_cash_cents=shift.opening_cash_cents,
            closing_cash_cents=closing,
            inventory_start=dict(shift.inventory_start),
            inventory_end=dict(shift.inventory_end),
            total_produced=summary.total_produced,
            total_sold=summary.total_sold,
            total_discharged=summary.discharges.count,
            total_revenue_cents=summary.total_revenue_cents,
            total_cost_cents=summary.total_cost_cents,
            discharge_cost_cents=summary.discharges.cost_cents,
        )
        db.session.add(report)
        db.session.commit()
        return report

    report = run_with_retry(_op)
    current_app.logger.info(
        "Shift %s closed, revenue %s cents, report %s",
        report.shift_id, report.total_revenue_cents, report.id,
    )
    publish_change("shift.ended", shift_id=report.shift_id, report_id=report.id)
    return report


# =============================================================================
# LEDGER
# =============================================================================

def _discharge_fields(reason, notes) -> dict:
    return {
        "reason": parse_choice(reason, DISCHARGE_REASONS, field="reason"),
        "notes": parse_text(notes, field="notes", max_length=1000, required=False),
    }


def _add_entry(kind: str, item_id: str, quantity, **extra):
    model, collection, event = _ledger(kind)

    def _op():
        shift = get_current_shift()
        _require_open(shift)
        item = catalog_service.get_item(item_id)
        qty = parse_quantity(quantity)
        fields = _discharge_fields(**extra) if model is DischargeEntry else {}
        entry = model(item_id=item.id, quantity=qty, created_at=utcnow(), **fields)
        getattr(shift, collection).append(entry)
        db.session.commit()
        return entry

    entry = run_with_retry(_op)
    publish_change(f"{event}.added", shift_id=entry.shift_id, item_id=entry.item_id, entry_id=entry.id)
    return entry


def add_production(item_id: str, quantity) -> ProductionEntry:
    return _add_entry("production", item_id, quantity)


def add_sale(item_id: str, quantity) -> SaleEntry:
    return _add_entry("sales", item_id, quantity)


def add_discharge(item_id: str, quantity, reason, notes: str | None = None) -> DischargeEntry:
    return _add_entry("discharges", item_id, quantity, reason=reason, notes=notes)


def _set_item_quantity(kind: str, item_id: str, quantity, **extra):
    """
    Collapse all of an item's entries of one kind into a single net entry,
    or delete them when quantity is 0. Returns the new entry or None.
    """
    model, collection, event = _ledger(kind)

    def _op():
        shift = get_current_shift()
        _require_open(shift)
        item = catalog_service.get_item(item_id)
        qty = parse_quantity(quantity, allow_zero=True)

        entries = getattr(shift, collection)
        existing = [e for e in entries if e.item_id == item.id]

        fields = {}
        if model is DischargeEntry and qty > 0:
            latest = existing[-1] if existing else None
            reason = extra.get("reason")
            if reason is None:
                reason = latest.reason if latest else DEFAULT_DISCHARGE_REASON
            notes = extra.get("notes")
            if notes is None and latest is not None:
                notes = latest.notes
            fields = _discharge_fields(reason, notes)

        for e in existing:
            entries.remove(e)

        entry = None
        if qty > 0:
            entry = model(item_id=item.id, quantity=qty, created_at=utcnow(), **fields)
            entries.append(entry)
        db.session.commit()
        return shift.id, item.id, entry

    shift_id, resolved_item_id, entry = run_with_retry(_op)
    publish_change(f"{event}.set", shift_id=shift_id, item_id=resolved_item_id)
    return entry


def set_production_quantity(item_id: str, quantity) -> ProductionEntry | None:
    return _set_item_quantity("production", item_id, quantity)


def set_sales_quantity(item_id: str, quantity) -> SaleEntry | None:
    return _set_item_quantity("sales", item_id, quantity)


def set_discharge_quantity(
    item_id: str, quantity, reason=None, notes: str | None = None,
) -> DischargeEntry | None:
    return _set_item_quantity("discharges", item_id, quantity, reason=reason, notes=notes)


def _find_entry(shift: Shift, kind: str, entry_id: int):
    _, collection, _ = _ledger(kind)
    for entry in getattr(shift, collection):
        if entry.id == entry_id:
            return entry
    raise EntryNotFoundError(f"No {kind} entry {entry_id} in the current shift")


def update_entry(kind: str, entry_id: int, *, quantity=None, reason=None, notes=None):
    """
    Edit one ledger entry in place. Discharge entries also accept reason/notes.

    Raises:
        ShiftClosedError, EntryNotFoundError, InvalidQuantityError, ValidationError
    """
    model, _, event = _ledger(kind)

    def _op():
        shift = get_current_shift()
        _require_open(shift)
        entry = _find_entry(shift, kind, entry_id)
        if quantity is not None:
            entry.quantity = parse_quantity(quantity)
        if model is DischargeEntry:
            if reason is not None:
                entry.reason = parse_choice(reason, DISCHARGE_REASONS, field="reason")
            if notes is not None:
                entry.notes = parse_text(notes, field="notes", max_length=1000, required=False)
        db.session.commit()
        return entry

    entry = run_with_retry(_op)
    publish_change(f"{event}.updated", shift_id=entry.shift_id, item_id=entry.item_id, entry_id=entry.id)
    return entry


def remove_entry(kind: str, entry_id: int) -> None:
    """
    Delete one ledger entry from the current shift.

    Raises:
        ShiftClosedError, EntryNotFoundError
    """
    _, collection, event = _ledger(kind)

    def _op():
        shift = get_current_shift()
        _require_open(shift)
        entry = _find_entry(shift, kind, entry_id)
        item_id = entry.item_id
        getattr(shift, collection).remove(entry)
        db.session.commit()
        return shift.id, item_id

    shift_id, item_id = run_with_retry(_op)
    publish_change(f"{event}.removed", shift_id=shift_id, item_id=item_id, entry_id=entry_id)


# =============================================================================
# QUERIES
# =============================================================================

def current_summary() -> tuple[Shift, reconciliation.ShiftSummary]:
    """Current shift plus its freshly recomputed reconciliation summary."""
    shift = get_current_shift()
    return shift, reconciliation.summarize(catalog_service.list_items(), shift)
