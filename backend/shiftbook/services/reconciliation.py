# Overview: Pure derivation of per-item inventory rows and shift totals from a catalog and a shift.

"""
Shift inventory reconciliation.

WHY: Revenue is recognized from physical counts, not from the POS log.
For every catalog item:

    beg    = inventory_start[item] or 0
    prod   = sum of production quantities
    bo     = sum of discharge quantities
    total  = beg + prod
    end    = inventory_end[item]          (None while uncounted)
    sold   = max(0, total - end - bo)     if end is set, else 0
    amount = sold * selling price

The sale ledger is a second, independent channel. It feeds the live POS
display and sales_data() for charting, and the prefill suggestion for ending
counts. It never feeds total_revenue().

DESIGN:
- Everything here is a pure function of (items, shift). No database access,
  no caching; callers recompute on every read.
- Nothing raises on missing data. Absent counts are zero, except that an
  unset ending count yields sold = 0.
- Inputs are duck-typed: items need id, name, category, unit,
  cost_price_cents, selling_price_cents; shifts need production, sales,
  discharges (entries with item_id and quantity), inventory_start and
  inventory_end (mappings of item_id -> int).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Mapping


@dataclass(frozen=True)
class InventoryRow:
    item_id: str
    name: str
    category: str
    unit: str
    selling_price_cents: int
    beg: int
    prod: int
    bo: int
    total: int
    end: int | None
    sold: int
    amount_cents: int

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "selling_price_cents": self.selling_price_cents,
            "beg": self.beg,
            "prod": self.prod,
            "bo": self.bo,
            "total": self.total,
            "end": self.end,
            "sold": self.sold,
            "amount_cents": self.amount_cents,
        }


@dataclass(frozen=True)
class DischargeTotals:
    count: int
    cost_cents: int

    def to_dict(self) -> dict:
        return {"count": self.count, "cost_cents": self.cost_cents}


@dataclass(frozen=True)
class ShiftSummary:
    rows: list[InventoryRow]
    total_revenue_cents: int
    total_cost_cents: int
    discharges: DischargeTotals
    total_produced: int
    total_sold: int
    total_sales_logged: int
    sales_data: list[dict] = field(default_factory=list)

    @property
    def estimated_profit_cents(self) -> int:
        return self.total_revenue_cents - self.total_cost_cents

    def to_dict(self) -> dict:
        return {
            "rows": [r.to_dict() for r in self.rows],
            "total_revenue_cents": self.total_revenue_cents,
            "total_cost_cents": self.total_cost_cents,
            "estimated_profit_cents": self.estimated_profit_cents,
            "total_discharges": self.discharges.to_dict(),
            "total_produced": self.total_produced,
            "total_sold": self.total_sold,
            "total_sales_logged": self.total_sales_logged,
            "total_discharged": self.discharges.count,
            "sales_data": self.sales_data,
        }


def _quantities_by_item(entries: Iterable) -> dict[str, int]:
    totals: dict[str, int] = defaultdict(int)
    for entry in entries or ():
        totals[entry.item_id] += entry.quantity or 0
    return totals


def _mapping(value) -> Mapping[str, int]:
    return value if value is not None else {}


def reconcile_item(*, beg: int, prod: int, bo: int, end: int | None) -> int:
    """Reconciled sold quantity for one item; never negative."""
    if end is None:
        return 0
    return max(0, (beg + prod) - end - bo)


def inventory_sheet(items: Iterable, shift) -> list[InventoryRow]:
    """Per-item inventory rows in catalog order."""
    produced = _quantities_by_item(shift.production)
    discharged = _quantities_by_item(shift.discharges)
    starts = _mapping(shift.inventory_start)
    ends = _mapping(shift.inventory_end)

    rows = []
    for item in items:
        beg = starts.get(item.id) or 0
        prod = produced.get(item.id, 0)
        bo = discharged.get(item.id, 0)
        end = ends.get(item.id)
        sold = reconcile_item(beg=beg, prod=prod, bo=bo, end=end)
        price = item.selling_price_cents or 0
        rows.append(InventoryRow(
            item_id=item.id,
            name=item.name,
            category=item.category,
            unit=item.unit,
            selling_price_cents=price,
            beg=beg,
            prod=prod,
            bo=bo,
            total=beg + prod,
            end=end,
            sold=sold,
            amount_cents=sold * price,
        ))
    return rows


def total_revenue(items: Iterable, shift) -> int:
    return sum(row.amount_cents for row in inventory_sheet(items, shift))


def total_cost(items: Iterable, shift) -> int:
    """
    Production is the cost event: produced units times cost price,
    regardless of what eventually sells. Entries for items missing from
    the catalog contribute nothing.
    """
    cost_by_id = {item.id: item.cost_price_cents or 0 for item in items}
    return sum(
        entry.quantity * cost_by_id.get(entry.item_id, 0)
        for entry in shift.production or ()
    )


def estimated_profit(items: Iterable, shift) -> int:
    # Discharge loss is reported separately and not subtracted here.
    items = list(items)
    return total_revenue(items, shift) - total_cost(items, shift)


def discharge_totals(items: Iterable, shift) -> DischargeTotals:
    cost_by_id = {item.id: item.cost_price_cents or 0 for item in items}
    count = 0
    cost = 0
    for entry in shift.discharges or ():
        count += entry.quantity
        cost += entry.quantity * cost_by_id.get(entry.item_id, 0)
    return DischargeTotals(count=count, cost_cents=cost)


def sales_data(items: Iterable, shift) -> list[dict]:
    """
    Produced vs. sold per item for charting, taken straight from the
    production and sale ledgers. This "sold" is the POS count and is not
    the reconciled figure used for revenue. Items with no activity are
    left out.
    """
    produced = _quantities_by_item(shift.production)
    sold = _quantities_by_item(shift.sales)
    data = []
    for item in items:
        p = produced.get(item.id, 0)
        s = sold.get(item.id, 0)
        if p > 0 or s > 0:
            data.append({"item_id": item.id, "name": item.name, "produced": p, "sold": s})
    return data


def expected_ending_inventory(items: Iterable, shift) -> dict[str, int]:
    """
    Suggested ending counts: what should be left on the shelf if the POS
    log and the discharge log are complete.

        expected_end = max(0, beg + produced - sold_logged - discharged)
    """
    produced = _quantities_by_item(shift.production)
    sold = _quantities_by_item(shift.sales)
    discharged = _quantities_by_item(shift.discharges)
    starts = _mapping(shift.inventory_start)

    expected = {}
    for item in items:
        beg = starts.get(item.id) or 0
        expected[item.id] = max(
            0,
            (beg + produced.get(item.id, 0)) - sold.get(item.id, 0) - discharged.get(item.id, 0),
        )
    return expected


def summarize(items: Iterable, shift) -> ShiftSummary:
    """Everything the dashboard and the closing report need, in one pass over the inputs."""
    items = list(items)
    rows = inventory_sheet(items, shift)
    return ShiftSummary(
        rows=rows,
        total_revenue_cents=sum(r.amount_cents for r in rows),
        total_cost_cents=total_cost(items, shift),
        discharges=discharge_totals(items, shift),
        total_produced=sum(e.quantity for e in shift.production or ()),
        total_sold=sum(r.sold for r in rows),
        total_sales_logged=sum(e.quantity for e in shift.sales or ()),
        sales_data=sales_data(items, shift),
    )
