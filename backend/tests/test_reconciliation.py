"""
Reconciliation engine tests.

Pure functions over plain objects; no app or database needed.

Verifies:
- Sold is derived from counts: max(0, beg + prod - end - bo), 0 while uncounted
- Revenue ignores the sale ledger entirely
- Cost is production times cost price
- Charting data and the prefill suggestion come from the raw ledgers
"""

from types import SimpleNamespace

import pytest

from shiftbook.services import reconciliation


def _item(item_id, name="CHOCO BREAD", cost=200, price=500, category="Bread"):
    return SimpleNamespace(
        id=item_id, name=name, category=category, unit="pcs",
        cost_price_cents=cost, selling_price_cents=price,
    )


def _entry(item_id, quantity):
    return SimpleNamespace(item_id=item_id, quantity=quantity)


def _shift(production=(), sales=(), discharges=(), inventory_start=None, inventory_end=None):
    return SimpleNamespace(
        production=[_entry(*e) for e in production],
        sales=[_entry(*e) for e in sales],
        discharges=[_entry(*e) for e in discharges],
        inventory_start=inventory_start if inventory_start is not None else {},
        inventory_end=inventory_end if inventory_end is not None else {},
    )


BREAD = _item("1")
COFFEE = _item("25", name="HOT COFFEE", cost=300, price=800, category="Beverage")


# =============================================================================
# reconcile_item
# =============================================================================


class TestReconcileItem:

    def test_counted_item(self):
        assert reconciliation.reconcile_item(beg=10, prod=20, bo=2, end=5) == 23

    def test_uncounted_item_sells_nothing(self):
        assert reconciliation.reconcile_item(beg=10, prod=20, bo=2, end=None) == 0

    def test_zero_end_is_a_real_count(self):
        assert reconciliation.reconcile_item(beg=0, prod=12, bo=0, end=0) == 12

    @pytest.mark.parametrize("beg,prod,bo,end", [
        (0, 5, 0, 9),      # counted more than there was
        (2, 3, 10, 0),     # discharged more than there was
        (0, 0, 0, 0),
    ])
    def test_never_negative(self, beg, prod, bo, end):
        assert reconciliation.reconcile_item(beg=beg, prod=prod, bo=bo, end=end) == 0


# =============================================================================
# INVENTORY SHEET / TOTALS
# =============================================================================


class TestInventorySheet:

    def test_worked_example(self):
        shift = _shift(
            production=[("1", 15), ("1", 5)],
            discharges=[("1", 2)],
            inventory_start={"1": 10},
            inventory_end={"1": 5},
        )
        (row,) = reconciliation.inventory_sheet([BREAD], shift)

        assert (row.beg, row.prod, row.bo, row.total, row.end) == (10, 20, 2, 30, 5)
        assert row.sold == 23
        assert row.amount_cents == 11500
        assert reconciliation.total_revenue([BREAD], shift) == 11500
        assert reconciliation.total_cost([BREAD], shift) == 4000
        assert reconciliation.estimated_profit([BREAD], shift) == 7500

    def test_rows_follow_catalog_order(self):
        rows = reconciliation.inventory_sheet([COFFEE, BREAD], _shift())
        assert [r.item_id for r in rows] == ["25", "1"]

    def test_missing_counts_default_to_zero(self):
        (row,) = reconciliation.inventory_sheet([BREAD], _shift(inventory_start=None))
        assert row.beg == 0
        assert row.end is None
        assert row.sold == 0

    def test_none_beginning_count_reads_as_zero(self):
        (row,) = reconciliation.inventory_sheet([BREAD], _shift(inventory_start={"1": None}))
        assert row.beg == 0


class TestRevenueSources:

    def test_sales_ledger_does_not_drive_revenue(self):
        shift = _shift(production=[("1", 15)], sales=[("1", 10)])
        assert reconciliation.total_revenue([BREAD], shift) == 0

        summary = reconciliation.summarize([BREAD], shift)
        assert summary.total_sold == 0
        assert summary.total_sales_logged == 10

    def test_revenue_unchanged_by_sale_edits(self):
        base = dict(production=[("1", 15)], inventory_end={"1": 3})
        few = _shift(sales=[("1", 1)], **base)
        many = _shift(sales=[("1", 40)], **base)
        assert reconciliation.total_revenue([BREAD], few) == reconciliation.total_revenue([BREAD], many) == 6000

    def test_cost_counts_unsold_production(self):
        shift = _shift(production=[("1", 10), ("25", 2)], inventory_end={"1": 10})
        assert reconciliation.total_cost([BREAD, COFFEE], shift) == 10 * 200 + 2 * 300

    def test_cost_ignores_items_missing_from_catalog(self):
        shift = _shift(production=[("1", 1), ("gone", 50)])
        assert reconciliation.total_cost([BREAD], shift) == 200

    def test_discharge_loss_not_subtracted_from_profit(self):
        shift = _shift(
            production=[("1", 10)],
            discharges=[("1", 4)],
            inventory_end={"1": 0},
        )
        assert reconciliation.estimated_profit([BREAD], shift) == 6 * 500 - 10 * 200
        totals = reconciliation.discharge_totals([BREAD], shift)
        assert totals.count == 4
        assert totals.cost_cents == 800


# =============================================================================
# LEDGER-DERIVED VIEWS
# =============================================================================


class TestSalesData:

    def test_only_items_with_activity(self):
        shift = _shift(production=[("1", 15)], sales=[("1", 10)])
        data = reconciliation.sales_data([BREAD, COFFEE], shift)
        assert data == [{"item_id": "1", "name": "CHOCO BREAD", "produced": 15, "sold": 10}]

    def test_sold_is_the_pos_count(self):
        shift = _shift(production=[("1", 20)], sales=[("1", 4)], inventory_end={"1": 0})
        (entry,) = reconciliation.sales_data([BREAD], shift)
        assert entry["sold"] == 4


class TestExpectedEndingInventory:

    def test_formula(self):
        shift = _shift(
            production=[("1", 20)],
            sales=[("1", 12)],
            discharges=[("1", 3)],
            inventory_start={"1": 5},
        )
        assert reconciliation.expected_ending_inventory([BREAD], shift) == {"1": 10}

    def test_clamped_at_zero_and_covers_every_item(self):
        shift = _shift(sales=[("1", 7)])
        assert reconciliation.expected_ending_inventory([BREAD, COFFEE], shift) == {"1": 0, "25": 0}

    def test_prefilled_counts_reconcile_to_logged_sales(self):
        shift = _shift(
            production=[("1", 20)],
            sales=[("1", 12)],
            discharges=[("1", 3)],
            inventory_start={"1": 5},
        )
        shift.inventory_end = reconciliation.expected_ending_inventory([BREAD], shift)
        (row,) = reconciliation.inventory_sheet([BREAD], shift)
        assert row.sold == 12


class TestSummary:

    def test_summary_to_dict(self):
        shift = _shift(
            production=[("1", 20), ("25", 4)],
            sales=[("25", 1)],
            discharges=[("1", 2)],
            inventory_start={"1": 10},
            inventory_end={"1": 5, "25": 1},
        )
        data = reconciliation.summarize([BREAD, COFFEE], shift).to_dict()

        assert data["total_revenue_cents"] == 23 * 500 + 3 * 800
        assert data["total_cost_cents"] == 20 * 200 + 4 * 300
        assert data["estimated_profit_cents"] == data["total_revenue_cents"] - data["total_cost_cents"]
        assert data["total_discharges"] == {"count": 2, "cost_cents": 400}
        assert data["total_produced"] == 24
        assert data["total_sold"] == 26
        assert data["total_sales_logged"] == 1
        assert len(data["rows"]) == 2
