"""
Shift lifecycle and ledger tests.

Verifies:
- CLOSED -> OPEN -> CLOSED; wrong-state calls raise, never silently no-op
- Beginning counts carried forward from the previous shift's ending counts
- Prefill suggestion is idempotent and reconciles to the logged sales
- Set-quantity collapses an item's entries into one net entry
- Closing archives a ShiftReport with reconciled totals
"""

import pytest

from shiftbook.models import Shift, ShiftReport, SHIFT_STATUS_CLOSED, SHIFT_STATUS_OPEN
from shiftbook.services import catalog_service, report_service, shift_service
from shiftbook.services.catalog_service import UnknownItemError
from shiftbook.services.shift_service import EntryNotFoundError, InvalidStateError, ShiftClosedError
from shiftbook.validation import InvalidQuantityError, ValidationError


# =============================================================================
# LIFECYCLE
# =============================================================================


class TestCurrentShift:

    def test_created_closed_on_first_use(self, catalog, db_session):
        shift = shift_service.get_current_shift()

        assert shift.status == SHIFT_STATUS_CLOSED
        assert shift.start_time is None and shift.end_time is None
        assert shift.production == [] and shift.sales == [] and shift.discharges == []
        assert db_session.query(Shift).count() == 1

    def test_same_shift_returned(self, catalog):
        assert shift_service.get_current_shift().id == shift_service.get_current_shift().id


class TestStartShift:

    def test_opens_with_zero_counts(self, catalog, operator):
        shift = shift_service.start_shift(opening_cash_cents=50000, user=operator)

        assert shift.status == SHIFT_STATUS_OPEN
        assert shift.start_time is not None
        assert shift.opening_cash_cents == 50000
        assert shift.opened_by_user_id == operator.id
        assert shift.inventory_start == {item.id: 0 for item in catalog}
        assert shift.inventory_end == {}

    def test_already_open(self, open_shift):
        with pytest.raises(InvalidStateError):
            shift_service.start_shift()
        assert shift_service.get_current_shift().id == open_shift.id

    @pytest.mark.parametrize("kwargs", [
        {"inventory_start": {"nope": 3}},
        {"inventory_start": {"1": -1}},
        {"opening_cash_cents": -1},
    ])
    def test_already_open_reported_before_bad_input(self, open_shift, kwargs):
        with pytest.raises(InvalidStateError):
            shift_service.start_shift(**kwargs)

    def test_carries_forward_ending_counts(self, open_shift):
        shift_service.set_ending_inventory("1", 7)
        shift_service.set_ending_inventory("16", 0)
        shift_service.end_shift(0)

        shift = shift_service.start_shift()

        assert shift.id != open_shift.id
        assert shift.inventory_start["1"] == 7
        assert shift.inventory_start["16"] == 0
        assert shift.inventory_start["2"] == 0
        assert shift.inventory_end == {}
        assert shift.production == []

    def test_overrides_beat_carried_counts(self, open_shift):
        shift_service.set_ending_inventory("1", 7)
        shift_service.end_shift(0)

        shift = shift_service.start_shift(inventory_start={"1": 4, "9": 2})

        assert shift.inventory_start["1"] == 4
        assert shift.inventory_start["9"] == 2

    def test_new_items_start_at_zero(self, open_shift):
        shift_service.end_shift(0)
        item = catalog_service.add_item({
            "name": "Brownies", "category": "Pastry",
            "cost_price_cents": 100, "selling_price_cents": 300,
        })
        shift = shift_service.start_shift()
        assert shift.inventory_start[item.id] == 0

    @pytest.mark.parametrize("overrides,error", [
        ({"1": -1}, InvalidQuantityError),
        ({"999": 1}, UnknownItemError),
        ([1, 2], ValidationError),
    ])
    def test_rejects_bad_overrides(self, catalog, overrides, error):
        with pytest.raises(error):
            shift_service.start_shift(inventory_start=overrides)
        assert not shift_service.get_current_shift().is_open

    def test_rejects_negative_opening_cash(self, catalog):
        with pytest.raises(ValidationError):
            shift_service.start_shift(opening_cash_cents=-100)


class TestEndShift:

    def test_no_open_shift(self, catalog):
        with pytest.raises(InvalidStateError):
            shift_service.end_shift(0)

    def test_closes_and_archives(self, open_shift, operator, db_session):
        shift_service.add_production("1", 20)
        shift_service.add_discharge("1", 2, "Expired")
        shift_service.add_sale("1", 18)
        shift_service.set_ending_inventory("1", 5)

        report = shift_service.end_shift(125000, user=operator)

        shift = shift_service.get_current_shift()
        assert shift.status == SHIFT_STATUS_CLOSED
        assert shift.end_time is not None
        assert shift.closing_cash_cents == 125000
        assert shift.closed_by_user_id == operator.id

        assert report.shift_id == shift.id
        assert report.user_display_name == "Morning Baker"
        assert report.inventory_end == {"1": 5}
        assert report.total_produced == 20
        assert report.total_sold == 13
        assert report.total_discharged == 2
        assert report.total_revenue_cents == 13 * 500
        assert report.total_cost_cents == 20 * 200
        assert report.discharge_cost_cents == 2 * 200
        assert report.estimated_profit_cents == 13 * 500 - 20 * 200
        assert db_session.query(ShiftReport).count() == 1

    def test_end_without_counts_recognizes_no_revenue(self, open_shift):
        shift_service.add_production("1", 15)
        shift_service.add_sale("1", 10)

        report = shift_service.end_shift(0)

        assert report.total_revenue_cents == 0
        assert report.total_cost_cents == 3000

    def test_twice(self, open_shift):
        shift_service.end_shift(0)
        with pytest.raises(InvalidStateError):
            shift_service.end_shift(0)

    def test_reports_most_recent_first(self, open_shift):
        first = shift_service.end_shift(100)
        shift_service.start_shift()
        second = shift_service.end_shift(200)

        assert [r.id for r in report_service.list_reports()] == [second.id, first.id]
        assert [r.id for r in report_service.list_reports(limit=1)] == [second.id]


# =============================================================================
# CLOSED SHIFT IS READ-ONLY
# =============================================================================


class TestClosedShiftGuards:

    @pytest.mark.parametrize("call", [
        lambda: shift_service.add_production("1", 1),
        lambda: shift_service.add_sale("1", 1),
        lambda: shift_service.add_discharge("1", 1, "Damaged"),
        lambda: shift_service.set_production_quantity("1", 3),
        lambda: shift_service.set_sales_quantity("1", 3),
        lambda: shift_service.set_discharge_quantity("1", 3),
        lambda: shift_service.set_ending_inventory("1", 3),
        lambda: shift_service.prefill_ending_inventory(),
    ])
    def test_mutation_rejected(self, catalog, call):
        with pytest.raises(ShiftClosedError):
            call()
        shift = shift_service.get_current_shift()
        assert shift.production == [] and shift.sales == [] and shift.discharges == []

    def test_closed_before_unknown_item(self, catalog):
        with pytest.raises(ShiftClosedError):
            shift_service.add_production("999", 1)


# =============================================================================
# LEDGER
# =============================================================================


class TestLedger:

    def test_add_entries(self, open_shift):
        production = shift_service.add_production("1", 20)
        sale = shift_service.add_sale("1", "3")
        discharge = shift_service.add_discharge("1", 2, "quality_issue", notes="burnt")

        assert production.quantity == 20 and production.shift_id == open_shift.id
        assert sale.quantity == 3
        assert discharge.reason == "Quality Issue"
        assert discharge.notes == "burnt"

    @pytest.mark.parametrize("quantity", [0, -3, 1.5, "2.0", "1e3", True, None, "abc"])
    def test_rejects_bad_quantity(self, open_shift, quantity):
        with pytest.raises(InvalidQuantityError):
            shift_service.add_production("1", quantity)
        assert shift_service.get_current_shift().production == []

    def test_unknown_item(self, open_shift):
        with pytest.raises(UnknownItemError):
            shift_service.add_sale("999", 1)

    def test_unknown_reason(self, open_shift):
        with pytest.raises(ValidationError):
            shift_service.add_discharge("1", 1, "Eaten")

    def test_set_quantity_collapses_entries(self, open_shift):
        shift_service.add_production("1", 10)
        shift_service.add_production("1", 5)
        shift_service.add_production("2", 4)

        entry = shift_service.set_production_quantity("1", 12)

        shift = shift_service.get_current_shift()
        assert [(e.item_id, e.quantity) for e in shift.production] == [("2", 4), ("1", 12)]
        assert entry.quantity == 12

    def test_set_quantity_zero_removes(self, open_shift):
        shift_service.add_sale("1", 3)
        shift_service.add_sale("1", 4)

        assert shift_service.set_sales_quantity("1", 0) is None
        assert shift_service.get_current_shift().sales == []

    def test_set_quantity_rejects_negative(self, open_shift):
        with pytest.raises(InvalidQuantityError):
            shift_service.set_sales_quantity("1", -1)

    def test_set_discharge_keeps_latest_reason(self, open_shift):
        shift_service.add_discharge("1", 1, "Damaged", notes="dropped tray")
        shift_service.add_discharge("1", 2, "Expired")

        entry = shift_service.set_discharge_quantity("1", 5)

        assert entry.reason == "Expired"
        assert entry.quantity == 5

    def test_set_discharge_defaults_reason(self, open_shift):
        entry = shift_service.set_discharge_quantity("1", 2)
        assert entry.reason == "Other"

    def test_set_discharge_rejects_blank_reason(self, open_shift):
        shift_service.add_discharge("1", 1, "Damaged")
        with pytest.raises(ValidationError):
            shift_service.set_discharge_quantity("1", 2, reason="")
        assert [e.reason for e in shift_service.get_current_shift().discharges] == ["Damaged"]

    def test_update_and_remove_entry(self, open_shift):
        entry = shift_service.add_discharge("1", 2, "Expired")

        updated = shift_service.update_entry("discharges", entry.id, quantity=3, reason="Damaged")
        assert (updated.quantity, updated.reason) == (3, "Damaged")

        shift_service.remove_entry("discharges", entry.id)
        assert shift_service.get_current_shift().discharges == []

    def test_update_rejects_invalid_quantity(self, open_shift):
        entry = shift_service.add_production("1", 4)
        with pytest.raises(InvalidQuantityError):
            shift_service.update_entry("production", entry.id, quantity=0)
        assert shift_service.get_current_shift().production[0].quantity == 4

    def test_entry_must_belong_to_kind(self, open_shift):
        entry = shift_service.add_production("1", 4)
        with pytest.raises(EntryNotFoundError):
            shift_service.remove_entry("sales", entry.id)

    def test_unknown_kind(self, open_shift):
        with pytest.raises(ValidationError):
            shift_service.remove_entry("returns", 1)


# =============================================================================
# ENDING INVENTORY
# =============================================================================


class TestEndingInventory:

    def test_set_and_unset(self, open_shift):
        shift_service.set_ending_inventory("1", 6)
        assert shift_service.get_current_shift().inventory_end == {"1": 6}

        shift_service.set_ending_inventory("1", None)
        assert shift_service.get_current_shift().inventory_end == {}

    def test_rejects_negative(self, open_shift):
        with pytest.raises(InvalidQuantityError):
            shift_service.set_ending_inventory("1", -2)

    def test_item_added_after_start(self, open_shift):
        item = catalog_service.add_item({
            "name": "Brownies", "category": "Pastry",
            "cost_price_cents": 100, "selling_price_cents": 300,
        })
        shift_service.set_ending_inventory(item.id, 2)
        shift = shift_service.get_current_shift()
        assert shift.inventory_start[item.id] == 0
        assert shift.inventory_end[item.id] == 2

    def test_prefill(self, catalog):
        shift_service.start_shift(inventory_start={"1": 5})
        shift_service.add_production("1", 20)
        shift_service.add_sale("1", 12)
        shift_service.add_discharge("1", 3, "Expired")
        shift_service.add_sale("2", 4)

        expected = shift_service.prefill_ending_inventory()

        assert expected["1"] == 10
        assert expected["2"] == 0
        assert len(expected) == len(catalog)
        shift, summary = shift_service.current_summary()
        assert shift.inventory_end == expected
        assert shift.is_open
        assert summary.total_sold == 12

    def test_prefill_is_idempotent(self, open_shift):
        shift_service.add_production("1", 8)
        first = shift_service.prefill_ending_inventory()
        second = shift_service.prefill_ending_inventory()
        assert first == second

    def test_prefill_overwrites_manual_counts(self, open_shift):
        shift_service.add_production("1", 8)
        shift_service.set_ending_inventory("1", 1)
        shift_service.prefill_ending_inventory()
        assert shift_service.get_current_shift().inventory_end["1"] == 8


# =============================================================================
# SUMMARY
# =============================================================================


class TestCurrentSummary:

    def test_sale_edits_do_not_move_revenue(self, open_shift):
        shift_service.add_production("1", 15)
        shift_service.set_ending_inventory("1", 5)
        _, before = shift_service.current_summary()

        sale = shift_service.add_sale("1", 3)
        shift_service.update_entry("sales", sale.id, quantity=9)
        _, after = shift_service.current_summary()

        assert before.total_revenue_cents == after.total_revenue_cents == 10 * 500
        assert after.total_sales_logged == 9
        assert after.sales_data == [{"item_id": "1", "name": "CHOCO BREAD", "produced": 15, "sold": 9}]
