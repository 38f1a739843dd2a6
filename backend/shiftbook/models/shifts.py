from __future__ import annotations

from ..extensions import db
from shiftbook.time_utils import to_utc_z


SHIFT_STATUS_OPEN = "OPEN"
SHIFT_STATUS_CLOSED = "CLOSED"

DISCHARGE_REASONS = ("Expired", "Damaged", "Quality Issue", "Other")


class Shift(db.Model):
    """
    One operating session bounded by explicit open/close actions.

    LIFECYCLE:
    - CLOSED: initial state (first use) and after end_shift
    - OPEN: ledger entries and ending counts may be written

    The most recent row is the current shift. start_shift replaces it with a
    new row; a closed shift is read-only until then.
    """
    __tablename__ = "shifts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    status = db.Column(db.String(16), nullable=False, default=SHIFT_STATUS_CLOSED, index=True)  # OPEN, CLOSED

    start_time = db.Column(db.DateTime(timezone=True), nullable=True)
    end_time = db.Column(db.DateTime(timezone=True), nullable=True)

    # Cash tracking (all amounts in cents)
    opening_cash_cents = db.Column(db.Integer, nullable=False, default=0)
    closing_cash_cents = db.Column(db.Integer, nullable=True)  # Set when closing

    opened_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    closed_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    production_entries = db.relationship(
        "ProductionEntry", order_by="ProductionEntry.id",
        cascade="all, delete-orphan", back_populates="shift",
    )
    sale_entries = db.relationship(
        "SaleEntry", order_by="SaleEntry.id",
        cascade="all, delete-orphan", back_populates="shift",
    )
    discharge_entries = db.relationship(
        "DischargeEntry", order_by="DischargeEntry.id",
        cascade="all, delete-orphan", back_populates="shift",
    )
    inventory_counts = db.relationship(
        "ShiftInventoryCount", order_by="ShiftInventoryCount.id",
        cascade="all, delete-orphan", back_populates="shift",
    )
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_open(self) -> bool:
        return self.status == SHIFT_STATUS_OPEN

    # Read-side views consumed by the reconciliation engine

    @property
    def production(self) -> list:
        return list(self.production_entries)

    @property
    def sales(self) -> list:
        return list(self.sale_entries)

    @property
    def discharges(self) -> list:
        return list(self.discharge_entries)

    @property
    def inventory_start(self) -> dict[str, int]:
        return {c.item_id: c.beginning_quantity for c in self.inventory_counts}

    @property
    def inventory_end(self) -> dict[str, int]:
        """Ending counts that have been set. Unset items are absent, not zero."""
        return {
            c.item_id: c.ending_quantity
            for c in self.inventory_counts
            if c.ending_quantity is not None
        }

    def count_for(self, item_id: str) -> "ShiftInventoryCount | None":
        for count in self.inventory_counts:
            if count.item_id == item_id:
                return count
        return None

    def to_dict(self, *, include_ledgers: bool = True) -> dict:
        data = {
            "id": self.id,
            "status": self.status,
            "start_time": to_utc_z(self.start_time),
            "end_time": to_utc_z(self.end_time),
            "opening_cash_cents": self.opening_cash_cents,
            "closing_cash_cents": self.closing_cash_cents,
            "opened_by_user_id": self.opened_by_user_id,
            "closed_by_user_id": self.closed_by_user_id,
            "inventory_start": self.inventory_start,
            "inventory_end": self.inventory_end,
            "version_id": self.version_id,
        }
        if include_ledgers:
            data["production"] = [e.to_dict() for e in self.production_entries]
            data["sales"] = [e.to_dict() for e in self.sale_entries]
            data["discharges"] = [e.to_dict() for e in self.discharge_entries]
        return data


class ProductionEntry(db.Model):
    """Units of an item baked/produced during a shift (the cost event)."""
    __tablename__ = "production_entries"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    shift_id = db.Column(db.Integer, db.ForeignKey("shifts.id"), nullable=False, index=True)
    item_id = db.Column(db.String(36), db.ForeignKey("catalog_items.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    shift = db.relationship("Shift", back_populates="production_entries")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shift_id": self.shift_id,
            "item_id": self.item_id,
            "quantity": self.quantity,
            "created_at": to_utc_z(self.created_at),
        }


class SaleEntry(db.Model):
    """
    Point-of-sale transaction.

    Informational only: drives the live feed and the produced/sold chart.
    Revenue comes from the inventory count reconciliation, not from here.
    """
    __tablename__ = "sale_entries"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    shift_id = db.Column(db.Integer, db.ForeignKey("shifts.id"), nullable=False, index=True)
    item_id = db.Column(db.String(36), db.ForeignKey("catalog_items.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    shift = db.relationship("Shift", back_populates="sale_entries")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shift_id": self.shift_id,
            "item_id": self.item_id,
            "quantity": self.quantity,
            "created_at": to_utc_z(self.created_at),
        }


class DischargeEntry(db.Model):
    """
    Stock written off (BO): expired, damaged, quality issue, other.

    Reduces the reconciled sold quantity and is tracked as a loss at cost.
    """
    __tablename__ = "discharge_entries"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    shift_id = db.Column(db.Integer, db.ForeignKey("shifts.id"), nullable=False, index=True)
    item_id = db.Column(db.String(36), db.ForeignKey("catalog_items.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(32), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    shift = db.relationship("Shift", back_populates="discharge_entries")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shift_id": self.shift_id,
            "item_id": self.item_id,
            "quantity": self.quantity,
            "reason": self.reason,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }


class ShiftInventoryCount(db.Model):
    """
    Beginning and ending physical count of one item for one shift.

    ending_quantity NULL means the operator has not counted the item yet.
    That is not the same as zero: an unset item recognizes no revenue.
    """
    __tablename__ = "shift_inventory_counts"
    __table_args__ = (
        db.UniqueConstraint("shift_id", "item_id", name="uq_shift_inventory_counts_shift_item"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shift_id = db.Column(db.Integer, db.ForeignKey("shifts.id"), nullable=False, index=True)
    item_id = db.Column(db.String(36), db.ForeignKey("catalog_items.id"), nullable=False, index=True)
    beginning_quantity = db.Column(db.Integer, nullable=False, default=0)
    ending_quantity = db.Column(db.Integer, nullable=True)

    shift = db.relationship("Shift", back_populates="inventory_counts")

    def to_dict(self) -> dict:
        return {
            "shift_id": self.shift_id,
            "item_id": self.item_id,
            "beginning_quantity": self.beginning_quantity,
            "ending_quantity": self.ending_quantity,
        }
