from __future__ import annotations

from ..extensions import db
from shiftbook.time_utils import to_utc_z


class ShiftReport(db.Model):
    """
    Archival projection of a closed shift.

    WHY: The live Shift row is replaced on the next start_shift; the report
    keeps what the operator signed off on, including both inventory
    snapshots and the reconciled totals.

    IMMUTABLE: Created exactly once when a shift closes, never updated.
    """
    __tablename__ = "shift_reports"
    __table_args__ = (
        db.UniqueConstraint("shift_id", name="uq_shift_reports_shift"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shift_id = db.Column(db.Integer, db.ForeignKey("shifts.id"), nullable=False, index=True)

    # Operator who closed the shift (display name is copied so renames do not rewrite history)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    user_display_name = db.Column(db.String(128), nullable=True)

    start_time = db.Column(db.DateTime(timezone=True), nullable=True)
    end_time = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    opening_cash_cents = db.Column(db.Integer, nullable=False, default=0)
    closing_cash_cents = db.Column(db.Integer, nullable=True)

    # {item_id: count}; ending snapshot only holds items that were counted
    inventory_start = db.Column(db.JSON, nullable=False)
    inventory_end = db.Column(db.JSON, nullable=False)

    total_produced = db.Column(db.Integer, nullable=False, default=0)
    total_sold = db.Column(db.Integer, nullable=False, default=0)
    total_discharged = db.Column(db.Integer, nullable=False, default=0)
    total_revenue_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cost_cents = db.Column(db.Integer, nullable=False, default=0)
    discharge_cost_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    shift = db.relationship("Shift", backref=db.backref("report", uselist=False, lazy=True))
    user = db.relationship("User", backref=db.backref("shift_reports", lazy=True))

    @property
    def estimated_profit_cents(self) -> int:
        return self.total_revenue_cents - self.total_cost_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shift_id": self.shift_id,
            "user_id": self.user_id,
            "user_display_name": self.user_display_name,
            "start_time": to_utc_z(self.start_time),
            "end_time": to_utc_z(self.end_time),
            "opening_cash_cents": self.opening_cash_cents,
            "closing_cash_cents": self.closing_cash_cents,
            "inventory_start": self.inventory_start,
            "inventory_end": self.inventory_end,
            "total_produced": self.total_produced,
            "total_sold": self.total_sold,
            "total_discharged": self.total_discharged,
            "total_revenue_cents": self.total_revenue_cents,
            "total_cost_cents": self.total_cost_cents,
            "estimated_profit_cents": self.estimated_profit_cents,
            "discharge_cost_cents": self.discharge_cost_cents,
            "created_at": to_utc_z(self.created_at),
        }
