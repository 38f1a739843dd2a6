from __future__ import annotations

from ..extensions import db
from shiftbook.time_utils import to_utc_z


CATEGORIES = ("Bread", "Pastry", "Cake", "Beverage", "Coffee")


class CatalogItem(db.Model):
    """
    Sellable/produced item definition.

    WHY string ids: seed items keep the ids "1".."31" so a catalog reset maps
    back onto the same rows that historical shifts reference. New items get a
    uuid hex id.

    DESIGN: Items are soft-deleted (is_active=False). Ledger entries and
    inventory counts of past shifts keep pointing at the row.
    """
    __tablename__ = "catalog_items"
    __table_args__ = (
        db.Index("ix_catalog_items_active_sort", "is_active", "sort_order"),
    )

    id = db.Column(db.String(36), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(32), nullable=False)
    unit = db.Column(db.String(16), nullable=False, default="pcs")

    # Authoritative storage in cents (frontend may only format for display)
    cost_price_cents = db.Column(db.Integer, nullable=False, default=0)
    selling_price_cents = db.Column(db.Integer, nullable=False, default=0)

    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<CatalogItem id={self.id!r} name={self.name!r} active={self.is_active}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "cost_price_cents": self.cost_price_cents,
            "selling_price_cents": self.selling_price_cents,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
