# Overview: Service-layer operations for the item catalog; validation, referential guard and reset.

"""
Catalog Service

WHY: Every ledger entry and inventory count references a catalog item by id.
The catalog is small (tens of items) and edited rarely, so lookups here
favor clarity over query tricks.

DESIGN:
- Names are unique among active items, compared trimmed and case-insensitively.
- Removal is a soft delete, blocked while the current shift still references
  the item. Only the current shift is checked; older shifts keep their rows
  because nothing is ever hard-deleted.
- reset_to_defaults() never touches shift data.
"""

from __future__ import annotations

import uuid

from flask import current_app
from sqlalchemy import and_, func, or_

from ..extensions import db
from ..models import (
    CatalogItem, CATEGORIES, Shift, ProductionEntry, SaleEntry, DischargeEntry, ShiftInventoryCount,
)
from ..catalog_seed import DEFAULT_CATALOG
from ..events import publish_change
from ..validation import ConflictError, ValidationError, parse_cents, parse_choice, parse_text
from .concurrency import run_with_retry


class UnknownItemError(LookupError):
    """Raised when an item id does not reference an active catalog item."""
    pass


class DuplicateNameError(ConflictError):
    """Raised when an active item already uses the (case-insensitive) name."""
    pass


class ItemInUseError(ConflictError):
    """Raised when deleting an item the current shift still references."""
    pass


ITEM_MUTABLE_FIELDS = {"name", "category", "unit", "cost_price_cents", "selling_price_cents"}
REQUIRED_ON_CREATE = {"name", "category", "cost_price_cents", "selling_price_cents"}
DEFAULT_UNIT = "pcs"


def _normalize_name(name: str) -> str:
    return name.strip().casefold()


def validate_item_payload(payload: dict, *, partial: bool) -> dict:
    """
    Validate + normalize incoming item fields.

    partial=False: create semantics (all of REQUIRED_ON_CREATE must be present)
    partial=True: only keys present in payload are validated and returned
    Unknown keys are ignored.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Item payload must be an object")

    if not partial:
        missing = sorted(k for k in REQUIRED_ON_CREATE if payload.get(k) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    patch = {}
    if "name" in payload:
        patch["name"] = parse_text(payload["name"], field="name", max_length=255)
    if "category" in payload:
        patch["category"] = parse_choice(payload["category"], CATEGORIES, field="category")
    if "unit" in payload:
        patch["unit"] = parse_text(payload["unit"], field="unit", max_length=16, required=False) or DEFAULT_UNIT
    for key in ("cost_price_cents", "selling_price_cents"):
        if key in payload:
            patch[key] = parse_cents(payload[key], field=key)
    return patch


def list_items(include_inactive: bool = False) -> list[CatalogItem]:
    """Catalog in display order (seed order, then insertion order)."""
    query = db.session.query(CatalogItem)
    if not include_inactive:
        query = query.filter(CatalogItem.is_active.is_(True))
    return query.order_by(CatalogItem.sort_order.asc(), CatalogItem.created_at.asc()).all()


def get_item(item_id: str) -> CatalogItem:
    item = db.session.get(CatalogItem, str(item_id)) if item_id is not None else None
    if item is None or not item.is_active:
        raise UnknownItemError(f"Unknown item: {item_id}")
    return item


def _ensure_name_available(name: str, *, exclude_id: str | None = None) -> None:
    wanted = _normalize_name(name)
    for item in list_items():
        if item.id != exclude_id and _normalize_name(item.name) == wanted:
            raise DuplicateNameError(f"An item named '{item.name}' already exists")


def _next_sort_order() -> int:
    current = db.session.query(func.max(CatalogItem.sort_order)).scalar()
    return (current or 0) + 1


def add_item(payload: dict) -> CatalogItem:
    """
    Add an item to the catalog.

    Raises:
        ValidationError: bad fields, or an explicit id that is already taken
        DuplicateNameError: an active item has the same name
    """
    patch = validate_item_payload(payload, partial=False)
    item_id = parse_text(payload.get("id"), field="id", max_length=36, required=False) or uuid.uuid4().hex

    def _op():
        _ensure_name_available(patch["name"])
        if db.session.get(CatalogItem, item_id) is not None:
            raise ValidationError(f"Item id {item_id} already exists")

        item = CatalogItem(id=item_id, unit=DEFAULT_UNIT, is_active=True, sort_order=_next_sort_order())
        for key, value in patch.items():
            setattr(item, key, value)
        db.session.add(item)
        db.session.commit()
        return item

    item = run_with_retry(_op)
    current_app.logger.info("Catalog item added id=%s name=%s", item.id, item.name)
    publish_change("catalog.item_added", item_id=item.id)
    return item


def update_item(item_id: str, payload: dict) -> CatalogItem:
    """
    Partially update an item.

    Raises:
        UnknownItemError: item_id is not an active item
        ValidationError: bad fields
        DuplicateNameError: renamed onto another active item's name
    """
    patch = validate_item_payload(payload, partial=True)

    def _op():
        item = get_item(item_id)
        if "name" in patch:
            _ensure_name_available(patch["name"], exclude_id=item.id)
        for key, value in patch.items():
            if key in ITEM_MUTABLE_FIELDS:
                setattr(item, key, value)
        db.session.commit()
        return item

    item = run_with_retry(_op)
    publish_change("catalog.item_updated", item_id=item.id, fields=sorted(patch))
    return item


def item_in_use(item_id: str) -> bool:
    """
    Whether the current shift references the item: any ledger entry, or a
    nonzero beginning/ending count.
    """
    shift = db.session.query(Shift).order_by(Shift.id.desc()).first()
    if shift is None:
        return False

    for model in (ProductionEntry, SaleEntry, DischargeEntry):
        exists = db.session.query(model.id).filter(
            model.shift_id == shift.id,
            model.item_id == item_id,
        ).first()
        if exists:
            return True

    nonzero_count = db.session.query(ShiftInventoryCount.id).filter(
        ShiftInventoryCount.shift_id == shift.id,
        ShiftInventoryCount.item_id == item_id,
        or_(
            ShiftInventoryCount.beginning_quantity != 0,
            and_(
                ShiftInventoryCount.ending_quantity.isnot(None),
                ShiftInventoryCount.ending_quantity != 0,
            ),
        ),
    ).first()
    return nonzero_count is not None


def remove_item(item_id: str) -> CatalogItem:
    """
    Remove an item from all future catalog queries (soft delete).

    Raises:
        UnknownItemError: item_id is not an active item
        ItemInUseError: the current shift still references the item
    """
    def _op():
        item = get_item(item_id)
        if item_in_use(item.id):
            raise ItemInUseError(
                f"'{item.name}' has entries or inventory in the current shift and cannot be deleted"
            )
        item.is_active = False
        db.session.commit()
        return item

    item = run_with_retry(_op)
    current_app.logger.info("Catalog item removed id=%s", item.id)
    publish_change("catalog.item_removed", item_id=item.id)
    return item


def reset_to_defaults() -> list[CatalogItem]:
    """
    Replace the active catalog with the fixed seed list.

    Seed rows are restored to their seed values (reactivated if needed);
    every other item is deactivated. Shift data is left alone.
    """
    seed_ids = {row[0] for row in DEFAULT_CATALOG}

    def _op():
        for item in list_items():
            if item.id not in seed_ids:
                item.is_active = False

        for position, (item_id, name, category, unit, cost, price) in enumerate(DEFAULT_CATALOG):
            item = db.session.get(CatalogItem, item_id)
            if item is None:
                item = CatalogItem(id=item_id)
                db.session.add(item)
            item.name = name
            item.category = category
            item.unit = unit
            item.cost_price_cents = cost
            item.selling_price_cents = price
            item.sort_order = position
            item.is_active = True

        db.session.commit()

    run_with_retry(_op)
    current_app.logger.info("Catalog reset to %d default items", len(DEFAULT_CATALOG))
    publish_change("catalog.reset")
    return list_items()


def seed_default_catalog() -> bool:
    """Load the seed list into an empty catalog. Returns True if anything was seeded."""
    if db.session.query(CatalogItem.id).first() is not None:
        return False
    reset_to_defaults()
    return True
