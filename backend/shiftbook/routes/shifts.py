# backend/shiftbook/routes/shifts.py
"""
Shift API Routes

DESIGN:
- Lifecycle: start -> (prefill) -> end; a closed shift is read-only
- Ledger kinds share one set of routes: production, sales, discharges
- Sheet/summary endpoints recompute the reconciliation on every request

Every command returns the updated shift state (or the created record), so
the UI can re-render without a second round trip.
"""

from flask import Blueprint, Response, request, jsonify, g

from ..decorators import require_auth, map_domain_errors
from ..services import report_service, shift_service
from ..validation import ValidationError


shifts_bp = Blueprint("shifts", __name__, url_prefix="/api/shifts")


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _shift_payload() -> dict:
    shift, summary = shift_service.current_summary()
    return {"shift": shift.to_dict(), "summary": summary.to_dict()}


@shifts_bp.get("/current")
@require_auth
@map_domain_errors("Failed to load current shift")
def current_shift_route():
    return jsonify(_shift_payload()), 200


@shifts_bp.post("/start")
@require_auth
@map_domain_errors("Failed to start shift")
def start_shift_route():
    """
    Request body (all optional):
    {
        "opening_cash_cents": 50000,
        "inventory_start": {"1": 12, "9": 3}
    }
    """
    data = _json_body()
    shift_service.start_shift(
        opening_cash_cents=data.get("opening_cash_cents", 0),
        inventory_start=data.get("inventory_start"),
        user=g.current_user,
    )
    return jsonify(_shift_payload()), 201


@shifts_bp.post("/current/prefill")
@require_auth
@map_domain_errors("Failed to prefill ending inventory")
def prefill_route():
    expected = shift_service.prefill_ending_inventory()
    payload = _shift_payload()
    payload["inventory_end"] = expected
    return jsonify(payload), 200


@shifts_bp.post("/current/end")
@require_auth
@map_domain_errors("Failed to end shift")
def end_shift_route():
    """
    Request body:
    {
        "closing_cash_cents": 125000
    }
    """
    data = _json_body()
    if "closing_cash_cents" not in data:
        raise ValidationError("closing_cash_cents is required")
    report = shift_service.end_shift(data["closing_cash_cents"], user=g.current_user)
    payload = _shift_payload()
    payload["report"] = report.to_dict()
    return jsonify(payload), 200


@shifts_bp.put("/current/inventory-end/<item_id>")
@require_auth
@map_domain_errors("Failed to set ending inventory")
def set_ending_inventory_route(item_id: str):
    """
    Request body:
    {
        "count": 5     (null unsets the count)
    }
    """
    data = _json_body()
    if "count" not in data:
        raise ValidationError("count is required (null to unset)")
    row = shift_service.set_ending_inventory(item_id, data["count"])
    return jsonify({"count": row.to_dict()}), 200


@shifts_bp.post("/current/<kind>")
@require_auth
@map_domain_errors("Failed to add ledger entry")
def add_entry_route(kind: str):
    """
    Request body:
    {
        "item_id": "1",
        "quantity": 20,
        "reason": "Expired",     (discharges only)
        "notes": "..."           (discharges only, optional)
    }
    """
    data = _json_body()
    item_id = data.get("item_id")
    quantity = data.get("quantity")
    if kind == "production":
        entry = shift_service.add_production(item_id, quantity)
    elif kind == "sales":
        entry = shift_service.add_sale(item_id, quantity)
    elif kind == "discharges":
        entry = shift_service.add_discharge(item_id, quantity, data.get("reason"), data.get("notes"))
    else:
        return jsonify({"error": f"Unknown ledger kind: {kind}"}), 404
    return jsonify({"entry": entry.to_dict()}), 201


@shifts_bp.put("/current/<kind>/items/<item_id>")
@require_auth
@map_domain_errors("Failed to set ledger quantity")
def set_quantity_route(kind: str, item_id: str):
    """
    Replace all of an item's entries of this kind with one net entry.

    Request body:
    {
        "quantity": 12    (0 removes the item's entries)
    }
    """
    data = _json_body()
    quantity = data.get("quantity")
    if kind == "production":
        entry = shift_service.set_production_quantity(item_id, quantity)
    elif kind == "sales":
        entry = shift_service.set_sales_quantity(item_id, quantity)
    elif kind == "discharges":
        entry = shift_service.set_discharge_quantity(item_id, quantity, data.get("reason"), data.get("notes"))
    else:
        return jsonify({"error": f"Unknown ledger kind: {kind}"}), 404
    return jsonify({"entry": entry.to_dict() if entry else None}), 200


@shifts_bp.patch("/current/<kind>/entries/<int:entry_id>")
@require_auth
@map_domain_errors("Failed to update ledger entry")
def update_entry_route(kind: str, entry_id: int):
    data = _json_body()
    entry = shift_service.update_entry(
        kind,
        entry_id,
        quantity=data.get("quantity"),
        reason=data.get("reason"),
        notes=data.get("notes"),
    )
    return jsonify({"entry": entry.to_dict()}), 200


@shifts_bp.delete("/current/<kind>/entries/<int:entry_id>")
@require_auth
@map_domain_errors("Failed to remove ledger entry")
def remove_entry_route(kind: str, entry_id: int):
    shift_service.remove_entry(kind, entry_id)
    return jsonify({"message": "Entry removed", "entry_id": entry_id}), 200


@shifts_bp.get("/current/sheet")
@require_auth
@map_domain_errors("Failed to build inventory sheet")
def inventory_sheet_route():
    _, summary = shift_service.current_summary()
    return jsonify({"rows": [r.to_dict() for r in summary.rows]}), 200


@shifts_bp.get("/current/summary")
@require_auth
@map_domain_errors("Failed to build shift summary")
def summary_route():
    _, summary = shift_service.current_summary()
    data = summary.to_dict()
    data.pop("rows")
    return jsonify(data), 200


@shifts_bp.get("/current/sheet.csv")
@require_auth
@map_domain_errors("Failed to export inventory sheet")
def inventory_sheet_csv_route():
    shift, summary = shift_service.current_summary()
    body = report_service.render_inventory_sheet_csv(shift, summary)
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename=shift_{shift.id}_sheet.csv"},
    )
