# backend/shiftbook/routes/catalog.py
"""
Catalog API Routes

Item CRUD and reset-to-defaults. Confirmation prompts for destructive
actions belong to the UI; these endpoints act immediately.
"""

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, map_domain_errors
from ..services import catalog_service


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")


@catalog_bp.get("/")
@catalog_bp.get("")
@require_auth
@map_domain_errors("Failed to list catalog")
def list_items_route():
    include_inactive = request.args.get("include_inactive", "false").lower() == "true"
    items = catalog_service.list_items(include_inactive=include_inactive)
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)}), 200


@catalog_bp.post("/")
@catalog_bp.post("")
@require_auth
@map_domain_errors("Failed to add catalog item")
def add_item_route():
    """
    Request body:
    {
        "name": "PANDESAL (5)",
        "category": "Bread",
        "unit": "pcs",
        "cost_price_cents": 200,
        "selling_price_cents": 500,
        "id": "17"  (optional)
    }
    """
    item = catalog_service.add_item(request.get_json(silent=True) or {})
    return jsonify({"item": item.to_dict()}), 201


@catalog_bp.get("/<item_id>")
@require_auth
@map_domain_errors("Failed to load catalog item")
def get_item_route(item_id: str):
    return jsonify({"item": catalog_service.get_item(item_id).to_dict()}), 200


@catalog_bp.patch("/<item_id>")
@catalog_bp.put("/<item_id>")
@require_auth
@map_domain_errors("Failed to update catalog item")
def update_item_route(item_id: str):
    item = catalog_service.update_item(item_id, request.get_json(silent=True) or {})
    return jsonify({"item": item.to_dict()}), 200


@catalog_bp.delete("/<item_id>")
@require_auth
@map_domain_errors("Failed to remove catalog item")
def remove_item_route(item_id: str):
    catalog_service.remove_item(item_id)
    return jsonify({"message": "Item removed", "item_id": item_id}), 200


@catalog_bp.post("/reset")
@require_auth
@map_domain_errors("Failed to reset catalog")
def reset_catalog_route():
    items = catalog_service.reset_to_defaults()
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)}), 200
