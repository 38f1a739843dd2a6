# backend/shiftbook/routes/system.py
"""
System health endpoint.
"""

import time
from flask import Blueprint, current_app, jsonify
from ..extensions import db
from ..models import CatalogItem, Shift
from shiftbook.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        item_count = db.session.query(CatalogItem).filter(CatalogItem.is_active.is_(True)).count()
        shift_count = db.session.query(Shift).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "catalog_items": item_count,
                "shifts": shift_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    status = 200 if database["status"] == "healthy" else 503
    return jsonify({
        "status": database["status"],
        "timestamp": to_utc_z(utcnow()),
        "database": database,
    }), status
