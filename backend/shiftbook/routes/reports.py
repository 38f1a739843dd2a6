from flask import Blueprint, Response, jsonify, request

from ..decorators import require_auth, map_domain_errors
from ..services import report_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/")
@reports_bp.get("")
@require_auth
@map_domain_errors("Failed to list shift reports")
def list_reports_route():
    limit = request.args.get("limit", type=int)
    reports = report_service.list_reports(limit=limit)
    return jsonify({"reports": [r.to_dict() for r in reports], "count": len(reports)}), 200


@reports_bp.get("/<int:report_id>")
@require_auth
@map_domain_errors("Failed to load shift report")
def get_report_route(report_id: int):
    return jsonify({"report": report_service.get_report(report_id).to_dict()}), 200


@reports_bp.get("/<int:report_id>/csv")
@require_auth
@map_domain_errors("Failed to export shift report")
def report_csv_route(report_id: int):
    report = report_service.get_report(report_id)
    return Response(
        report_service.render_report_csv(report),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename=shift_report_{report.id}.csv"},
    )
