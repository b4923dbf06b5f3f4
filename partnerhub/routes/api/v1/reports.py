from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from partnerhub.extensions import limiter
from partnerhub.routes.api.v1.serializers import report_json
from partnerhub.services import ReportService

api_report_bp = Blueprint("api_report", __name__)


@api_report_bp.post("")
@limiter.limit("20 per hour")
@login_required
def report_user():
    payload = request.get_json(silent=True) or {}
    report = ReportService.create_report(
        reporter=current_user,
        reported_user_id=payload.get("reportedUserId"),
        reason=payload.get("reason"),
        description=payload.get("description"),
        booking_id=payload.get("bookingId"),
    )
    return jsonify({"success": True, "message": "Report submitted successfully", "report": report_json(report)}), 201
