from flask import Blueprint, jsonify, request
from flask_login import current_user

from partnerhub.decorators import role_required
from partnerhub.routes.api.v1.serializers import partner_json, report_json, withdrawal_json
from partnerhub.services import CommissionService, PartnerService, ReportService, WithdrawalService

api_admin_bp = Blueprint("api_admin", __name__)


@api_admin_bp.get("/withdrawals")
@role_required("admin")
def list_withdrawals():
    rows = WithdrawalService.list_withdrawals(request.args.get("status"))
    return jsonify({"success": True, "count": len(rows), "data": [withdrawal_json(w) for w in rows]})


@api_admin_bp.patch("/withdrawals/<int:withdrawal_id>")
@role_required("admin")
def process_withdrawal(withdrawal_id):
    payload = request.get_json(silent=True) or {}
    withdrawal = WithdrawalService.resolve_withdrawal(
        withdrawal_id,
        payload.get("status"),
        payload.get("adminNotes"),
    )
    return jsonify(
        {
            "success": True,
            "message": f"Withdrawal {withdrawal.status}",
            "withdrawal": withdrawal_json(withdrawal),
        }
    )


@api_admin_bp.get("/settings/commission")
@role_required("admin")
def get_commission_rates():
    rates = CommissionService.current_rates()
    return jsonify({"success": True, "premium": float(rates.premium), "standard": float(rates.standard)})


@api_admin_bp.put("/settings/commission")
@role_required("admin")
def update_commission_rates():
    payload = request.get_json(silent=True) or {}
    rates = CommissionService.update_rates(payload.get("premium"), payload.get("standard"), current_user.id)
    return jsonify(
        {
            "success": True,
            "message": "Commission rates updated",
            "premium": float(rates.premium),
            "standard": float(rates.standard),
        }
    )


@api_admin_bp.get("/partners")
@role_required("admin")
def list_partner_applications():
    rows = PartnerService.list_applications(request.args.get("status"))
    return jsonify({"success": True, "count": len(rows), "data": [partner_json(p) for p in rows]})


@api_admin_bp.patch("/partners/<int:partner_id>")
@role_required("admin")
def update_partner_status(partner_id):
    payload = request.get_json(silent=True) or {}
    partner = PartnerService.update_status(partner_id, payload.get("approvalStatus"))
    return jsonify(
        {
            "success": True,
            "message": "Application updated",
            "status": partner.approval_status,
            "partner": partner_json(partner),
        }
    )


@api_admin_bp.get("/reports")
@role_required("admin")
def list_reports():
    rows = ReportService.list_reports(request.args.get("status"))
    return jsonify({"success": True, "count": len(rows), "data": [report_json(r) for r in rows]})


@api_admin_bp.patch("/reports/<int:report_id>")
@role_required("admin")
def review_report(report_id):
    payload = request.get_json(silent=True) or {}
    report = ReportService.review_report(report_id, payload.get("status"), payload.get("adminNotes"))
    return jsonify({"success": True, "message": f"Report {report.status}", "report": report_json(report)})
