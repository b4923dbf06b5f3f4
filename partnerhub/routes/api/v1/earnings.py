from flask import Blueprint, g, jsonify, request

from partnerhub.decorators import partner_required
from partnerhub.extensions import limiter
from partnerhub.routes.api.v1.serializers import earnings_json, withdrawal_json
from partnerhub.services import WithdrawalService

api_earnings_bp = Blueprint("api_earnings", __name__)


@api_earnings_bp.get("")
@partner_required
def get_earnings():
    earnings = WithdrawalService.get_earnings(g.partner)
    return jsonify({"success": True, "data": earnings_json(earnings)})


@api_earnings_bp.post("/withdrawals")
@limiter.limit("10 per hour")
@partner_required
def request_withdrawal():
    payload = request.get_json(silent=True) or {}
    withdrawal = WithdrawalService.request_withdrawal(g.partner, payload.get("amount"), payload.get("upiId"))
    return (
        jsonify(
            {
                "success": True,
                "message": "Withdrawal request submitted",
                "withdrawal": withdrawal_json(withdrawal),
            }
        ),
        201,
    )
