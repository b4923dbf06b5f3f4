from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from partnerhub.extensions import limiter
from partnerhub.routes.api.v1.serializers import wallet_json
from partnerhub.services import WalletService

api_wallet_bp = Blueprint("api_wallet", __name__)


def _wallet_body(wallet):
    return wallet_json(wallet, WalletService.recent_transactions(wallet))


@api_wallet_bp.get("")
@login_required
def get_wallet():
    wallet = WalletService.get_or_create_wallet(current_user.id)
    return jsonify({"success": True, "wallet": _wallet_body(wallet)})


@api_wallet_bp.post("/withdraw")
@limiter.limit("10 per hour")
@login_required
def withdraw():
    payload = request.get_json(silent=True) or {}
    wallet = WalletService.withdraw(current_user, payload.get("amount"), payload.get("bankDetails"))
    return jsonify({"success": True, "message": "Withdrawal request submitted", "wallet": _wallet_body(wallet)})


@api_wallet_bp.post("/transfer")
@limiter.limit("30 per hour")
@login_required
def transfer():
    payload = request.get_json(silent=True) or {}
    wallet = WalletService.transfer(current_user, payload.get("recipientEmail"), payload.get("amount"))
    return jsonify({"success": True, "message": "Transfer successful", "wallet": _wallet_body(wallet)})
