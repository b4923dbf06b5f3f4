from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from partnerhub.services import UserService

api_user_bp = Blueprint("api_user", __name__)


@api_user_bp.post("/<int:user_id>/block")
@login_required
def block_user(user_id):
    target = UserService.block_user(current_user, user_id)
    return jsonify({"success": True, "message": "User blocked successfully", "blockedUserId": target.id})
