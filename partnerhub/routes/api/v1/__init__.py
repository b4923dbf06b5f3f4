from flask import Blueprint

from partnerhub.routes.api.v1.admin import api_admin_bp
from partnerhub.routes.api.v1.bookings import api_booking_bp
from partnerhub.routes.api.v1.earnings import api_earnings_bp
from partnerhub.routes.api.v1.payments import api_payment_bp
from partnerhub.routes.api.v1.reports import api_report_bp
from partnerhub.routes.api.v1.users import api_user_bp
from partnerhub.routes.api.v1.wallet import api_wallet_bp

api_v1_bp = Blueprint("api_v1", __name__)
api_v1_bp.register_blueprint(api_booking_bp, url_prefix="/bookings")
api_v1_bp.register_blueprint(api_payment_bp, url_prefix="/payments")
api_v1_bp.register_blueprint(api_earnings_bp, url_prefix="/earnings")
api_v1_bp.register_blueprint(api_wallet_bp, url_prefix="/wallet")
api_v1_bp.register_blueprint(api_admin_bp, url_prefix="/admin")
api_v1_bp.register_blueprint(api_user_bp, url_prefix="/users")
api_v1_bp.register_blueprint(api_report_bp, url_prefix="/reports")
