from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from partnerhub.extensions import limiter
from partnerhub.routes.api.v1.serializers import booking_json
from partnerhub.services import PaymentService
from partnerhub.services.payment_gateway import to_subunits

api_payment_bp = Blueprint("api_payment", __name__)


@api_payment_bp.post("/orders")
@login_required
def create_order():
    payload = request.get_json(silent=True) or {}
    booking, order = PaymentService.create_order(payload.get("bookingId"), current_user)
    return jsonify(
        {
            "success": True,
            "message": "Payment order created",
            "order": {
                "id": order["id"],
                "amount": to_subunits(order["amount"]),
                "currency": order["currency"],
                "receipt": f"booking_{booking.id}",
            },
            "keyId": current_app.config.get("RAZORPAY_KEY_ID"),
            "bookingId": booking.id,
        }
    )


@api_payment_bp.post("/verify")
@login_required
def verify_payment():
    payload = request.get_json(silent=True) or {}
    booking, already_processed = PaymentService.verify_payment(
        payload.get("razorpay_order_id"),
        payload.get("razorpay_payment_id"),
        payload.get("razorpay_signature"),
    )
    message = "Payment already processed" if already_processed else "Payment verified successfully"
    return jsonify(
        {
            "success": True,
            "message": message,
            "alreadyProcessed": already_processed,
            "booking": booking_json(booking),
        }
    )


@api_payment_bp.post("/webhook")
@limiter.exempt
def webhook():
    booking = PaymentService.handle_webhook(
        request.get_data(),
        request.headers.get("X-Razorpay-Signature"),
    )
    body = {"success": True, "message": "Webhook processed successfully"}
    if booking is not None:
        body["bookingId"] = booking.id
    return jsonify(body)
