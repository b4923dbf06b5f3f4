from flask import Blueprint, g, jsonify, request
from flask_login import current_user, login_required

from partnerhub.decorators import partner_required
from partnerhub.routes.api.v1.serializers import booking_json
from partnerhub.services import BookingService

api_booking_bp = Blueprint("api_booking", __name__)


@api_booking_bp.post("")
@login_required
def create_booking():
    payload = request.get_json(silent=True) or {}
    booking = BookingService.create_booking(
        user=current_user,
        partner_id=payload.get("partnerId"),
        booking_date=payload.get("date"),
        start_time=payload.get("startTime"),
        end_time=payload.get("endTime"),
        message=payload.get("message"),
    )
    return (
        jsonify(
            {
                "success": True,
                "message": "Booking created",
                "bookingId": booking.id,
                "totalAmount": float(booking.total_amount),
                "booking": booking_json(booking),
            }
        ),
        201,
    )


@api_booking_bp.get("/me")
@login_required
def my_bookings():
    rows = BookingService.list_for_user(current_user.id)
    return jsonify({"success": True, "count": len(rows), "data": [booking_json(b) for b in rows]})


@api_booking_bp.get("/partner")
@partner_required
def partner_bookings():
    rows = BookingService.list_for_partner(g.partner.id)
    return jsonify({"success": True, "count": len(rows), "data": [booking_json(b) for b in rows]})


@api_booking_bp.patch("/<int:booking_id>/respond")
@partner_required
def respond(booking_id):
    payload = request.get_json(silent=True) or {}
    booking = BookingService.respond(booking_id, g.partner, payload.get("action"))
    verb = "accepted" if booking.status == "confirmed" else "rejected"
    return jsonify({"success": True, "message": f"Booking {verb}", "booking": booking_json(booking)})


@api_booking_bp.post("/<int:booking_id>/cancel")
@login_required
def cancel(booking_id):
    booking = BookingService.cancel_booking(booking_id, current_user)
    message = "Booking cancelled and refunded" if booking.payment_status == "refunded" else "Booking cancelled"
    return jsonify({"success": True, "message": message, "booking": booking_json(booking)})


@api_booking_bp.post("/<int:booking_id>/complete")
@partner_required
def complete(booking_id):
    booking = BookingService.complete_booking(booking_id, g.partner)
    return jsonify({"success": True, "message": "Booking completed", "booking": booking_json(booking)})
