from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from partnerhub.extensions import db
from partnerhub.models import Notification

BOOKING_CREATED = "booking_created"
BOOKING_ACCEPTED = "booking_accepted"
BOOKING_REJECTED = "booking_rejected"
PAYMENT_COMPLETED = "payment_completed"


class NotificationService:
    """Best-effort event publishing.

    Callers emit after their own state change is committed. A failure here is
    logged and rolled back, never raised, so it cannot undo the operation that
    triggered it.
    """

    @staticmethod
    def emit(user_id, event_type, title, message, data=None):
        try:
            notification = Notification(
                user_id=user_id,
                type=event_type,
                title=title,
                message=message,
                data=data or {},
            )
            db.session.add(notification)
            db.session.commit()
            return notification
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.warning(
                "Notification %s for user %s dropped: %s", event_type, user_id, exc
            )
            return None

    @staticmethod
    def booking_created(booking):
        return NotificationService.emit(
            booking.partner.user_id,
            BOOKING_CREATED,
            "New booking request",
            f"You have a new booking request from {booking.user.full_name}.",
            {"bookingId": booking.id},
        )

    @staticmethod
    def booking_accepted(booking):
        return NotificationService.emit(
            booking.user_id,
            BOOKING_ACCEPTED,
            "Booking accepted",
            f"Your booking has been accepted by {booking.partner.user.full_name}.",
            {"bookingId": booking.id},
        )

    @staticmethod
    def booking_rejected(booking):
        return NotificationService.emit(
            booking.user_id,
            BOOKING_REJECTED,
            "Booking rejected",
            f"Your booking was rejected by {booking.partner.user.full_name}.",
            {"bookingId": booking.id},
        )

    @staticmethod
    def payment_completed(booking):
        return NotificationService.emit(
            booking.partner.user_id,
            PAYMENT_COMPLETED,
            "Payment received",
            f"Payment received for booking with {booking.user.full_name}.",
            {"bookingId": booking.id, "amount": str(booking.total_amount)},
        )

