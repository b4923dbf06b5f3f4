import re
from datetime import date as date_cls
from decimal import Decimal

from flask import current_app

from partnerhub.errors import AuthorizationError, NotFoundError, StateConflictError, ValidationError
from partnerhub.extensions import db
from partnerhub.models import Booking, Partner
from partnerhub.models.base import to_money, utcnow
from partnerhub.services.booking_state import TERMINAL_STATUSES, compare_and_set, ensure_transition
from partnerhub.services.notification_service import NotificationService
from partnerhub.services.refund_service import RefundService

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def parse_clock(value, label):
    match = _TIME_RE.match((value or "").strip())
    if not match:
        raise ValidationError(f"{label} must be in HH:MM format.")
    return Decimal(int(match.group(1))) + Decimal(int(match.group(2))) / Decimal(60)


def parse_booking_date(value):
    try:
        return date_cls.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise ValidationError("Invalid date format.") from exc


class BookingService:
    @staticmethod
    def get_booking(booking_id):
        booking = db.session.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found.")
        return booking

    @staticmethod
    def _reload(booking_id):
        db.session.expire_all()
        return BookingService.get_booking(booking_id)

    @staticmethod
    def create_booking(user, partner_id, booking_date, start_time, end_time, message=None):
        if not partner_id or not booking_date or not start_time or not end_time:
            raise ValidationError("All fields are required.")

        day = parse_booking_date(booking_date)
        start_hours = parse_clock(start_time, "Start time")
        end_hours = parse_clock(end_time, "End time")

        try:
            partner = db.session.get(Partner, int(partner_id))
        except (TypeError, ValueError):
            partner = None
        if not partner:
            raise NotFoundError("Partner not found.")
        if partner.approval_status != "approved":
            raise ValidationError("Partner not available.")
        if partner.user_id == user.id:
            raise ValidationError("Cannot book yourself.")
        if user.has_blocked(partner.user_id) or partner.user.has_blocked(user.id):
            raise AuthorizationError("Booking is not allowed between these users.")

        duration = end_hours - start_hours
        if duration <= 0:
            raise ValidationError("End time must be after start time.")

        booking = Booking(
            user_id=user.id,
            partner_id=partner.id,
            date=day,
            start_time=start_time.strip(),
            end_time=end_time.strip(),
            message=(message or "").strip() or None,
            total_amount=to_money(duration * Decimal(str(partner.hourly_rate))),
            status="pending",
            payment_status="unpaid",
        )
        db.session.add(booking)
        db.session.commit()
        current_app.logger.info(
            "Booking %s created by user %s for partner %s (%s)",
            booking.id,
            user.id,
            partner.id,
            booking.total_amount,
        )

        NotificationService.booking_created(booking)
        return booking

    @staticmethod
    def respond(booking_id, partner, action):
        """Partner-side accept/reject of a booking request."""
        action = (action or "").strip().lower()
        if action not in {"accept", "reject"}:
            raise ValidationError("Action must be either accept or reject.")

        booking = BookingService.get_booking(booking_id)
        if booking.partner_id != partner.id:
            raise AuthorizationError("Not authorized for this booking.")
        if booking.status in TERMINAL_STATUSES:
            raise StateConflictError(f"Booking is already {booking.status}.")
        if action == "accept" and booking.status == "confirmed":
            # Settlement already confirmed it.
            return booking

        new_status = "confirmed" if action == "accept" else "cancelled"
        ensure_transition(booking.status, new_status)

        if new_status == "cancelled" and booking.payment_status == "paid":
            booking = RefundService.refund_and_cancel(booking)
            NotificationService.booking_rejected(booking)
            return booking

        now = utcnow()
        values = {Booking.status: new_status}
        if new_status == "confirmed":
            values[Booking.confirmed_at] = now
        else:
            values[Booking.cancelled_at] = now
        if not compare_and_set(booking.id, [booking.status], [booking.payment_status], values):
            db.session.rollback()
            current = BookingService._reload(booking.id)
            if current.status == new_status:
                return current
            raise StateConflictError("Booking was modified concurrently. Please retry.", 409)
        db.session.commit()
        booking = BookingService._reload(booking.id)
        current_app.logger.info("Booking %s %s by partner %s", booking.id, new_status, partner.id)

        if new_status == "confirmed":
            NotificationService.booking_accepted(booking)
        else:
            NotificationService.booking_rejected(booking)
        return booking

    @staticmethod
    def cancel_booking(booking_id, user):
        booking = BookingService.get_booking(booking_id)
        if booking.user_id != user.id:
            raise AuthorizationError("Not authorized for this booking.")
        if booking.status in TERMINAL_STATUSES:
            raise StateConflictError(f"Booking is already {booking.status}.")
        if booking.date < utcnow().date():
            raise StateConflictError("Past bookings cannot be cancelled.")
        ensure_transition(booking.status, "cancelled")

        if booking.payment_status == "paid":
            return RefundService.refund_and_cancel(booking)

        values = {Booking.status: "cancelled", Booking.cancelled_at: utcnow()}
        if not compare_and_set(booking.id, [booking.status], ["unpaid"], values):
            db.session.rollback()
            current = BookingService._reload(booking.id)
            if current.status == "cancelled":
                return current
            raise StateConflictError("Booking was modified concurrently. Please retry.", 409)
        db.session.commit()
        current_app.logger.info("Booking %s cancelled by user %s", booking.id, user.id)
        return BookingService._reload(booking.id)

    @staticmethod
    def complete_booking(booking_id, partner):
        booking = BookingService.get_booking(booking_id)
        if booking.partner_id != partner.id:
            raise AuthorizationError("Not authorized for this booking.")
        if booking.status != "confirmed":
            raise StateConflictError("Only confirmed bookings can be completed.")

        values = {Booking.status: "completed", Booking.completed_at: utcnow()}
        if not compare_and_set(booking.id, ["confirmed"], [booking.payment_status], values):
            db.session.rollback()
            current = BookingService._reload(booking.id)
            if current.status == "completed":
                return current
            raise StateConflictError("Booking was modified concurrently. Please retry.", 409)
        db.session.commit()
        current_app.logger.info("Booking %s completed by partner %s", booking.id, partner.id)
        return BookingService._reload(booking.id)

    @staticmethod
    def list_for_user(user_id):
        return Booking.query.filter_by(user_id=user_id).order_by(Booking.created_at.desc()).all()

    @staticmethod
    def list_for_partner(partner_id):
        return Booking.query.filter_by(partner_id=partner_id).order_by(Booking.created_at.desc()).all()
