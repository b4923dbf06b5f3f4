from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from partnerhub.errors import AuthorizationError, NotFoundError, StateConflictError, ValidationError
from partnerhub.extensions import db
from partnerhub.models import Booking
from partnerhub.models.base import utcnow
from partnerhub.services.booking_state import TERMINAL_STATUSES, compare_and_set
from partnerhub.services.commission_service import CommissionService
from partnerhub.services.earnings_service import EarningsLedger
from partnerhub.services.notification_service import NotificationService
from partnerhub.services.payment_gateway import get_gateway

SETTLING_EVENTS = frozenset({"payment.captured", "order.paid"})


class PaymentService:
    @staticmethod
    def create_order(booking_id, user):
        gateway = get_gateway()

        try:
            booking = db.session.get(Booking, int(booking_id))
        except (TypeError, ValueError):
            booking = None
        if not booking:
            raise NotFoundError("Booking not found.")
        if booking.user_id != user.id:
            raise AuthorizationError("You can only create orders for your own bookings.")
        if booking.payment_status != "unpaid":
            raise StateConflictError("Payment has already been processed for this booking.")
        if booking.status in TERMINAL_STATUSES:
            raise StateConflictError(f"Booking is already {booking.status}.")

        currency = current_app.config["PAYMENT_CURRENCY"]
        if booking.razorpay_order_id:
            # A payment may already be in flight against this order.
            current_app.logger.info(
                "Reusing payment order %s for booking %s", booking.razorpay_order_id, booking.id
            )
            return booking, {"id": booking.razorpay_order_id, "amount": booking.total_amount, "currency": currency}

        order_id = gateway.create_order(booking.total_amount, currency, f"booking_{booking.id}")

        if not compare_and_set(
            booking.id,
            ["pending", "confirmed"],
            ["unpaid"],
            {Booking.razorpay_order_id: order_id},
            Booking.razorpay_order_id.is_(None),
        ):
            db.session.rollback()
            db.session.expire_all()
            current = db.session.get(Booking, booking.id)
            if current.razorpay_order_id and current.payment_status == "unpaid":
                current_app.logger.warning(
                    "Order %s discarded; booking %s already has order %s",
                    order_id,
                    current.id,
                    current.razorpay_order_id,
                )
                return current, {"id": current.razorpay_order_id, "amount": current.total_amount, "currency": currency}
            raise StateConflictError("Payment has already been processed for this booking.")
        db.session.commit()
        current_app.logger.info("Payment order %s created for booking %s", order_id, booking.id)
        db.session.refresh(booking)
        return booking, {"id": order_id, "amount": booking.total_amount, "currency": currency}

    @staticmethod
    def verify_payment(order_id, payment_id, signature):
        """Client-side confirmation path. Returns ``(booking, already_processed)``."""
        if not order_id or not payment_id or not signature:
            raise ValidationError("Invalid payment data.")

        gateway = get_gateway()
        if not gateway.verify_signature(order_id, payment_id, signature):
            current_app.logger.warning("Invalid payment signature for order %s, payment %s", order_id, payment_id)
            raise ValidationError("Invalid payment signature.")

        existing = Booking.query.filter_by(razorpay_payment_id=payment_id).first()
        if existing and existing.settlement_applied:
            current_app.logger.warning("Payment %s already processed for booking %s", payment_id, existing.id)
            return existing, True

        booking = Booking.query.filter_by(razorpay_order_id=order_id).first()
        if not booking:
            raise NotFoundError("Booking not found.")
        return PaymentService.settle(booking, payment_id)

    @staticmethod
    def handle_webhook(body, signature):
        """Gateway callback path. Returns the settled booking, or None when nothing applied."""
        event = get_gateway().parse_webhook(body, signature)
        current_app.logger.info("Payment webhook received: %s", event.event_type)

        if event.event_type not in SETTLING_EVENTS:
            return None
        if not event.order_id or not event.payment_id:
            raise ValidationError("Webhook payload is missing payment details.")

        booking = Booking.query.filter_by(razorpay_order_id=event.order_id).first()
        if not booking:
            current_app.logger.warning("Booking not found for webhook order %s", event.order_id)
            return None
        try:
            booking, _ = PaymentService.settle(booking, event.payment_id)
        except StateConflictError as exc:
            # Acknowledge so the gateway stops retrying; settle() already logged.
            current_app.logger.error(
                "Webhook payment %s for order %s not applied: %s", event.payment_id, event.order_id, exc.message
            )
            return None
        return booking

    @staticmethod
    def settle(booking, payment_id):
        """Mark a booking paid, split the commission and credit the partner, exactly once.

        Safe to call from both the verify and webhook paths in any order: the
        conditional update only succeeds for the first caller, everyone else
        sees an already-settled booking and gets ``already_processed=True``.
        """
        if booking.settlement_applied or booking.payment_status != "unpaid":
            current_app.logger.warning("Duplicate settlement for booking %s ignored", booking.id)
            return booking, True
        if booking.status in TERMINAL_STATUSES:
            current_app.logger.error(
                "Payment %s captured for %s booking %s; refund it manually",
                payment_id,
                booking.status,
                booking.id,
            )
            raise StateConflictError(f"Booking is already {booking.status}.", 409)

        EarningsLedger.ensure(booking.partner_id)
        split = CommissionService.split_for(booking, booking.user)
        booking_id = booking.id
        partner_id = booking.partner_id
        now = utcnow()

        try:
            claimed = compare_and_set(
                booking_id,
                ["pending", "confirmed"],
                ["unpaid"],
                {
                    Booking.payment_status: "paid",
                    Booking.status: "confirmed",
                    Booking.razorpay_payment_id: payment_id,
                    Booking.platform_commission: split.platform_commission,
                    Booking.partner_earning: split.partner_earning,
                    Booking.commission_rate: split.rate,
                    Booking.settlement_applied: True,
                    Booking.paid_at: now,
                    Booking.confirmed_at: func.coalesce(Booking.confirmed_at, now),
                },
                Booking.settlement_applied.is_(False),
            )
        except IntegrityError as exc:
            db.session.rollback()
            raise StateConflictError("Payment is already linked to another booking.", 409) from exc

        if not claimed:
            db.session.rollback()
            db.session.expire_all()
            current = db.session.get(Booking, booking_id)
            if current.settlement_applied or current.payment_status != "unpaid":
                current_app.logger.warning("Concurrent settlement for booking %s detected; no-op", booking_id)
                return current, True
            raise StateConflictError(f"Booking is already {current.status}.", 409)

        try:
            EarningsLedger.credit(partner_id, split.partner_earning)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        current_app.logger.info(
            "Booking %s settled by payment %s: commission %s (rate %s), partner earning %s",
            booking_id,
            payment_id,
            split.platform_commission,
            split.rate,
            split.partner_earning,
        )

        db.session.expire_all()
        settled = db.session.get(Booking, booking_id)
        NotificationService.payment_completed(settled)
        return settled, False
