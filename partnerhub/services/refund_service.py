from flask import current_app

from partnerhub.errors import ExternalServiceError, RefundFailedError, StateConflictError
from partnerhub.extensions import db
from partnerhub.models import Booking
from partnerhub.models.base import to_money, utcnow
from partnerhub.services.booking_state import compare_and_set, ensure_transition
from partnerhub.services.earnings_service import EarningsLedger
from partnerhub.services.payment_gateway import get_gateway


class RefundService:
    @staticmethod
    def refund_and_cancel(booking):
        """Cancel a paid booking, refunding the payer and reversing the partner's earning.

        The booking row is claimed with a compare-and-set before the gateway is
        called, so a concurrent complete or duplicate cancel cannot slip in. If
        the gateway refuses, the claim is rolled back and the booking stays as
        it was (cancellation aborted).
        """
        ensure_transition(booking.status, "cancelled")
        if booking.payment_status != "paid":
            raise StateConflictError("Booking has no captured payment to refund.")

        # Read before the row is zeroed; the reversal must use this value.
        original_earning = to_money(booking.partner_earning) if booking.settlement_applied else to_money(0)
        booking_id = booking.id
        partner_id = booking.partner_id
        payment_id = booking.razorpay_payment_id
        total_amount = to_money(booking.total_amount)

        if original_earning > 0:
            EarningsLedger.ensure(partner_id)
            if not EarningsLedger.can_reverse(partner_id, original_earning):
                raise StateConflictError(
                    "Partner balance no longer covers this booking's earning; contact support.",
                    409,
                    bookingId=booking_id,
                )

        now = utcnow()
        claimed = compare_and_set(
            booking_id,
            [booking.status],
            ["paid"],
            {
                Booking.status: "cancelled",
                Booking.payment_status: "refunded",
                Booking.platform_commission: 0,
                Booking.partner_earning: 0,
                Booking.cancelled_at: now,
                Booking.refunded_at: now,
            },
        )
        if not claimed:
            db.session.rollback()
            raise StateConflictError("Booking was modified concurrently. Please retry.", 409)

        try:
            refund_id = get_gateway().refund(payment_id, total_amount)
        except ExternalServiceError as exc:
            db.session.rollback()
            current_app.logger.error(
                "Refund failed for booking %s (payment %s, amount %s): %s",
                booking_id,
                payment_id,
                total_amount,
                exc.message,
            )
            raise RefundFailedError(
                "Refund could not be processed; the booking was not cancelled.",
                bookingId=booking_id,
                paymentId=payment_id,
            ) from exc

        try:
            Booking.query.filter_by(id=booking_id).update({Booking.refund_id: refund_id}, synchronize_session=False)
            if original_earning > 0:
                EarningsLedger.reverse(partner_id, original_earning)
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.error(
                "Refund %s issued for booking %s but local state was not updated; reconcile manually",
                refund_id,
                booking_id,
            )
            raise

        current_app.logger.info(
            "Booking %s cancelled with refund %s of %s; reversed partner %s earning %s",
            booking_id,
            refund_id,
            total_amount,
            partner_id,
            original_earning,
        )
        db.session.expire_all()
        return db.session.get(Booking, booking_id)
