from datetime import timedelta
from decimal import Decimal

import pytest

from partnerhub.errors import AuthorizationError, NotFoundError, StateConflictError, ValidationError
from partnerhub.models import Notification
from partnerhub.models.base import utcnow
from partnerhub.services import BookingService, UserService
from partnerhub.services.booking_service import parse_clock


def future_day(days=3):
    return (utcnow().date() + timedelta(days=days)).isoformat()


def test_parse_clock_returns_fractional_hours():
    assert parse_clock("14:30", "Start time") == Decimal("14.5")
    with pytest.raises(ValidationError):
        parse_clock("25:00", "Start time")


def test_create_booking_prices_from_hourly_rate(make_user, make_partner):
    payer = make_user()
    partner = make_partner(hourly_rate=500)

    booking = BookingService.create_booking(payer, partner.id, future_day(), "14:00", "16:00", "  See you there ")

    assert booking.total_amount == Decimal("1000.00")
    assert booking.status == "pending"
    assert booking.payment_status == "unpaid"
    assert booking.message == "See you there"
    notes = Notification.query.filter_by(user_id=partner.user_id, type="booking_created").all()
    assert len(notes) == 1
    assert notes[0].data == {"bookingId": booking.id}


def test_create_booking_handles_partial_hours(make_user, make_partner):
    booking = BookingService.create_booking(make_user(), make_partner().id, future_day(), "14:00", "15:30")

    assert booking.total_amount == Decimal("750.00")


@pytest.mark.parametrize(
    "start,end",
    [("16:00", "14:00"), ("14:00", "14:00"), ("2pm", "16:00")],
)
def test_create_booking_rejects_bad_times(make_user, make_partner, start, end):
    with pytest.raises(ValidationError):
        BookingService.create_booking(make_user(), make_partner().id, future_day(), start, end)


def test_create_booking_requires_all_fields(make_user, make_partner):
    with pytest.raises(ValidationError):
        BookingService.create_booking(make_user(), make_partner().id, None, "14:00", "16:00")


def test_create_booking_unknown_partner(make_user):
    with pytest.raises(NotFoundError):
        BookingService.create_booking(make_user(), 9999, future_day(), "14:00", "16:00")


def test_create_booking_unapproved_partner(make_user, make_partner):
    partner = make_partner(approval_status="pending")

    with pytest.raises(ValidationError):
        BookingService.create_booking(make_user(), partner.id, future_day(), "14:00", "16:00")


def test_cannot_book_yourself(make_user, make_partner):
    user = make_user(role="partner")
    partner = make_partner(user=user)

    with pytest.raises(ValidationError):
        BookingService.create_booking(user, partner.id, future_day(), "14:00", "16:00")


@pytest.mark.parametrize("partner_blocks", [True, False])
def test_blocked_users_cannot_book(make_user, make_partner, partner_blocks):
    payer = make_user()
    partner = make_partner()
    if partner_blocks:
        UserService.block_user(partner.user, payer.id)
    else:
        UserService.block_user(payer, partner.user_id)

    with pytest.raises(AuthorizationError):
        BookingService.create_booking(payer, partner.id, future_day(), "14:00", "16:00")


def test_partner_accepts_booking(make_user, make_partner, make_booking):
    payer = make_user()
    partner = make_partner()
    booking = make_booking(payer, partner)

    booking = BookingService.respond(booking.id, partner, "accept")

    assert booking.status == "confirmed"
    assert booking.confirmed_at is not None
    assert Notification.query.filter_by(user_id=payer.id, type="booking_accepted").count() == 1


def test_accepting_a_paid_booking_is_a_no_op(gateway, paid_booking):
    partner = paid_booking.partner
    notes_before = Notification.query.count()

    booking = BookingService.respond(paid_booking.id, partner, "accept")

    assert booking.status == "confirmed"
    assert booking.payment_status == "paid"
    assert Notification.query.filter_by(type="booking_accepted").count() == 0
    assert Notification.query.count() == notes_before


def test_partner_rejects_unpaid_booking_without_refund(gateway, make_user, make_partner, make_booking):
    payer = make_user()
    partner = make_partner()
    booking = make_booking(payer, partner)

    booking = BookingService.respond(booking.id, partner, "reject")

    assert booking.status == "cancelled"
    assert booking.payment_status == "unpaid"
    assert gateway.refunds == []
    assert Notification.query.filter_by(user_id=payer.id, type="booking_rejected").count() == 1


def test_only_the_booked_partner_can_respond(make_user, make_partner, make_booking):
    booking = make_booking(make_user(), make_partner())

    with pytest.raises(AuthorizationError):
        BookingService.respond(booking.id, make_partner(), "accept")


def test_respond_rejects_unknown_action(make_user, make_partner, make_booking):
    partner = make_partner()
    booking = make_booking(make_user(), partner)

    with pytest.raises(ValidationError):
        BookingService.respond(booking.id, partner, "maybe")


def test_respond_on_terminal_booking_conflicts(make_user, make_partner, make_booking):
    partner = make_partner()
    booking = make_booking(make_user(), partner, status="completed")

    with pytest.raises(StateConflictError):
        BookingService.respond(booking.id, partner, "accept")


def test_user_cancels_unpaid_booking(make_user, make_partner, make_booking):
    payer = make_user()
    booking = make_booking(payer, make_partner())

    booking = BookingService.cancel_booking(booking.id, payer)

    assert booking.status == "cancelled"
    assert booking.cancelled_at is not None


def test_only_the_owner_can_cancel(make_user, make_partner, make_booking):
    booking = make_booking(make_user(), make_partner())

    with pytest.raises(AuthorizationError):
        BookingService.cancel_booking(booking.id, make_user())


def test_cannot_cancel_completed_booking(make_user, make_partner, make_booking):
    payer = make_user()
    booking = make_booking(payer, make_partner(), status="completed")

    with pytest.raises(StateConflictError):
        BookingService.cancel_booking(booking.id, payer)


def test_cannot_cancel_past_booking(make_user, make_partner, make_booking):
    payer = make_user()
    booking = make_booking(payer, make_partner(), day=utcnow().date() - timedelta(days=1))

    with pytest.raises(StateConflictError):
        BookingService.cancel_booking(booking.id, payer)


def test_complete_requires_confirmed(make_user, make_partner, make_booking):
    partner = make_partner()
    booking = make_booking(make_user(), partner)

    with pytest.raises(StateConflictError):
        BookingService.complete_booking(booking.id, partner)

    BookingService.respond(booking.id, partner, "accept")
    booking = BookingService.complete_booking(booking.id, partner)

    assert booking.status == "completed"
    assert booking.completed_at is not None


def test_listings_are_scoped(make_user, make_partner, make_booking):
    payer = make_user()
    partner = make_partner()
    mine = make_booking(payer, partner)
    make_booking(make_user(), make_partner())

    assert [b.id for b in BookingService.list_for_user(payer.id)] == [mine.id]
    assert [b.id for b in BookingService.list_for_partner(partner.id)] == [mine.id]
