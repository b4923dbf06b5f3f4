"""Booking lifecycle rules shared by the booking, payment and refund services."""

from partnerhub.errors import StateConflictError
from partnerhub.models import Booking

BOOKING_TRANSITIONS = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}

TERMINAL_STATUSES = frozenset({"completed", "cancelled"})


def can_transition(current, new):
    return new in BOOKING_TRANSITIONS.get(current, frozenset())


def ensure_transition(current, new):
    if not can_transition(current, new):
        raise StateConflictError(f"Invalid status transition from {current} to {new}.")


def compare_and_set(booking_id, statuses, payment_statuses, values, *conditions):
    """Write ``values`` only if the persisted booking still matches the expected state.

    Returns True when the row was updated. The caller commits.
    """
    updated = (
        Booking.query.filter(
            Booking.id == booking_id,
            Booking.status.in_(list(statuses)),
            Booking.payment_status.in_(list(payment_statuses)),
            *conditions,
        )
        .update(values, synchronize_session=False)
    )
    return updated == 1
