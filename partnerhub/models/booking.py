from partnerhub.extensions import db
from partnerhub.models.base import Money, PKType, TimestampMixin

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")
PAYMENT_STATUSES = ("unpaid", "paid", "refunded")


class Booking(TimestampMixin, db.Model):
    __tablename__ = "bookings"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    partner_id = db.Column(PKType, db.ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)

    date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.String(5), nullable=False)
    end_time = db.Column(db.String(5), nullable=False)
    message = db.Column(db.Text, nullable=True)
    total_amount = db.Column(Money, nullable=False)

    status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    payment_status = db.Column(db.String(24), nullable=False, default="unpaid", index=True)
    razorpay_order_id = db.Column(db.String(64), nullable=True, unique=True, index=True)
    razorpay_payment_id = db.Column(db.String(64), nullable=True, unique=True, index=True)
    refund_id = db.Column(db.String(64), nullable=True)

    platform_commission = db.Column(Money, nullable=True)
    partner_earning = db.Column(Money, nullable=True)
    commission_rate = db.Column(db.Numeric(5, 4), nullable=True)
    settlement_applied = db.Column(db.Boolean, nullable=False, default=False)

    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)
    confirmed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    cancelled_at = db.Column(db.DateTime(timezone=True), nullable=True)
    refunded_at = db.Column(db.DateTime(timezone=True), nullable=True)

    user = db.relationship("User", back_populates="bookings")
    partner = db.relationship("Partner", back_populates="bookings")

    __table_args__ = (
        db.Index("ix_bookings_user_status", "user_id", "status"),
        db.Index("ix_bookings_partner_status", "partner_id", "status"),
        db.CheckConstraint("total_amount > 0", name="ck_booking_total_positive"),
    )
