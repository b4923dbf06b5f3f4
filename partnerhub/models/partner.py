from partnerhub.extensions import db
from partnerhub.models.base import Money, PKType, TimestampMixin

APPROVAL_STATUSES = ("pending", "approved", "rejected")


class Partner(TimestampMixin, db.Model):
    __tablename__ = "partners"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    bio = db.Column(db.Text, nullable=True)
    city = db.Column(db.String(120), nullable=True, index=True)
    hourly_rate = db.Column(Money, nullable=False)
    approval_status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    average_rating = db.Column(db.Numeric(3, 2), nullable=False, default=0)
    total_reviews = db.Column(db.Integer, nullable=False, default=0)

    user = db.relationship("User", back_populates="partner_profile")
    bookings = db.relationship("Booking", back_populates="partner", lazy="dynamic")
    earnings = db.relationship("PartnerEarnings", back_populates="partner", uselist=False)
    withdrawals = db.relationship("WithdrawalRequest", back_populates="partner", lazy="dynamic")

    __table_args__ = (
        db.CheckConstraint("hourly_rate > 0", name="ck_partner_hourly_rate_positive"),
    )
