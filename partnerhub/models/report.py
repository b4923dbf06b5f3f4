from partnerhub.extensions import db
from partnerhub.models.base import PKType, TimestampMixin

REPORT_STATUSES = ("pending", "reviewed", "resolved", "rejected")


class Report(TimestampMixin, db.Model):
    __tablename__ = "reports"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    reporter_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reported_user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_id = db.Column(PKType, db.ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)
    reason = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    admin_notes = db.Column(db.Text, nullable=True)
    resolved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    reporter = db.relationship("User", foreign_keys=[reporter_id])
    reported_user = db.relationship("User", foreign_keys=[reported_user_id])
    booking = db.relationship("Booking")
