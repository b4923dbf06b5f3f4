from partnerhub.extensions import db
from partnerhub.models.base import Money, PKType, TimestampMixin

WITHDRAWAL_STATUSES = ("pending", "approved", "rejected", "paid")


class WithdrawalRequest(TimestampMixin, db.Model):
    __tablename__ = "withdrawal_requests"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    partner_id = db.Column(PKType, db.ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = db.Column(Money, nullable=False)
    upi_id = db.Column(db.String(120), nullable=False)
    status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    admin_notes = db.Column(db.Text, nullable=True)
    processed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    partner = db.relationship("Partner", back_populates="withdrawals")

    __table_args__ = (
        db.CheckConstraint("amount > 0", name="ck_withdrawal_amount_positive"),
    )
