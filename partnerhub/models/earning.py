from partnerhub.extensions import db
from partnerhub.models.base import Money, PKType, TimestampMixin


class PartnerEarnings(TimestampMixin, db.Model):
    __tablename__ = "partner_earnings"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    partner_id = db.Column(PKType, db.ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, unique=True)
    total_earnings = db.Column(Money, nullable=False, default=0)
    available_balance = db.Column(Money, nullable=False, default=0)
    total_withdrawn = db.Column(Money, nullable=False, default=0)
    pending_withdrawals = db.Column(Money, nullable=False, default=0)
    last_withdrawal_at = db.Column(db.DateTime(timezone=True), nullable=True)

    partner = db.relationship("Partner", back_populates="earnings")

    @property
    def withdrawable_balance(self):
        return (self.available_balance or 0) - (self.pending_withdrawals or 0)
