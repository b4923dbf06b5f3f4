from partnerhub.extensions import db
from partnerhub.models.base import Money, PKType, TimestampMixin


class Wallet(TimestampMixin, db.Model):
    __tablename__ = "wallets"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    balance = db.Column(Money, nullable=False, default=0)

    user = db.relationship("User", back_populates="wallet")
    transactions = db.relationship(
        "WalletTransaction",
        back_populates="wallet",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.CheckConstraint("balance >= 0", name="ck_wallet_balance_non_negative"),
    )


class WalletTransaction(TimestampMixin, db.Model):
    __tablename__ = "wallet_transactions"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    wallet_id = db.Column(PKType, db.ForeignKey("wallets.id", ondelete="CASCADE"), nullable=False, index=True)
    type = db.Column(db.String(8), nullable=False)
    amount = db.Column(Money, nullable=False)
    reason = db.Column(db.String(255), nullable=False, default="")

    wallet = db.relationship("Wallet", back_populates="transactions")

    __table_args__ = (
        db.CheckConstraint("amount > 0", name="ck_wallet_txn_amount_positive"),
        db.CheckConstraint("type IN ('credit', 'debit')", name="ck_wallet_txn_type"),
    )
