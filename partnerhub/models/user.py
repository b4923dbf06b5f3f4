from datetime import datetime, timezone

from flask_login import UserMixin

from partnerhub.extensions import db
from partnerhub.models.base import PKType, TimestampMixin

user_blocks = db.Table(
    "user_blocks",
    db.Column("blocker_id", PKType, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    db.Column("blocked_id", PKType, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class User(UserMixin, TimestampMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    full_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    role = db.Column(db.String(24), nullable=False, default="user", index=True)
    is_premium = db.Column(db.Boolean, nullable=False, default=False)
    premium_expiry = db.Column(db.DateTime(timezone=True), nullable=True)
    is_active_user = db.Column(db.Boolean, nullable=False, default=True)

    partner_profile = db.relationship("Partner", back_populates="user", uselist=False)
    bookings = db.relationship("Booking", back_populates="user", lazy="dynamic")
    notifications = db.relationship("Notification", back_populates="user", lazy="dynamic")
    wallet = db.relationship("Wallet", back_populates="user", uselist=False)
    blocked_users = db.relationship(
        "User",
        secondary=user_blocks,
        primaryjoin=id == user_blocks.c.blocker_id,
        secondaryjoin=id == user_blocks.c.blocked_id,
        lazy="dynamic",
    )

    @property
    def is_active(self):
        return self.is_active_user

    def has_active_premium(self, at=None):
        if not self.is_premium or self.premium_expiry is None:
            return False
        at = at or datetime.now(timezone.utc)
        expiry = self.premium_expiry
        # SQLite hands back naive datetimes even for timezone-aware columns.
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return expiry > at

    def has_blocked(self, other_user_id):
        row = (
            db.session.query(user_blocks)
            .filter_by(blocker_id=self.id, blocked_id=other_user_id)
            .first()
        )
        return row is not None
