from partnerhub.extensions import db
from partnerhub.models.base import PKType, TimestampMixin


class PlatformSetting(TimestampMixin, db.Model):
    """Runtime overrides for tunables such as the commission rate table."""

    __tablename__ = "platform_settings"

    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.String(255), nullable=False)
    updated_by_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
