"""Platform/partner split of a booking total.

The rate table is injectable: defaults come from the application config and
admins can override them through platform settings without a deploy.
"""

from collections import namedtuple
from decimal import Decimal, InvalidOperation

from flask import current_app

from partnerhub.errors import ValidationError
from partnerhub.extensions import db
from partnerhub.models.base import to_money
from partnerhub.services.platform_service import PlatformService

PREMIUM_RATE_KEY = "commission_rate_premium"
STANDARD_RATE_KEY = "commission_rate_standard"

CommissionRates = namedtuple("CommissionRates", ["premium", "standard"])
CommissionSplit = namedtuple("CommissionSplit", ["platform_commission", "partner_earning", "rate"])


def calculate_commission(total_amount, payer_premium_active, rates):
    rate = Decimal(str(rates.premium if payer_premium_active else rates.standard))
    total = to_money(total_amount)
    platform_commission = to_money(total * rate)
    return CommissionSplit(platform_commission, total - platform_commission, rate)


def _validate_rate(value, label):
    try:
        rate = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"{label} commission rate must be a number.") from exc
    if rate < 0 or rate > 1:
        raise ValidationError(f"{label} commission rate must be between 0 and 1.")
    return rate


class CommissionService:
    @staticmethod
    def current_rates():
        config = current_app.config
        return CommissionRates(
            premium=PlatformService.get_decimal(PREMIUM_RATE_KEY, config["COMMISSION_RATE_PREMIUM"]),
            standard=PlatformService.get_decimal(STANDARD_RATE_KEY, config["COMMISSION_RATE_STANDARD"]),
        )

    @staticmethod
    def update_rates(premium, standard, updated_by_id=None):
        premium_rate = _validate_rate(premium, "Premium")
        standard_rate = _validate_rate(standard, "Standard")
        PlatformService.set_setting(PREMIUM_RATE_KEY, premium_rate, updated_by_id, commit=False)
        PlatformService.set_setting(STANDARD_RATE_KEY, standard_rate, updated_by_id, commit=False)
        current_app.logger.info(
            "Commission rates updated to premium=%s standard=%s by user %s",
            premium_rate,
            standard_rate,
            updated_by_id,
        )
        db.session.commit()
        return CommissionRates(premium_rate, standard_rate)

    @staticmethod
    def split_for(booking, payer):
        """Split a booking total using the payer's premium state right now."""
        return calculate_commission(booking.total_amount, payer.has_active_premium(), CommissionService.current_rates())
