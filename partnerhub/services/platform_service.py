from decimal import Decimal, InvalidOperation

from flask import current_app

from partnerhub.extensions import db
from partnerhub.models import PlatformSetting


class PlatformService:
    @staticmethod
    def get_setting(key, default=None):
        setting = db.session.get(PlatformSetting, key)
        if not setting:
            return default
        return setting.value

    @staticmethod
    def get_decimal(key, default):
        raw = PlatformService.get_setting(key, str(default))
        try:
            return Decimal(str(raw))
        except InvalidOperation:
            current_app.logger.warning("Ignoring non-numeric platform setting %s=%r", key, raw)
            return Decimal(str(default))

    @staticmethod
    def set_setting(key, value, updated_by_id=None, commit=True):
        setting = db.session.get(PlatformSetting, key)
        if setting:
            setting.value = str(value)
            setting.updated_by_id = updated_by_id
        else:
            setting = PlatformSetting(key=key, value=str(value), updated_by_id=updated_by_id)
            db.session.add(setting)
        if commit:
            db.session.commit()
        return setting
