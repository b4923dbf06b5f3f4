from partnerhub.models.booking import Booking
from partnerhub.models.earning import PartnerEarnings
from partnerhub.models.notification import Notification
from partnerhub.models.partner import Partner
from partnerhub.models.platform_setting import PlatformSetting
from partnerhub.models.report import Report
from partnerhub.models.user import User, user_blocks
from partnerhub.models.wallet import Wallet, WalletTransaction
from partnerhub.models.withdrawal import WithdrawalRequest

__all__ = [
    "User",
    "user_blocks",
    "Partner",
    "Booking",
    "PartnerEarnings",
    "WithdrawalRequest",
    "Wallet",
    "WalletTransaction",
    "Notification",
    "PlatformSetting",
    "Report",
]
