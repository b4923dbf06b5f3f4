from partnerhub.services.booking_service import BookingService
from partnerhub.services.commission_service import CommissionService
from partnerhub.services.earnings_service import EarningsLedger
from partnerhub.services.notification_service import NotificationService
from partnerhub.services.partner_service import PartnerService
from partnerhub.services.payment_service import PaymentService
from partnerhub.services.platform_service import PlatformService
from partnerhub.services.refund_service import RefundService
from partnerhub.services.report_service import ReportService
from partnerhub.services.user_service import UserService
from partnerhub.services.wallet_service import WalletService
from partnerhub.services.withdrawal_service import WithdrawalService

__all__ = [
    "BookingService",
    "CommissionService",
    "EarningsLedger",
    "NotificationService",
    "PartnerService",
    "PaymentService",
    "PlatformService",
    "RefundService",
    "ReportService",
    "UserService",
    "WalletService",
    "WithdrawalService",
]
