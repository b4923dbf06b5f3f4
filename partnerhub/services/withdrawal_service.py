from decimal import Decimal, InvalidOperation

from flask import current_app

from partnerhub.errors import AppError, NotFoundError, StateConflictError, ValidationError
from partnerhub.extensions import db
from partnerhub.models import WithdrawalRequest
from partnerhub.models.base import to_money, utcnow
from partnerhub.services.earnings_service import EarningsLedger

RESOLUTION_STATUSES = frozenset({"approved", "rejected", "paid"})


def parse_amount(value):
    try:
        amount = to_money(Decimal(str(value)))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("Invalid amount.") from exc
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Invalid amount.")
    return amount


class WithdrawalService:
    @staticmethod
    def get_earnings(partner):
        return EarningsLedger.ensure(partner.id)

    @staticmethod
    def request_withdrawal(partner, amount, upi_id):
        amount = parse_amount(amount)
        upi_id = (upi_id or "").strip()
        if not upi_id:
            raise ValidationError("UPI id is required.")

        EarningsLedger.ensure(partner.id)
        withdrawal = WithdrawalRequest(partner_id=partner.id, amount=amount, upi_id=upi_id, status="pending")
        db.session.add(withdrawal)
        try:
            db.session.flush()
            EarningsLedger.reserve(partner.id, amount)
            db.session.commit()
        except AppError:
            db.session.rollback()
            raise
        current_app.logger.info(
            "Withdrawal %s of %s requested by partner %s", withdrawal.id, amount, partner.id
        )
        return withdrawal

    @staticmethod
    def resolve_withdrawal(withdrawal_id, status, admin_notes=None):
        """Single-shot admin decision on a pending request.

        ``paid`` moves the reserved amount out of the balance, ``rejected``
        releases the reservation, ``approved`` only records the decision and
        leaves the amount reserved.
        """
        status = (status or "").strip().lower()
        if status not in RESOLUTION_STATUSES:
            raise ValidationError("Status must be one of approved, rejected or paid.")

        withdrawal = db.session.get(WithdrawalRequest, withdrawal_id)
        if not withdrawal:
            raise NotFoundError("Withdrawal request not found.")

        values = {
            WithdrawalRequest.status: status,
            WithdrawalRequest.processed_at: utcnow(),
        }
        if admin_notes is not None:
            values[WithdrawalRequest.admin_notes] = (admin_notes or "").strip() or None

        try:
            updated = (
                WithdrawalRequest.query.filter_by(id=withdrawal.id, status="pending")
                .update(values, synchronize_session=False)
            )
            if not updated:
                raise StateConflictError("Withdrawal request has already been processed.")
            if status == "paid":
                EarningsLedger.settle_withdrawal(withdrawal.partner_id, withdrawal.amount)
            elif status == "rejected":
                EarningsLedger.release(withdrawal.partner_id, withdrawal.amount)
            db.session.commit()
        except AppError:
            db.session.rollback()
            raise

        current_app.logger.info(
            "Withdrawal %s for partner %s resolved as %s", withdrawal.id, withdrawal.partner_id, status
        )
        db.session.refresh(withdrawal)
        return withdrawal

    @staticmethod
    def list_withdrawals(status=None):
        query = WithdrawalRequest.query.order_by(WithdrawalRequest.created_at.desc())
        if status:
            query = query.filter_by(status=status)
        return query.all()
