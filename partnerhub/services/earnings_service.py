"""Partner earnings ledger.

Every counter moves through a single conditional ``UPDATE`` with SQL-side
arithmetic, so concurrent settlements, refunds and withdrawals never lose an
increment. Callers own the transaction: nothing here commits except
:meth:`EarningsLedger.ensure`, which has to run before the caller starts
mutating anything else.

Invariant after every mutation::

    available_balance == total_earnings - total_withdrawn
    0 <= pending_withdrawals <= available_balance
"""

from flask import current_app
from sqlalchemy.exc import IntegrityError

from partnerhub.errors import LedgerIntegrityError, StateConflictError
from partnerhub.extensions import db
from partnerhub.models import PartnerEarnings
from partnerhub.models.base import to_money, utcnow


class EarningsLedger:
    @staticmethod
    def ensure(partner_id):
        earnings = PartnerEarnings.query.filter_by(partner_id=partner_id).first()
        if earnings:
            return earnings
        earnings = PartnerEarnings(
            partner_id=partner_id,
            total_earnings=0,
            available_balance=0,
            total_withdrawn=0,
            pending_withdrawals=0,
        )
        db.session.add(earnings)
        try:
            db.session.commit()
        except IntegrityError:
            # Another request created it first.
            db.session.rollback()
            earnings = PartnerEarnings.query.filter_by(partner_id=partner_id).one()
        return earnings

    @staticmethod
    def check_invariant(earnings):
        total = to_money(earnings.total_earnings)
        available = to_money(earnings.available_balance)
        withdrawn = to_money(earnings.total_withdrawn)
        pending = to_money(earnings.pending_withdrawals)
        if available != total - withdrawn or pending < 0 or pending > available:
            current_app.logger.error(
                "Earnings ledger invariant violated for partner %s: total=%s available=%s withdrawn=%s pending=%s",
                earnings.partner_id,
                total,
                available,
                withdrawn,
                pending,
            )
            raise LedgerIntegrityError("Earnings ledger is inconsistent.")

    @staticmethod
    def _apply(partner_id, values, *conditions):
        updated = (
            PartnerEarnings.query.filter(PartnerEarnings.partner_id == partner_id, *conditions)
            .update(values, synchronize_session=False)
        )
        if not updated:
            return None
        earnings = PartnerEarnings.query.filter_by(partner_id=partner_id).populate_existing().one()
        EarningsLedger.check_invariant(earnings)
        return earnings

    @staticmethod
    def credit(partner_id, amount):
        """Add a settled booking's partner earning."""
        amount = to_money(amount)
        earnings = EarningsLedger._apply(
            partner_id,
            {
                PartnerEarnings.total_earnings: PartnerEarnings.total_earnings + amount,
                PartnerEarnings.available_balance: PartnerEarnings.available_balance + amount,
            },
        )
        if earnings is None:
            raise LedgerIntegrityError(f"No earnings record for partner {partner_id}.")
        return earnings

    @staticmethod
    def can_reverse(partner_id, amount):
        earnings = PartnerEarnings.query.filter_by(partner_id=partner_id).first()
        if earnings is None:
            return False
        return to_money(earnings.withdrawable_balance) >= to_money(amount)

    @staticmethod
    def reverse(partner_id, amount):
        """Take back a refunded booking's partner earning."""
        amount = to_money(amount)
        earnings = EarningsLedger._apply(
            partner_id,
            {
                PartnerEarnings.total_earnings: PartnerEarnings.total_earnings - amount,
                PartnerEarnings.available_balance: PartnerEarnings.available_balance - amount,
            },
            PartnerEarnings.available_balance - PartnerEarnings.pending_withdrawals >= amount,
        )
        if earnings is None:
            raise StateConflictError("Partner balance no longer covers this booking's earning.", 409)
        return earnings

    @staticmethod
    def reserve(partner_id, amount):
        amount = to_money(amount)
        earnings = EarningsLedger._apply(
            partner_id,
            {PartnerEarnings.pending_withdrawals: PartnerEarnings.pending_withdrawals + amount},
            PartnerEarnings.available_balance - PartnerEarnings.pending_withdrawals >= amount,
        )
        if earnings is None:
            raise StateConflictError("Insufficient balance.")
        return earnings

    @staticmethod
    def release(partner_id, amount):
        amount = to_money(amount)
        earnings = EarningsLedger._apply(
            partner_id,
            {PartnerEarnings.pending_withdrawals: PartnerEarnings.pending_withdrawals - amount},
            PartnerEarnings.pending_withdrawals >= amount,
        )
        if earnings is None:
            raise LedgerIntegrityError(f"Withdrawal reservation missing for partner {partner_id}.")
        return earnings

    @staticmethod
    def settle_withdrawal(partner_id, amount):
        amount = to_money(amount)
        earnings = EarningsLedger._apply(
            partner_id,
            {
                PartnerEarnings.pending_withdrawals: PartnerEarnings.pending_withdrawals - amount,
                PartnerEarnings.total_withdrawn: PartnerEarnings.total_withdrawn + amount,
                PartnerEarnings.available_balance: PartnerEarnings.available_balance - amount,
                PartnerEarnings.last_withdrawal_at: utcnow(),
            },
            PartnerEarnings.pending_withdrawals >= amount,
        )
        if earnings is None:
            raise LedgerIntegrityError(f"Withdrawal reservation missing for partner {partner_id}.")
        return earnings
