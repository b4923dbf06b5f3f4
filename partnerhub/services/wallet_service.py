from flask import current_app
from sqlalchemy.exc import IntegrityError

from partnerhub.errors import AppError, NotFoundError, StateConflictError, ValidationError
from partnerhub.extensions import db
from partnerhub.models import User, Wallet, WalletTransaction
from partnerhub.services.withdrawal_service import parse_amount


class WalletService:
    @staticmethod
    def get_or_create_wallet(user_id):
        wallet = Wallet.query.filter_by(user_id=user_id).first()
        if wallet:
            return wallet
        db.session.add(Wallet(user_id=user_id, balance=0))
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
        return Wallet.query.filter_by(user_id=user_id).one()

    @staticmethod
    def recent_transactions(wallet, limit=50):
        return (
            wallet.transactions.order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def _debit(wallet_id, amount, reason):
        debited = (
            Wallet.query.filter(Wallet.id == wallet_id, Wallet.balance >= amount)
            .update({Wallet.balance: Wallet.balance - amount}, synchronize_session=False)
        )
        if not debited:
            raise StateConflictError("Insufficient balance.")
        db.session.add(WalletTransaction(wallet_id=wallet_id, type="debit", amount=amount, reason=reason))

    @staticmethod
    def _credit(wallet_id, amount, reason):
        Wallet.query.filter(Wallet.id == wallet_id).update(
            {Wallet.balance: Wallet.balance + amount}, synchronize_session=False
        )
        db.session.add(WalletTransaction(wallet_id=wallet_id, type="credit", amount=amount, reason=reason))

    @staticmethod
    def transfer(sender, recipient_email, amount):
        amount = parse_amount(amount)
        email = (recipient_email or "").strip().lower()
        if not email:
            raise ValidationError("Recipient email required.")

        recipient = User.query.filter_by(email=email).first()
        if not recipient:
            raise NotFoundError("Recipient not found.")
        if recipient.id == sender.id:
            raise ValidationError("Cannot transfer to yourself.")

        sender_wallet = WalletService.get_or_create_wallet(sender.id)
        if sender_wallet.balance < amount:
            raise StateConflictError("Insufficient balance.")
        recipient_wallet = WalletService.get_or_create_wallet(recipient.id)

        try:
            WalletService._debit(sender_wallet.id, amount, f"Transfer to {recipient.email}")
            WalletService._credit(recipient_wallet.id, amount, f"Transfer from {sender.email}")
            db.session.commit()
        except AppError:
            db.session.rollback()
            raise

        current_app.logger.info("Wallet transfer of %s from user %s to user %s", amount, sender.id, recipient.id)
        db.session.refresh(sender_wallet)
        return sender_wallet

    @staticmethod
    def withdraw(user, amount, bank_details):
        amount = parse_amount(amount)
        if not isinstance(bank_details, dict):
            bank_details = {}
        if not all(str(bank_details.get(field) or "").strip() for field in ("accountNumber", "ifsc", "accountHolder")):
            raise ValidationError("Bank details required.")

        wallet = WalletService.get_or_create_wallet(user.id)
        try:
            WalletService._debit(wallet.id, amount, "Withdrawal to bank")
            db.session.commit()
        except AppError:
            db.session.rollback()
            raise

        current_app.logger.info("Wallet withdrawal of %s by user %s", amount, user.id)
        db.session.refresh(wallet)
        return wallet
