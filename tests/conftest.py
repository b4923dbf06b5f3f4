"""Shared fixtures: in-memory app, fake payment gateway, entity factories."""

import hashlib
import hmac
import json
from datetime import timedelta
from decimal import Decimal

import pytest
from flask import g

from partnerhub import create_app
from partnerhub.errors import ExternalServiceError, ValidationError
from partnerhub.extensions import db as _db
from partnerhub.models import Booking, Partner, User, Wallet
from partnerhub.models.base import utcnow
from partnerhub.services import PaymentService
from partnerhub.services.payment_gateway import EXTENSION_KEY, PaymentGateway, parse_webhook_payload


def hmac_hex(secret, message):
    if isinstance(message, str):
        message = message.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


class FakeGateway(PaymentGateway):
    def __init__(self, key_secret="test-key-secret", webhook_secret="test-webhook-secret"):
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret
        self.orders = []
        self.refunds = []
        self.fail_refunds = False

    def create_order(self, amount, currency, reference):
        order_id = f"order_{len(self.orders) + 1}"
        self.orders.append({"id": order_id, "amount": amount, "currency": currency, "receipt": reference})
        return order_id

    def sign(self, order_id, payment_id):
        return hmac_hex(self.key_secret, f"{order_id}|{payment_id}")

    def verify_signature(self, order_id, payment_id, signature):
        return hmac.compare_digest(self.sign(order_id, payment_id), signature or "")

    def refund(self, payment_id, amount):
        if self.fail_refunds:
            raise ExternalServiceError(f"Refund failed for payment {payment_id}.")
        self.refunds.append((payment_id, amount))
        return f"rfnd_{len(self.refunds)}"

    def webhook(self, event, order_id, payment_id):
        body = json.dumps(
            {
                "event": event,
                "payload": {"payment": {"entity": {"id": payment_id, "order_id": order_id}}},
            }
        ).encode("utf-8")
        return body, hmac_hex(self.webhook_secret, body)

    def parse_webhook(self, body, signature):
        if not signature or not hmac.compare_digest(hmac_hex(self.webhook_secret, body), signature):
            raise ValidationError("Invalid webhook signature.")
        return parse_webhook_payload(body.decode("utf-8"))


@pytest.fixture
def app():
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    _db.drop_all()
    _db.create_all()
    yield app
    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def gateway(app):
    fake = FakeGateway()
    app.extensions[EXTENSION_KEY] = fake
    return fake


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(user):
        with client.session_transaction() as sess:
            sess["_user_id"] = str(user.id)
            sess["_fresh"] = True
        # The app context outlives requests in tests; drop the cached user.
        g.pop("_login_user", None)
        return client

    return _login


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(email=None, role="user", premium=False, premium_days=30):
        counter["n"] += 1
        user = User(
            full_name=f"Test User {counter['n']}",
            email=email or f"user{counter['n']}@example.com",
            role=role,
            is_premium=premium,
            premium_expiry=utcnow() + timedelta(days=premium_days) if premium else None,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def make_partner(db, make_user):
    def _make_partner(hourly_rate=500, approval_status="approved", user=None):
        user = user or make_user(role="partner")
        partner = Partner(
            user_id=user.id,
            bio="Friendly companion for city walks and museum visits.",
            city="Chennai",
            hourly_rate=Decimal(str(hourly_rate)),
            approval_status=approval_status,
        )
        db.session.add(partner)
        db.session.commit()
        return partner

    return _make_partner


@pytest.fixture
def make_booking(db):
    def _make_booking(user, partner, total_amount=1000, status="pending", day=None, start="14:00", end="16:00"):
        booking = Booking(
            user_id=user.id,
            partner_id=partner.id,
            date=day or utcnow().date() + timedelta(days=1),
            start_time=start,
            end_time=end,
            total_amount=Decimal(str(total_amount)),
            status=status,
            payment_status="unpaid",
        )
        db.session.add(booking)
        db.session.commit()
        return booking

    return _make_booking


@pytest.fixture
def fund_wallet(db):
    def _fund_wallet(user, balance):
        wallet = Wallet.query.filter_by(user_id=user.id).first()
        if not wallet:
            wallet = Wallet(user_id=user.id, balance=0)
            db.session.add(wallet)
        wallet.balance = Decimal(str(balance))
        db.session.commit()
        return wallet

    return _fund_wallet


@pytest.fixture
def paid_booking(gateway, make_user, make_partner, make_booking):
    """A booking settled through the verify path: 1000 total, standard payer."""
    payer = make_user()
    partner = make_partner()
    booking = make_booking(payer, partner)
    booking, _ = PaymentService.create_order(booking.id, payer)
    order_id = booking.razorpay_order_id
    booking, _ = PaymentService.verify_payment(order_id, "pay_1", gateway.sign(order_id, "pay_1"))
    return booking
