"""External payment gateway boundary.

The rest of the application talks to :class:`PaymentGateway`; the Razorpay SDK
only appears here. The active gateway lives in ``app.extensions`` so tests and
other deployments can install a different implementation.
"""

import json
from collections import namedtuple

import razorpay
import requests
from flask import current_app
from razorpay.errors import BadRequestError, GatewayError, ServerError, SignatureVerificationError

from partnerhub.errors import ExternalServiceError, PaymentsDisabledError, ValidationError
from partnerhub.models.base import to_money

EXTENSION_KEY = "payment_gateway"

WebhookEvent = namedtuple("WebhookEvent", ["event_type", "order_id", "payment_id"])

_GATEWAY_ERRORS = (
    BadRequestError,
    GatewayError,
    ServerError,
    requests.RequestException,
)


def to_subunits(amount):
    return int((to_money(amount) * 100).to_integral_value())


class PaymentGateway:
    def create_order(self, amount, currency, reference):
        """Register an order for ``amount`` and return the gateway's order id."""
        raise NotImplementedError

    def verify_signature(self, order_id, payment_id, signature):
        raise NotImplementedError

    def refund(self, payment_id, amount):
        """Refund ``amount`` of a captured payment and return the refund id."""
        raise NotImplementedError

    def parse_webhook(self, body, signature):
        """Authenticate a raw webhook body and return a :class:`WebhookEvent`."""
        raise NotImplementedError


class RazorpayGateway(PaymentGateway):
    def __init__(self, key_id, key_secret, webhook_secret=None):
        self.key_id = key_id
        self.webhook_secret = webhook_secret
        self.client = razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount, currency, reference):
        try:
            order = self.client.order.create(
                {"amount": to_subunits(amount), "currency": currency, "receipt": reference}
            )
        except _GATEWAY_ERRORS as exc:
            raise ExternalServiceError("Failed to create payment order.") from exc
        return order["id"]

    def verify_signature(self, order_id, payment_id, signature):
        try:
            self.client.utility.verify_payment_signature(
                {
                    "razorpay_order_id": order_id,
                    "razorpay_payment_id": payment_id,
                    "razorpay_signature": signature,
                }
            )
        except SignatureVerificationError:
            return False
        return True

    def refund(self, payment_id, amount):
        try:
            refund = self.client.payment.refund(payment_id, {"amount": to_subunits(amount)})
        except _GATEWAY_ERRORS as exc:
            raise ExternalServiceError(f"Refund failed for payment {payment_id}.") from exc
        return refund["id"]

    def parse_webhook(self, body, signature):
        if not self.webhook_secret:
            raise PaymentsDisabledError("Payment webhook secret is not configured on the server")
        if not signature:
            raise ValidationError("Missing webhook signature.")
        text = body.decode("utf-8") if isinstance(body, bytes) else body
        try:
            self.client.utility.verify_webhook_signature(text, signature, self.webhook_secret)
        except SignatureVerificationError as exc:
            raise ValidationError("Invalid webhook signature.") from exc
        return parse_webhook_payload(text)


def parse_webhook_payload(text):
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise ValidationError("Malformed webhook payload.") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Malformed webhook payload.")
    entity = ((payload.get("payload") or {}).get("payment") or {}).get("entity") or {}
    return WebhookEvent(payload.get("event"), entity.get("order_id"), entity.get("id"))


def init_payment_gateway(app):
    key_id = app.config.get("RAZORPAY_KEY_ID")
    key_secret = app.config.get("RAZORPAY_KEY_SECRET")
    if not key_id or not key_secret:
        app.logger.warning("Razorpay keys not configured; payment features are disabled")
        return None
    gateway = RazorpayGateway(key_id, key_secret, app.config.get("RAZORPAY_WEBHOOK_SECRET"))
    app.extensions[EXTENSION_KEY] = gateway
    app.logger.info("Razorpay gateway initialized")
    return gateway


def get_gateway():
    gateway = current_app.extensions.get(EXTENSION_KEY)
    if gateway is None:
        raise PaymentsDisabledError()
    return gateway

