# storefront/services/payments.py
"""Payment processing service.

Integrates with the Razorpay REST API. The frontend opens the checkout with
the gateway order id and key id returned here, then posts the signed result
back to verify_signature().
"""

import hashlib
import hmac
import logging
from typing import Optional

import httpx

from storefront.config import Settings
from storefront.errors import PaymentGatewayError, ValidationError

logger = logging.getLogger(__name__)


class PaymentGateway:
    """Handles Razorpay order creation and signature checks."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        self.key_id = settings.razorpay_key_id
        self.key_secret = settings.razorpay_key_secret
        self.client = client or httpx.Client(
            base_url=settings.razorpay_api_url,
            auth=(self.key_id, self.key_secret),
            timeout=10.0,
        )

    def create_order(self, amount: float, currency: str = "INR", receipt: Optional[str] = None) -> dict:
        """Create a gateway order. `amount` is in rupees; the gateway wants paise."""
        if not amount or amount <= 0:
            raise ValidationError("Invalid amount")

        payload = {
            "amount": int(round(amount * 100)),
            "currency": currency,
            "receipt": receipt or "",
            "payment_capture": 1,
        }
        try:
            response = self.client.post("/orders", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Razorpay order creation failed: %s", e)
            raise PaymentGatewayError(f"Failed to create payment order: {e}")

        order = response.json()
        logger.info("Razorpay order %s created for %s %s", order.get("id"), payload["amount"], currency)
        return {
            "order_id": order["id"],
            "amount": order["amount"],
            "currency": order["currency"],
            "key_id": self.key_id,
        }

    def verify_signature(self, order_id: Optional[str], payment_id: Optional[str], signature: Optional[str]) -> dict:
        if not (order_id and payment_id and signature):
            raise ValidationError("Missing payment verification parameters")

        expected = hmac.new(
            self.key_secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256
        ).hexdigest()
        if not hmac.compare_digest(expected, signature):
            logger.warning("Payment signature mismatch for order %s", order_id)
            raise ValidationError("Payment verification failed")

        return {"order_id": order_id, "payment_id": payment_id}
