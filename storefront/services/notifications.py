# storefront/services/notifications.py
"""
Outbound email and SMS.

Without SMTP credentials the Notifier runs in development mode: messages are
written to the log instead of being sent. SMS has no provider yet and is
always logged.

Order notifications are best-effort. Schedule them through
dispatch_best_effort() so a failing mail server never fails an order.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from storefront.config import Settings
from storefront.models import OrderStatus, OrderWithItems

logger = logging.getLogger(__name__)

BRAND = "AuraXpress"

STATUS_MESSAGES = {
    OrderStatus.CONFIRMED: ("Order Confirmed", "Your order has been confirmed and is being prepared for shipment."),
    OrderStatus.SHIPPED: ("Order Shipped", "Your order has been shipped and is on its way to you!"),
    OrderStatus.DELIVERED: ("Order Delivered", "Your order has been successfully delivered. We hope you enjoy your purchase!"),
    OrderStatus.CANCELLED: ("Order Cancelled", "Your order has been cancelled. Refund will be processed within 5-7 business days."),
    OrderStatus.RETURNED: (
        "Return Request Received",
        "Your return request has been received. Refund will be processed within 5-7 business days after we receive the item.",
    ),
}


class Notifier:
    def __init__(self, settings: Settings):
        self.settings = settings

    # --- Email primitives ---

    def _send_email(self, to: str, subject: str, body: str) -> None:
        if not self.settings.email_enabled:
            logger.info("[DEV EMAIL] To: %s | Subject: %s\n%s", to, subject, body)
            return

        message = EmailMessage()
        message["From"] = self.settings.email_from or self.settings.email_user
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as smtp:
            smtp.starttls()
            smtp.login(self.settings.email_user, self.settings.email_password)
            smtp.send_message(message)
        logger.info("Email sent to %s: %s", to, subject)

    # --- Identity ---

    def send_verification_code(self, email: str, code: str, expiry_minutes: int) -> None:
        body = (
            f"Thank you for registering with {BRAND}!\n\n"
            f"Your One-Time Password (OTP) for email verification is: {code}\n\n"
            f"This code expires in {expiry_minutes} minutes. "
            "If you did not create an account, you can ignore this email."
        )
        self._send_email(email, f"{BRAND} - Email Verification OTP", body)

    # --- Orders ---

    def send_order_confirmation(self, order: OrderWithItems) -> None:
        lines = [
            f"Hi {order.shipping_full_name},",
            "",
            "Thank you for your order! It has been placed and is being processed.",
            "",
            f"Order Number: {order.order_number}",
            f"Order Date: {order.created_at:%Y-%m-%d}",
            "",
        ]
        for item in order.items:
            lines.append(f"  {item.product_name} x{item.quantity} @ {item.price:.2f} = {item.subtotal:.2f}")
        shipping = "Free" if order.shipping_cost == 0 else f"{order.shipping_cost:.2f}"
        lines += [
            "",
            f"Subtotal: {order.subtotal:.2f}",
            f"Shipping: {shipping}",
            f"Tax: {order.tax:.2f}",
            f"Total: {order.total:.2f}",
            "",
            "Shipping to:",
            f"  {order.shipping_address}",
            f"  {order.shipping_city}, {order.shipping_state} {order.shipping_zip_code}",
            f"  {order.shipping_country}",
            "",
            "We'll send you another email when your order ships.",
        ]
        self._send_email(order.shipping_email, f"Order Confirmation - {order.order_number}", "\n".join(lines))

    def send_status_update(self, order: OrderWithItems, old_status: str, note: Optional[str] = None) -> None:
        info = STATUS_MESSAGES.get(order.status)
        if info is None:
            # No customer-facing copy for "processing"
            return
        title, text = info
        lines = [
            f"Hi {order.shipping_full_name},",
            "",
            text,
            "",
            f"Order Number: {order.order_number}",
            f"Status: {old_status} -> {order.status.value}",
            f"Total: {order.total:.2f}",
        ]
        if note:
            lines += ["", note]
        self._send_email(order.shipping_email, f"{title} - {order.order_number}", "\n".join(lines))

    def send_sms(self, phone: str, order_number: str, status: str) -> None:
        logger.info("[DEV SMS] To: %s | Your %s order %s is now %s.", phone, BRAND, order_number, status)


def dispatch_best_effort(func, *args, **kwargs) -> None:
    """Run a notification call; log and swallow any failure."""
    try:
        func(*args, **kwargs)
    except Exception:
        logger.warning("Notification %s failed", getattr(func, "__name__", func), exc_info=True)
