# storefront/services/orders.py
"""
Order lifecycle.

    processing -> confirmed -> shipped -> delivered
    processing | confirmed -> cancelled        (owner or admin)
    delivered -> returned                      (owner, within RETURN_WINDOW_DAYS)
    cancelled, returned                        terminal for owners

Admins may force any status through update_status(); owners only get
cancel_order() and return_order(). An order owned by someone else is
reported exactly like a missing one.
"""

import logging
import random
import string
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, List, Optional

from sqlmodel import Session

from storefront.errors import InvalidStateError, NotFoundError, ValidationError
from storefront.models import (
    Order,
    OrderItem,
    OrderStats,
    OrderStatus,
    OrderWithItems,
    PaymentStatus,
    utcnow,
)
from storefront.repositories import OrderRepository
from storefront.schemas import OrderItemIn, PaymentInfo, ShippingInfo

logger = logging.getLogger(__name__)

RETURN_WINDOW_DAYS = 7
CENT = Decimal("0.01")

NOT_CANCELLABLE = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def generate_order_number(now) -> str:
    """ORD-<epoch ms>-<9 random upper case letters/digits>"""
    millis = int(now.timestamp() * 1000)
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=9))
    return f"ORD-{millis}-{suffix}"


def with_items(order: Order) -> OrderWithItems:
    return OrderWithItems.model_validate(order)


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError("Invalid order status")


class OrderService:
    def __init__(self, session: Session, clock: Callable = utcnow):
        self.session = session
        self.orders = OrderRepository(session)
        self.clock = clock

    # --- Creation ---

    def create_order(
        self,
        account_id: int,
        items: List[OrderItemIn],
        shipping_info: ShippingInfo,
        payment_info: PaymentInfo,
        shipping_cost: float = 0,
        tax: float = 0,
        subtotal: Optional[float] = None,
        total: Optional[float] = None,
    ) -> OrderWithItems:
        # All checks happen before anything touches the session
        if not items:
            raise ValidationError("Order must contain at least one item")
        for item in items:
            if item.quantity <= 0:
                raise ValidationError(f"Quantity for {item.product_name} must be greater than zero")
            if item.price < 0:
                raise ValidationError(f"Price for {item.product_name} cannot be negative")
        if shipping_cost < 0 or tax < 0:
            raise ValidationError("Shipping cost and tax cannot be negative")

        # Round each part to cents first, then add: the stored columns sum exactly
        prices = [money(item.price) for item in items]
        line_totals = [price * item.quantity for item, price in zip(items, prices)]
        computed_subtotal = sum(line_totals, Decimal("0.00"))
        shipping_cost = money(shipping_cost)
        tax = money(tax)
        computed_total = computed_subtotal + shipping_cost + tax

        if subtotal is not None and abs(money(subtotal) - computed_subtotal) > CENT:
            raise ValidationError("Order subtotal does not match its items")
        if total is not None and abs(money(total) - computed_total) > CENT:
            raise ValidationError("Order total must equal subtotal + shipping cost + tax")
        if computed_total <= 0:
            raise ValidationError("Order total must be greater than zero")

        now = self.clock()
        try:
            order = self.orders.add_order(
                Order(
                    account_id=account_id,
                    order_number=generate_order_number(now),
                    status=OrderStatus.PROCESSING,
                    subtotal=computed_subtotal,
                    shipping_cost=shipping_cost,
                    tax=tax,
                    total=computed_total,
                    shipping_full_name=shipping_info.full_name,
                    shipping_email=str(shipping_info.email),
                    shipping_phone=shipping_info.phone,
                    shipping_address=shipping_info.address,
                    shipping_city=shipping_info.city,
                    shipping_state=shipping_info.state,
                    shipping_zip_code=shipping_info.zip_code,
                    shipping_country=shipping_info.country,
                    payment_method=payment_info.method,
                    # Payment is captured by the gateway before the order exists
                    payment_status=PaymentStatus.COMPLETED,
                    payment_reference=payment_info.reference,
                    created_at=now,
                    updated_at=now,
                )
            )
            for item, price, line_total in zip(items, prices, line_totals):
                self.orders.add_item(
                    OrderItem(
                        order_id=order.id,
                        product_id=item.product_id,
                        product_name=item.product_name,
                        product_image=item.product_image,
                        product_category=item.product_category,
                        quantity=item.quantity,
                        price=price,
                        subtotal=line_total,
                        created_at=now,
                    )
                )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.session.refresh(order)
        logger.info("Order %s created for account %s (total %.2f)", order.order_number, account_id, order.total)
        return with_items(order)

    # --- Owner views ---

    def list_orders(self, account_id: int) -> List[OrderWithItems]:
        return [with_items(order) for order in self.orders.list_for(account_id)]

    def _get_owned(self, order_id: int, account_id: int) -> Order:
        order = self.orders.get_owned(order_id, account_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_order(self, order_id: int, account_id: int) -> OrderWithItems:
        return with_items(self._get_owned(order_id, account_id))

    # --- Admin views ---

    def list_all_orders(self) -> List[OrderWithItems]:
        return [with_items(order) for order in self.orders.list_all()]

    def get_order_admin(self, order_id: int) -> OrderWithItems:
        order = self.orders.get(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return with_items(order)

    def get_order_stats(self) -> OrderStats:
        return self.orders.stats()

    # --- Transitions ---

    def update_status(self, order_id: int, new_status) -> OrderWithItems:
        """Admin override: any enumerated status, no transition check."""
        status = parse_status(new_status)
        order = self.orders.get(order_id)
        if not order:
            raise NotFoundError("Order not found")

        old_status = order.status
        order = self.orders.set_status(order, status, self.clock())
        logger.info("Order %s status %s -> %s", order.order_number, old_status.value, status.value)
        return with_items(order)

    def cancel_order(self, order_id: int, account_id: int) -> OrderWithItems:
        order = self._get_owned(order_id, account_id)

        if order.status in NOT_CANCELLABLE:
            raise InvalidStateError("Cannot cancel order that has been shipped or delivered")
        if order.status == OrderStatus.CANCELLED:
            raise InvalidStateError("Order is already cancelled")
        if order.status == OrderStatus.RETURNED:
            raise InvalidStateError("Cannot cancel an order that has been returned")

        order = self.orders.set_status(order, OrderStatus.CANCELLED, self.clock())
        logger.info("Order %s cancelled by account %s", order.order_number, account_id)
        return with_items(order)

    def return_order(
        self, order_id: int, account_id: int, reason: str, comments: Optional[str] = None
    ) -> OrderWithItems:
        order = self._get_owned(order_id, account_id)

        if order.status != OrderStatus.DELIVERED:
            raise InvalidStateError("Only delivered orders can be returned")

        # updated_at is the moment the order entered "delivered"
        now = self.clock()
        days_since_delivery = (now - order.updated_at) // timedelta(days=1)
        if days_since_delivery > RETURN_WINDOW_DAYS:
            raise InvalidStateError(
                f"Return window has expired. Orders can only be returned within {RETURN_WINDOW_DAYS} days of delivery"
            )

        order = self.orders.set_status(order, OrderStatus.RETURNED, now)
        logger.info(
            "Order %s returned by account %s. Reason: %s. Comments: %s",
            order.order_number,
            account_id,
            reason,
            comments or "-",
        )
        return with_items(order)

    def request_status(self, order_id: int, account_id: int, new_status) -> OrderWithItems:
        """Owner-facing status change: only cancel and return are allowed."""
        status = parse_status(new_status)
        if status == OrderStatus.CANCELLED:
            return self.cancel_order(order_id, account_id)
        if status == OrderStatus.RETURNED:
            return self.return_order(order_id, account_id, reason="Requested via status update")

        self._get_owned(order_id, account_id)
        raise InvalidStateError(f"Customers cannot set an order to '{status.value}'")
