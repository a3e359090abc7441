# storefront/models.py

"""
The Contract: Define what our data looks like
Table classes are persisted, the *Read classes are what the API returns.
Timestamps are timezone-aware UTC, money is Decimal with two places.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Optional, List
from enum import Enum

from pydantic import PlainSerializer
from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel, Field, Relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """DateTime column that always binds and returns aware UTC values.
    SQLite keeps no offset, so values read back naive get UTC attached."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


# JSON clients get plain numbers, Python code keeps exact Decimal arithmetic
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# --- 1. Enums ---
# Enums restrict data to specific values. This prevents "typo" bugs in your data.
class OrderStatus(str, Enum):
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"

class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

class Role(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


# --- 2. Database Tables ---

class Account(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True) # Index makes searching by email fast
    password_hash: str
    full_name: str
    phone_number: str
    profile_picture: Optional[str] = None
    is_verified: bool = Field(default=False)
    role: Role = Field(default=Role.CUSTOMER)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    # "Relationship" allows us to do account.orders later
    orders: List["Order"] = Relationship(back_populates="account")

class VerificationCode(SQLModel, table=True):
    """
    One-time code sent by email.
    Only the newest row per account matters: issuing a code deletes the older ones.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: int = Field(foreign_key="account.id", index=True)
    code: str = Field(max_length=6)
    expires_at: datetime = Field(sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

class ResendAttempt(SQLModel, table=True):
    """
    Audit trail of accepted code resends.
    Never deleted by verification, so the resend quota cannot be reset by it.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: int = Field(foreign_key="account.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)

class IssuedCode(SQLModel, table=True):
    """Every code ever sent to an account. A resend never repeats one of these."""
    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: int = Field(foreign_key="account.id", index=True)
    code: str = Field(max_length=6)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # Foreign Keys link tables together
    account_id: int = Field(foreign_key="account.id", index=True)
    order_number: str = Field(unique=True, index=True)
    status: OrderStatus = Field(default=OrderStatus.PROCESSING)

    subtotal: Decimal = Field(max_digits=12, decimal_places=2)
    shipping_cost: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    tax: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    total: Decimal = Field(max_digits=12, decimal_places=2)

    # Denormalized shipping address
    shipping_full_name: str
    shipping_email: str
    shipping_phone: str
    shipping_address: str
    shipping_city: str
    shipping_state: str
    shipping_zip_code: str
    shipping_country: str

    payment_method: str
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING)
    payment_reference: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    account: Account = Relationship(back_populates="orders")
    items: List["OrderItem"] = Relationship(
        back_populates="order", sa_relationship_kwargs={"order_by": "OrderItem.id"}
    )

class OrderItem(SQLModel, table=True):
    """Product snapshot taken at order time, not a live link to the catalog."""
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    product_id: str
    product_name: str
    product_image: Optional[str] = None
    product_category: Optional[str] = None
    quantity: int
    price: Decimal = Field(max_digits=12, decimal_places=2)
    subtotal: Decimal = Field(max_digits=12, decimal_places=2)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    order: Order = Relationship(back_populates="items")


# --- 3. Read Models ---

class AccountProfile(SQLModel):
    id: int
    email: str
    full_name: str
    phone_number: str
    profile_picture: Optional[str] = None
    created_at: datetime

class OrderItemRead(SQLModel):
    id: int
    product_id: str
    product_name: str
    product_image: Optional[str] = None
    product_category: Optional[str] = None
    quantity: int
    price: Money
    subtotal: Money
    created_at: datetime

class OrderRead(SQLModel):
    id: int
    account_id: int
    order_number: str
    status: OrderStatus
    subtotal: Money
    shipping_cost: Money
    tax: Money
    total: Money
    shipping_full_name: str
    shipping_email: str
    shipping_phone: str
    shipping_address: str
    shipping_city: str
    shipping_state: str
    shipping_zip_code: str
    shipping_country: str
    payment_method: str
    payment_status: PaymentStatus
    payment_reference: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class OrderWithItems(OrderRead):
    items: List[OrderItemRead] = []

class OrderStats(SQLModel):
    total_orders: int = 0
    processing: int = 0
    confirmed: int = 0
    shipped: int = 0
    delivered: int = 0
    cancelled: int = 0
    returned: int = 0
    total_revenue: float = 0
    average_order_value: float = 0
