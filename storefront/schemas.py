"""
Request bodies for the Storefront API.

Field rules mirror what the storefront frontend enforces:
- email: valid address
- password: at least 8 characters with a lower case letter, an upper case letter and a digit
- phone: E.164 (e.g. +12345678901)
- otp: exactly six digits
"""
import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"


def check_password_strength(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not (re.search(r"[a-z]", value) and re.search(r"[A-Z]", value) and re.search(r"\d", value)):
        raise ValueError(
            "Password must contain at least one lowercase letter, one uppercase letter, and one digit"
        )
    return value


# --- Auth ---

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str = Field(..., min_length=2, max_length=255)
    phone_number: str = Field(..., pattern=PHONE_PATTERN)

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return check_password_strength(value)


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., pattern=r"^\d{6}$")


class ResendOtpRequest(BaseModel):
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# --- Users ---

class ProfileUpdateRequest(BaseModel):
    # Extra keys are kept so the route can reject an attempt to change the email
    model_config = ConfigDict(extra="allow")

    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    profile_picture: Optional[str] = Field(None, pattern=r"^https?://\S+$")


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return check_password_strength(value)


# --- Orders ---

class OrderItemIn(BaseModel):
    product_id: str
    product_name: str
    product_image: Optional[str] = None
    product_category: Optional[str] = None
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0)


class ShippingInfo(BaseModel):
    full_name: str
    email: EmailStr
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str


class PaymentInfo(BaseModel):
    method: str
    reference: Optional[str] = Field(None, description="Gateway payment id, when paid up front")


class CreateOrderRequest(BaseModel):
    items: List[OrderItemIn]
    shipping_cost: float = Field(0, ge=0)
    tax: float = Field(0, ge=0)
    # Optional client-side figures, cross-checked against the computed ones
    subtotal: Optional[float] = Field(None, ge=0)
    total: Optional[float] = None
    shipping_info: ShippingInfo
    payment_info: PaymentInfo


class ReturnRequest(BaseModel):
    reason: str = Field(..., min_length=1)
    comments: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: str


# --- Payments ---

class CreatePaymentOrderRequest(BaseModel):
    amount: float
    currency: str = "INR"
    receipt: Optional[str] = None


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
