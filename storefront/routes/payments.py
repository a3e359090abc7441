# storefront/routes/payments.py

from fastapi import APIRouter, Depends

from storefront.dependencies import get_current_account, get_payment_gateway
from storefront.models import Account
from storefront.schemas import CreatePaymentOrderRequest, VerifyPaymentRequest
from storefront.services.payments import PaymentGateway

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/create-order", status_code=201)
def create_payment_order(
    body: CreatePaymentOrderRequest,
    account: Account = Depends(get_current_account),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    return {"success": True, "data": gateway.create_order(body.amount, body.currency, body.receipt)}


@router.post("/verify")
def verify_payment(
    body: VerifyPaymentRequest,
    account: Account = Depends(get_current_account),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    result = gateway.verify_signature(body.razorpay_order_id, body.razorpay_payment_id, body.razorpay_signature)
    return {"success": True, "message": "Payment verified successfully", "data": result}


@router.get("/key")
def payment_key(
    account: Account = Depends(get_current_account),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    return {"success": True, "data": {"key_id": gateway.key_id}}
