# storefront/routes/auth.py
"""
Registration, OTP verification and login.
All endpoints here are public and throttled per client IP.
"""

from fastapi import APIRouter, Depends

from storefront.dependencies import get_identity_service, rate_limit
from storefront.schemas import LoginRequest, RegisterRequest, ResendOtpRequest, VerifyOtpRequest
from storefront.services.identity import IdentityService

router = APIRouter(prefix="/auth", tags=["auth"], dependencies=[Depends(rate_limit)])


@router.post("/register", status_code=201)
def register(body: RegisterRequest, identity: IdentityService = Depends(get_identity_service)):
    account_id = identity.register(body.email, body.password, body.full_name, body.phone_number)
    return {
        "message": "Registration successful. Please check your email for OTP verification.",
        "user_id": account_id,
    }


@router.post("/verify-otp")
def verify_otp(body: VerifyOtpRequest, identity: IdentityService = Depends(get_identity_service)):
    identity.verify_code(body.email, body.otp)
    return {"message": "Email verified successfully. You can now login."}


@router.post("/resend-otp")
def resend_otp(body: ResendOtpRequest, identity: IdentityService = Depends(get_identity_service)):
    identity.resend_code(body.email)
    return {"message": "OTP resent successfully. Please check your email."}


@router.post("/login")
def login(body: LoginRequest, identity: IdentityService = Depends(get_identity_service)):
    token, profile = identity.login(body.email, body.password)
    return {"message": "Login successful", "token": token, "user": profile}
