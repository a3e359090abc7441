"""Typed errors raised by the services and rendered at the HTTP boundary."""


class StorefrontError(Exception):
    """Base exception for all business-rule errors."""

    code = "INTERNAL_ERROR"
    message = "Internal server error"

    def __init__(self, details: str | None = None):
        self.details = details or self.message
        super().__init__(self.details)


class ValidationError(StorefrontError):
    """Malformed or missing input, bad enum value, empty order, bad total."""

    code = "VALIDATION_ERROR"
    message = "Validation failed"


class ConflictError(StorefrontError):
    """Raised when a unique resource already exists (duplicate email)."""

    code = "CONFLICT"
    message = "Resource conflict"


class NotFoundError(StorefrontError):
    """Unknown account/order, or an order owned by someone else."""

    code = "NOT_FOUND"
    message = "Resource not found"


class AuthError(StorefrontError):
    """Bad credentials, unverified login, or a missing/expired/bad token."""

    code = "AUTH_ERROR"
    message = "Authentication failed"


class ForbiddenError(StorefrontError):
    """Authenticated, but not allowed to use an admin operation."""

    code = "FORBIDDEN"
    message = "Access denied"


class RateLimitError(StorefrontError):
    code = "RATE_LIMIT_ERROR"
    message = "Rate limit exceeded"


class InvalidStateError(StorefrontError):
    """Raised when an owner asks for a transition the order cannot take."""

    code = "INVALID_STATE"
    message = "Invalid order state"


class PaymentGatewayError(StorefrontError):
    """The payment provider failed or answered with an error."""

    code = "PAYMENT_GATEWAY_ERROR"
    message = "Payment gateway error"


class InternalError(StorefrontError):
    code = "INTERNAL_ERROR"
    message = "Internal server error"


STATUS_BY_CODE = {
    ValidationError.code: 400,
    ConflictError.code: 409,
    NotFoundError.code: 404,
    AuthError.code: 401,
    ForbiddenError.code: 403,
    RateLimitError.code: 429,
    InvalidStateError.code: 400,
    PaymentGatewayError.code: 502,
    InternalError.code: 500,
}


def error_body(code: str, message: str, details) -> dict:
    return {"error": {"message": message, "code": code, "details": details}}
