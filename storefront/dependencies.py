# storefront/dependencies.py
"""
Used by FastAPI for dependency injection - Database, Auth & Services
Every collaborator is built once in create_app() and kept on app.state;
the functions below hand them to the routes, together with a
request-scoped database session.
"""

from fastapi import Header, Depends, Request
from sqlmodel import Session
from typing import Annotated

from storefront.config import Settings
from storefront.errors import AuthError, ForbiddenError
from storefront.models import Account, Role
from storefront.services.identity import IdentityService
from storefront.services.notifications import Notifier
from storefront.services.orders import OrderService
from storefront.services.payments import PaymentGateway
from storefront.services.users import UserService
from storefront.utils.db import get_session

BEARER_PREFIX = "Bearer "


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


# 1. Authentication
# Resolves the bearer token to the Account making the request
async def get_current_account(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    session: Session = Depends(get_session),
) -> Account:

    if not authorization:
        raise AuthError("No authorization token provided")

    if not authorization.startswith(BEARER_PREFIX):
        raise AuthError("Invalid authorization header format. Expected: Bearer <token>")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthError("No token provided")

    claims = request.app.state.tokens.verify(token)
    account = session.get(Account, claims["account_id"])
    if not account:
        raise AuthError("Account no longer exists")

    return account


# 2. Authorization
# Admin endpoints must pass through this check, being logged in is not enough
async def require_admin(account: Account = Depends(get_current_account)) -> Account:
    if account.role != Role.ADMIN:
        raise ForbiddenError("Admin privileges required")
    return account


# 3. Throttling for the public auth endpoints
async def rate_limit(request: Request) -> None:
    client_ip = request.client.host if request.client else "unknown"
    request.app.state.rate_limiter.hit(client_ip)


# 4. Build the Services
def get_identity_service(request: Request, session: Session = Depends(get_session)) -> IdentityService:
    state = request.app.state
    return IdentityService(
        session=session,
        settings=state.settings,
        notifier=state.notifier,
        hasher=state.hasher,
        tokens=state.tokens,
        clock=state.clock,
    )


def get_user_service(request: Request, session: Session = Depends(get_session)) -> UserService:
    return UserService(session, request.app.state.hasher)


def get_order_service(request: Request, session: Session = Depends(get_session)) -> OrderService:
    return OrderService(session, clock=request.app.state.clock)
