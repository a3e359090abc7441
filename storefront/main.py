# storefront/main.py

"""
Used by FastAPI to handle the Traffic (API endpoints)
This is the entry point for the API
create_app() wires settings, database, collaborators and routers together,
and translates every typed error into the JSON error envelope.

Run with:  uvicorn storefront.main:create_app --factory --reload
"""

import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# For Middleware block so browser can access the API
from fastapi.middleware.cors import CORSMiddleware

import uvicorn

from storefront.config import Settings, configure_logging
from storefront.errors import STATUS_BY_CODE, InternalError, StorefrontError, ValidationError, error_body
from storefront.models import utcnow
from storefront.routes import admin, auth, orders, payments, users
from storefront.services.notifications import Notifier
from storefront.services.payments import PaymentGateway
from storefront.utils.db import build_engine, create_tables
from storefront.utils.rate_limit import SlidingWindowLimiter
from storefront.utils.security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        status_code = STATUS_BY_CODE[exc.code]
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.details)
        return JSONResponse(status_code=status_code, content=error_body(exc.code, exc.message, exc.details))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        problems = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"] if part != "body")
            problems.append(f"{field}: {error['msg']}" if field else error["msg"])
        return JSONResponse(
            status_code=STATUS_BY_CODE[ValidationError.code],
            content=error_body(ValidationError.code, ValidationError.message, "; ".join(problems)),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        # Full detail stays in the server log, the client gets a generic message
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=STATUS_BY_CODE[InternalError.code],
            content=error_body(InternalError.code, InternalError.message, "An unexpected error occurred"),
        )


def create_app(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
    payment_gateway: Optional[PaymentGateway] = None,
    clock: Callable = utcnow,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="Storefront API")

    # --- Shared collaborators, built once per process ---
    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url)
    create_tables(app.state.engine)
    app.state.notifier = notifier or Notifier(settings)
    app.state.payment_gateway = payment_gateway or PaymentGateway(settings)
    app.state.hasher = PasswordHasher(settings.bcrypt_rounds)
    app.state.tokens = TokenService(settings)
    app.state.rate_limiter = SlidingWindowLimiter(settings.rate_limit_window_seconds, settings.rate_limit_max_requests)
    app.state.clock = clock

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(orders.router)
    app.include_router(admin.router)
    app.include_router(payments.router)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    logger.info("Storefront API ready (database: %s)", app.state.engine.url.render_as_string(hide_password=True))
    return app


if __name__ == "__main__":
    # Standard usage is 'uvicorn storefront.main:create_app --factory' from terminal
    uvicorn.run("storefront.main:create_app", factory=True, host="0.0.0.0", port=8000, reload=True)
