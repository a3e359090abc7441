# storefront/config.py

"""
Runtime configuration.
Everything the process needs from the environment is read ONCE here
and handed to create_app(), which passes it down to the services.
"""

import logging
import os
import sys
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Build paths inside the project like this: os.path.join(BASE_DIR, ...)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Settings(BaseModel):
    # Persistence
    database_url: str = f"sqlite:///{os.path.join(BASE_DIR, 'database.db')}"

    # Session tokens
    jwt_secret: str = "dev-secret-key-change-me"
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = 60 * 24
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Outbound email (empty user = log instead of send)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    email_user: str = ""
    email_password: str = ""
    email_from: str = ""

    # Cross-origin requests
    frontend_url: str = "http://localhost:5173"

    # Generic throttle on /auth
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 5

    # OTP policy
    otp_expiry_minutes: int = 10
    otp_resend_limit: int = 3
    otp_resend_window_minutes: int = 60

    # Payment gateway
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_api_url: str = "https://api.razorpay.com/v1"

    admin_emails: List[str] = []
    log_level: str = "INFO"

    @property
    def email_enabled(self) -> bool:
        return bool(self.email_user and self.email_password)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load .env (if present) and build the settings from os.environ."""
        load_dotenv()

        values = {}
        for name in cls.model_fields:
            raw = os.getenv(name.upper())
            if raw is None:
                continue
            if name == "admin_emails":
                values[name] = [e.strip().lower() for e in raw.split(",") if e.strip()]
            else:
                values[name] = raw
        return cls(**values)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root.addHandler(handler)
    root.setLevel(level.upper())
