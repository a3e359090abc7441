# storefront/services/identity.py
"""
Registration, email verification codes and login.

A code is valid iff it equals the newest stored code for the account AND
the current time is not past its expiry. Issuing a code deletes every older
code of the account, but every issued code stays in IssuedCode so a resend
never repeats one. The resend quota counts ResendAttempt rows, which
verification never deletes.
"""

import logging
import secrets
from datetime import timedelta
from typing import Callable, Set, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.config import Settings
from storefront.errors import AuthError, ConflictError, NotFoundError, RateLimitError, ValidationError
from storefront.models import Account, AccountProfile, Role, utcnow
from storefront.repositories import (
    AccountRepository,
    IssuedCodeRepository,
    ResendAttemptRepository,
    VerificationCodeRepository,
)
from storefront.services.notifications import Notifier
from storefront.utils.security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def generate_code(exclude: Set[str] = frozenset()) -> str:
    """Uniform six-digit code in [100000, 999999], never one of `exclude`."""
    while True:
        code = str(100000 + secrets.randbelow(900000))
        if code not in exclude:
            return code


def to_profile(account: Account) -> AccountProfile:
    return AccountProfile.model_validate(account)


class IdentityService:
    def __init__(
        self,
        session: Session,
        settings: Settings,
        notifier: Notifier,
        hasher: PasswordHasher,
        tokens: TokenService,
        clock: Callable = utcnow,
    ):
        self.session = session
        self.settings = settings
        self.notifier = notifier
        self.hasher = hasher
        self.tokens = tokens
        self.clock = clock

        self.accounts = AccountRepository(session)
        self.codes = VerificationCodeRepository(session)
        self.resends = ResendAttemptRepository(session)
        self.issued = IssuedCodeRepository(session)

    def _issue_code(self, account: Account, exclude: Set[str] = frozenset()) -> str:
        now = self.clock()
        code = generate_code(exclude)
        expires_at = now + timedelta(minutes=self.settings.otp_expiry_minutes)
        self.codes.add(account.id, code, expires_at, now)
        self.issued.record(account.id, code, now)
        return code

    def _require_account(self, email: str) -> Account:
        account = self.accounts.find_by_email(email or "")
        if not account:
            raise NotFoundError("User not found")
        return account

    def register(self, email: str, password: str, full_name: str, phone_number: str) -> int:
        if not all(value and value.strip() for value in (email, password, full_name, phone_number)):
            raise ValidationError("Missing required fields")

        email = email.strip().lower()
        if self.accounts.find_by_email(email):
            raise ConflictError("Email already registered")

        now = self.clock()
        try:
            account = self.accounts.add(
                Account(
                    email=email,
                    password_hash=self.hasher.hash(password),
                    full_name=full_name.strip(),
                    phone_number=phone_number.strip(),
                    created_at=now,
                    updated_at=now,
                )
            )
        except IntegrityError:
            # A concurrent registration took the address after our lookup
            self.session.rollback()
            raise ConflictError("Email already registered")

        code = self._issue_code(account)

        # The mail goes out before commit: if it fails, nothing is persisted
        # and the address stays free for another attempt.
        try:
            self.notifier.send_verification_code(email, code, self.settings.otp_expiry_minutes)
        except Exception:
            self.session.rollback()
            logger.exception("Verification email to %s failed, registration rolled back", email)
            raise

        self.session.commit()
        logger.info("Registered account %s (%s)", account.id, email)
        return account.id

    def verify_code(self, email: str, code: str) -> None:
        account = self._require_account(email)

        # Fetch and check first, delete only after a match
        record = self.codes.latest(account.id)
        if record is None or record.code != code or self.clock() > record.expires_at:
            raise ValidationError("Invalid or expired OTP")

        account.is_verified = True
        account.updated_at = self.clock()
        self.session.add(account)
        self.codes.delete_for(account.id)
        self.session.commit()
        logger.info("Account %s verified", account.id)

    def resend_code(self, email: str) -> None:
        account = self._require_account(email)
        if account.is_verified:
            raise ValidationError("Email is already verified")

        now = self.clock()
        window_start = now - timedelta(minutes=self.settings.otp_resend_window_minutes)
        attempts = self.resends.count_since(account.id, window_start)
        if attempts >= self.settings.otp_resend_limit:
            raise RateLimitError("Maximum OTP resend attempts exceeded. Please try again later.")

        previous = self.issued.codes_for(account.id)
        self.codes.delete_for(account.id)
        self.resends.record(account.id, now)
        code = self._issue_code(account, exclude=previous)

        try:
            self.notifier.send_verification_code(account.email, code, self.settings.otp_expiry_minutes)
        except Exception:
            self.session.rollback()
            logger.exception("Resend of verification email to %s failed", account.email)
            raise

        self.session.commit()
        logger.info("Verification code reissued for account %s (attempt %d)", account.id, attempts + 1)

    def login(self, email: str, password: str) -> Tuple[str, AccountProfile]:
        account = self.accounts.find_by_email(email or "")
        if not account:
            raise AuthError(INVALID_CREDENTIALS)
        if not account.is_verified:
            raise AuthError("Email verification required")
        if not self.hasher.verify(password or "", account.password_hash):
            raise AuthError(INVALID_CREDENTIALS)

        if account.email in self.settings.admin_emails and account.role != Role.ADMIN:
            account.role = Role.ADMIN
            self.accounts.save(account)
            logger.info("Account %s promoted to admin from ADMIN_EMAILS", account.id)

        token = self.tokens.issue(account.id, account.email)
        return token, to_profile(account)
