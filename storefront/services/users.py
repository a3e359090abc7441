# storefront/services/users.py

import logging
from typing import Optional

from sqlmodel import Session

from storefront.errors import AuthError, NotFoundError, ValidationError
from storefront.models import Account, AccountProfile
from storefront.repositories import AccountRepository
from storefront.services.identity import to_profile
from storefront.utils.security import PasswordHasher

logger = logging.getLogger(__name__)


class UserService:
    """Profile reads and updates for an authenticated account."""

    def __init__(self, session: Session, hasher: PasswordHasher):
        self.accounts = AccountRepository(session)
        self.hasher = hasher

    def _get(self, account_id: int) -> Account:
        account = self.accounts.get(account_id)
        if not account:
            raise NotFoundError("User not found")
        return account

    def get_profile(self, account_id: int) -> AccountProfile:
        return to_profile(self._get(account_id))

    def update_profile(
        self,
        account_id: int,
        full_name: Optional[str] = None,
        phone_number: Optional[str] = None,
        profile_picture: Optional[str] = None,
    ) -> AccountProfile:
        if not (full_name or phone_number or profile_picture):
            raise ValidationError("No valid fields to update")

        account = self._get(account_id)
        if full_name:
            account.full_name = full_name.strip()
        if phone_number:
            account.phone_number = phone_number.strip()
        if profile_picture:
            account.profile_picture = profile_picture.strip()
        return to_profile(self.accounts.save(account))

    def change_password(self, account_id: int, current_password: str, new_password: str) -> None:
        account = self._get(account_id)
        if not self.hasher.verify(current_password, account.password_hash):
            raise AuthError("Current password is incorrect")

        account.password_hash = self.hasher.hash(new_password)
        self.accounts.save(account)
        logger.info("Password changed for account %s", account_id)
