import os
import sys

# --- PATH FIX ---
# Get the path to the project root (one level up from 'scripts')
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(project_root)

from sqlmodel import Session

from storefront.config import Settings
from storefront.models import Role
from storefront.repositories import AccountRepository
from storefront.utils.db import build_engine


def promote(session: Session, email: str) -> bool:
    """Give the account the admin role. Returns False if no such account."""
    accounts = AccountRepository(session)
    account = accounts.find_by_email(email)
    if not account:
        return False
    account.role = Role.ADMIN
    accounts.save(account)
    return True


def main(argv):
    if len(argv) != 2:
        print("Usage: python scripts/promote_admin.py <email>")
        sys.exit(2)

    engine = build_engine(Settings.from_env().database_url)
    with Session(engine) as session:
        if not promote(session, argv[1]):
            print(f"❌ Error: No account registered with {argv[1]}")
            sys.exit(1)

    print(f"👤 {argv[1]} is now an admin")


if __name__ == "__main__":
    main(sys.argv)
