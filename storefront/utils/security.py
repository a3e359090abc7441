# storefront/utils/security.py
"""
Password hashing and session tokens.
Both wrap a standard library (passlib, python-jose) behind a tiny class
so the services get them injected together with the settings.
"""

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from storefront.config import Settings
from storefront.errors import AuthError


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        return self._context.verify(password, password_hash)


class TokenService:
    def __init__(self, settings: Settings):
        self.secret = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.expiry = timedelta(minutes=settings.jwt_expiry_minutes)

    def issue(self, account_id: int, email: str, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(account_id),
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self.expiry,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        """
        Decode a token and return its claims.
        Raises AuthError with a reason the client can show.
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AuthError("Token has expired")
        except JWTError:
            raise AuthError("Invalid token")

        subject = payload.get("sub")
        if subject is None or not str(subject).isdigit():
            raise AuthError("Invalid token")
        return {
            "account_id": int(subject),
            "email": payload.get("email"),
            "issued_at": payload.get("iat"),
            "expires_at": payload.get("exp"),
        }
