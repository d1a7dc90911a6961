"""
Security utilities: password hashing and JWT access tokens.
"""

from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError
from passlib.context import CryptContext

from notesapp.config import Settings
from notesapp.core.exceptions import InvalidTokenError

# ── Password Hashing ────────────────────────────────────
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


# ── JWT Token ────────────────────────────────────────────
class TokenIssuer:
    """Mints and verifies signed, time-bounded access tokens.

    Tokens carry ``sub`` (user id) and ``email``. There is no revocation:
    a token stays valid until ``exp``.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expiry_minutes: int = 1440):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expiry_minutes = expiry_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            expiry_minutes=settings.JWT_EXPIRY_MINUTES,
        )

    def issue(self, user_id: str, email: str, expires_in: timedelta | None = None) -> str:
        """Create a JWT access token for the given identity."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + (expires_in if expires_in is not None else timedelta(minutes=self.expiry_minutes)),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        """Decode and validate a JWT token.

        Raises:
            InvalidTokenError: If the token is malformed, badly signed, expired
                or has no subject.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

        if not payload.get("sub"):
            raise InvalidTokenError("Token has no subject")
        return payload
