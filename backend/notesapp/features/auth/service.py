"""
Auth feature: Business logic for user registration, login, and profile lookup.
"""

import logging

from notesapp.core.exceptions import UnauthorizedError
from notesapp.core.security import TokenIssuer, hash_password, verify_password
from notesapp.features.auth.models import User
from notesapp.features.auth.repository import UserRepository
from notesapp.features.auth.schemas import RegisterRequest, LoginRequest, UserResponse

logger = logging.getLogger(__name__)

# verified against for unknown emails, so login timing does not reveal registered addresses
_DUMMY_HASH = hash_password("not-a-real-password")


class AuthService:
    """Handles user authentication and profile lookup."""

    def __init__(self, users: UserRepository, tokens: TokenIssuer):
        self.users = users
        self.tokens = tokens

    async def register(self, data: RegisterRequest) -> dict:
        """Register a new user.

        Returns:
            dict with access_token and user data.

        Raises:
            ConflictError: If email already exists.
        """
        user = self.users.create(data.email, hash_password(data.password))
        logger.info(f"Registered user {user.id}")
        return self._token_response(user)

    async def login(self, data: LoginRequest) -> dict:
        """Authenticate user and return JWT token.

        Raises:
            UnauthorizedError: If credentials are invalid.
        """
        user = self.users.find_by_email(data.email)
        password_hash = user.password_hash if user is not None else _DUMMY_HASH
        password_ok = verify_password(data.password, password_hash)
        if user is None or not password_ok:
            logger.info("Rejected login attempt")
            raise UnauthorizedError("Invalid credentials")
        return self._token_response(user)

    async def get_profile(self, user_id: str) -> dict:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise UnauthorizedError("User no longer exists")
        return {"user": UserResponse.model_validate(user)}

    def _token_response(self, user: User) -> dict:
        return {
            "access_token": self.tokens.issue(user.id, user.email),
            "token_type": "bearer",
            "user": UserResponse.model_validate(user),
        }
