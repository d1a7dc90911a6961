"""
FastAPI dependency injection functions.

Long-lived components (session factory, cache, token issuer, settings) are
built once in ``create_app`` and kept on ``app.state``; repositories and
services are assembled per request from them.
"""

from typing import Iterator

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from notesapp.core.cache import Cache
from notesapp.core.exceptions import InvalidTokenError
from notesapp.core.security import TokenIssuer
from notesapp.features.auth.repository import UserRepository
from notesapp.features.auth.service import AuthService
from notesapp.features.notes.repository import NoteRepository
from notesapp.features.notes.service import NotesService

# Bearer token scheme for Swagger UI
bearer_scheme = HTTPBearer(auto_error=False)


def get_db(request: Request) -> Iterator[Session]:
    """Dependency: one database session per request."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_cache(request: Request) -> Cache:
    return request.app.state.cache


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> str:
    """Dependency: extract and validate user_id from JWT token.

    Returns:
        str: The user's id.

    Raises:
        InvalidTokenError (401): If token is missing, invalid or expired.
    """
    if credentials is None:
        raise InvalidTokenError("Missing bearer token")
    payload = tokens.verify(credentials.credentials)
    return payload["sub"]


def get_auth_service(
    db: Session = Depends(get_db),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(UserRepository(db), tokens)


def get_notes_service(
    request: Request,
    db: Session = Depends(get_db),
    cache: Cache = Depends(get_cache),
) -> NotesService:
    return NotesService(
        NoteRepository(db),
        cache,
        ttl=request.app.state.settings.NOTES_CACHE_TTL_SECONDS,
    )
