"""
Auth feature: API routes.
"""

from fastapi import APIRouter, Depends, status

from notesapp.core.dependencies import get_auth_service, get_current_user_id
from notesapp.features.auth.schemas import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
)
from notesapp.features.auth.service import AuthService

router = APIRouter()


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    """Create an account and return an access token."""
    return await service.register(data)


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Log in and receive a JWT token."""
    return await service.login(data)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
):
    return await service.get_profile(user_id)
