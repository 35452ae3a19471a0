from __future__ import annotations

from fastapi import APIRouter, Depends, status

from sitegen.auth.dependencies import get_current_user_id
from sitegen.dependencies import get_auth_service
from sitegen.schemas.auth import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse, UserProfile
from sitegen.services.auth_service import AuthService


router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, service: AuthService = Depends(get_auth_service)) -> RegisterResponse:
    user_id = await service.register(payload.name, payload.email, payload.password)
    return RegisterResponse(user_id=user_id)


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, service: AuthService = Depends(get_auth_service)) -> TokenResponse:
    token = await service.login(payload.email, payload.password)
    return TokenResponse(access_token=token)


@router.get("/me", response_model=UserProfile)
async def me(
    user_id: int = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> UserProfile:
    return UserProfile(**await service.current_user(user_id))
