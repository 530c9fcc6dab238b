from typing import Optional
from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from circles.api.deps import get_current_user_id
from circles.core.config import settings
from circles.core.database import get_db
from circles.schemas.auth import ChangePasswordRequest, LoginRequest, RegisterRequest, Token
from circles.schemas.common import DataResponse, MessageResponse
from circles.schemas.user import UserPublic
from circles.services.auth import AuthService

router = APIRouter()

REFRESH_COOKIE = "refreshToken"


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: RegisterRequest,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user"""
    auth_service = AuthService(db)
    await auth_service.register(user_data)
    return {"success": True, "message": "Registration successful. You may login now."}


@router.post("/login", response_model=DataResponse[Token])
async def login(
    login_data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """Login with username and password"""
    auth_service = AuthService(db)
    access_token, refresh_token = await auth_service.authenticate(login_data.username, login_data.password)
    response.set_cookie(
        REFRESH_COOKIE,
        refresh_token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )
    return {"success": True, "data": {"access_token": access_token}, "message": "Login successful"}


@router.post("/refresh", response_model=DataResponse[Token])
async def refresh_token(
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    db: AsyncSession = Depends(get_db)
):
    """Refresh access token"""
    auth_service = AuthService(db)
    access_token = await auth_service.refresh_access_token(refresh_token)
    return {"success": True, "data": {"access_token": access_token}}


@router.get("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """Clear the refresh token cookie"""
    response.delete_cookie(REFRESH_COOKIE)
    return {"success": True, "message": "Logout successful"}


@router.get("/me", response_model=DataResponse[UserPublic])
async def me(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Get the authenticated user"""
    auth_service = AuthService(db)
    user = await auth_service.get_user(current_user_id)
    return {"success": True, "data": user}


@router.patch("/change-password", response_model=MessageResponse)
async def change_password(
    data: ChangePasswordRequest,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Change password after checking the current one"""
    auth_service = AuthService(db)
    await auth_service.change_password(current_user_id, data)
    return {"success": True, "message": "Password changed"}
