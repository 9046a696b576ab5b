from fastapi import APIRouter, Depends
from taskmarket.database.supabase_client import get_request_supabase
from taskmarket.modules.auth.schemas import (
    SignInRequest, SignUpRequest, SignUpResponse, TokenResponse, MeResponse,
    PasswordStrengthRequest, PasswordStrengthResponse
)
from taskmarket.modules.auth.service import AuthService
from taskmarket.core.dependencies import get_auth_service, get_current_token, get_current_user, is_admin
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=SignUpResponse, status_code=201)
async def register(
    register_data: SignUpRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Create an account; a verification email is sent, no token is issued"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: SignInRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(
    current_user: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_request_supabase),
):
    """Current user, profile and admin flag. A missing profile is not an error."""
    return MeResponse(
        user=current_user,
        profile=service.get_profile(current_user["id"]),
        is_admin=is_admin(current_user["id"], supabase),
    )


@router.post("/password-strength", response_model=PasswordStrengthResponse)
async def check_password_strength(body: PasswordStrengthRequest):
    return PasswordStrengthResponse.for_password(body.password)
