"""
Core dependencies for route protection and admin checks
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from taskmarket.database.supabase_client import get_request_supabase
from taskmarket.modules.auth.service import AuthService, fetch_admin_role
from supabase import Client
from typing import Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def get_auth_service(supabase: Client = Depends(get_request_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract access token from Authorization header"""
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Resolve the bearer token to the signed-in user"""
    return auth_service.get_current_user(token)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[dict]:
    """Like get_current_user, but anonymous callers get None instead of 401/403"""
    if credentials is None:
        return None
    try:
        return auth_service.get_current_user(credentials.credentials)
    except HTTPException:
        return None


def is_admin(user_id: str, supabase: Client) -> bool:
    """True if the user holds the admin role in user_roles"""
    try:
        return fetch_admin_role(supabase, user_id)
    except Exception as e:
        logger.error(f"Error checking admin role: {e}")
        return False


def require_admin(
    user_data: dict = Depends(get_current_user),
    supabase: Client = Depends(get_request_supabase)
) -> dict:
    """Dependency guarding the admin console"""
    if not is_admin(user_data["id"], supabase):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user_data
