import hashlib
import logging
import time
from supabase import Client
from taskmarket.modules.auth.errors import AuthErrorCategory, AuthResult
from taskmarket.modules.auth.schemas import (
    SignInRequest, SignUpRequest, SignUpResponse, TokenResponse, Profile
)
from taskmarket.config import settings
from taskmarket.database.supabase_client import SupabaseClient
from fastapi import HTTPException
from typing import Callable, Dict, Any, Optional

logger = logging.getLogger(__name__)

# Short-lived token -> user cache to reduce Supabase auth calls (many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def _token_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def clear_auth_cache(token: Optional[str] = None) -> None:
    if token is None:
        _AUTH_USER_CACHE.clear()
    else:
        _AUTH_USER_CACHE.pop(_token_key(token), None)


def fetch_profile_row(supabase: Client, user_id: str) -> Optional[Dict[str, Any]]:
    result = supabase.table("profiles")\
        .select("*")\
        .eq("id", user_id)\
        .maybe_single()\
        .execute()
    return result.data if result else None


def fetch_admin_role(supabase: Client, user_id: str) -> bool:
    result = supabase.table("user_roles")\
        .select("role")\
        .eq("user_id", user_id)\
        .eq("role", "admin")\
        .maybe_single()\
        .execute()
    return bool(result and result.data)


def _raise_for(result: AuthResult) -> None:
    raise HTTPException(status_code=result.status_code, detail=result.message)


class AuthService:
    def __init__(
        self,
        supabase: Client,
        auth_client_factory: Callable[[], Client] = SupabaseClient.create_user_client,
    ):
        self.supabase = supabase
        # sign-in / sign-up run on a throwaway client so the shared one never holds a user session
        self.auth_client_factory = auth_client_factory

    def register(self, register_data: SignUpRequest) -> SignUpResponse:
        """Register a new user; the account stays unusable until the email is verified."""
        try:
            auth_response = self.auth_client_factory().auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "email_redirect_to": settings.email_redirect_url,
                    "data": {"full_name": register_data.full_name},
                },
            })
        except Exception as e:
            result = AuthResult.from_error(e)
            if result.category is AuthErrorCategory.UNKNOWN:
                logger.error(f"Sign up exception: {e}")
            _raise_for(result)

        user = getattr(auth_response, "user", None)
        return SignUpResponse(
            email=getattr(user, "email", None) or register_data.email,
            user_id=getattr(user, "id", None),
        )

    def login(self, login_data: SignInRequest) -> TokenResponse:
        """Authenticate with email and password"""
        try:
            auth_response = self.auth_client_factory().auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            result = AuthResult.from_error(e)
            if result.category is AuthErrorCategory.UNKNOWN:
                logger.error(f"Sign in exception: {e}")
            _raise_for(result)

        if not auth_response.user or not auth_response.session:
            _raise_for(AuthResult.from_error("Invalid login credentials"))

        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from the access token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = _token_key(token)
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "created_at": user.created_at,
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Revoke the token's session and forget it locally"""
        clear_auth_cache(token)
        try:
            self.supabase.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning(f"Sign out error: {e}")
            return False

    def get_profile(self, user_id: str) -> Optional[Profile]:
        """Profile row for user_id; lookup and parse failures are logged, never raised"""
        try:
            row = fetch_profile_row(self.supabase, user_id)
            return Profile(**row) if row else None
        except Exception as e:
            logger.warning(f"Error fetching profile for {user_id}: {e}")
            return None
