import logging
from typing import Optional

from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import create_client, Client
from supabase.client import ClientOptions
from supabase_auth import SyncSupportedStorage

from taskmarket.config import settings
from taskmarket.database.storage import FileSessionStorage

logger = logging.getLogger(__name__)

if not settings.supabase_url or not settings.supabase_key:
    logger.error("Missing Supabase environment variables")


class SupabaseClient:
    _client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def create_user_client(cls, storage: Optional[SyncSupportedStorage] = None) -> Client:
        """Fresh anon client owning exactly one user session.

        Sign-in and sign-up mutate the auth state of the client they run on,
        so they never go through the shared client.
        """
        if storage is None and settings.session_storage_dir:
            storage = FileSessionStorage(settings.session_storage_dir)
        extra = {"storage": storage} if storage is not None else {}
        options = ClientOptions(
            auto_refresh_token=True,
            persist_session=storage is not None,
            flow_type="pkce",
            **extra,
        )
        return create_client(settings.supabase_url, settings.supabase_key, options=options)

    @classmethod
    def create_authed_client(cls, access_token: str) -> Client:
        """Anon-key client whose queries run as the bearer of access_token.

        Row-level security sees auth.uid() as that user, so each request
        reads and writes only what its caller may.
        """
        options = ClientOptions(auto_refresh_token=False, persist_session=False)
        options.headers["Authorization"] = f"Bearer {access_token}"
        return create_client(settings.supabase_url, settings.supabase_key, options=options)


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_request_supabase(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(HTTPBearer(auto_error=False)),
) -> Client:
    """Per-request client acting as the caller; anonymous requests share the anon client"""
    if credentials is None:
        return get_supabase()
    return SupabaseClient.create_authed_client(credentials.credentials)


def check_connection(supabase: Client) -> bool:
    """Cheap round trip against the profiles table."""
    try:
        supabase.table("profiles").select("id").limit(1).execute()
        logger.debug("Supabase connection successful")
        return True
    except Exception as e:
        logger.error(f"Supabase connection failed: {e}")
        return False
