"""In-process session façade.

A front-end owns one SessionFacade for as long as it shows a signed-in (or
signing-in) user. The façade holds the current user, session, profile and
admin flag, and pushes an immutable SessionState to subscribers on every
change. The Supabase SDK does the real session work (token refresh,
persistence); this layer only decides when to (re)load the profile and role.

Lifecycle::

    facade = SessionFacade.from_settings()
    await facade.start()          # arms the listener, reads any stored session
    result = await facade.sign_in(email, password)
    ...
    facade.close()                # later results are discarded

Profile and role are fetched in parallel and raced against a timeout. A slow
or failing fetch is logged and dropped; it never blocks or reverts
authentication.
"""
import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional

from supabase import Client
from supabase_auth import SyncSupportedStorage

from taskmarket.config import settings
from taskmarket.core.coalescer import AuthEventCoalescer
from taskmarket.database.supabase_client import SupabaseClient
from taskmarket.modules.auth.errors import AuthErrorCategory, AuthResult
from taskmarket.modules.auth.schemas import Profile
from taskmarket.modules.auth.service import fetch_admin_role, fetch_profile_row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    user: Any = None
    session: Any = None
    profile: Optional[Profile] = None
    is_admin: bool = False
    is_loading: bool = True

    @property
    def user_id(self) -> Optional[str]:
        return getattr(self.user, "id", None)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


@dataclass(frozen=True)
class CachedUserData:
    user_id: str
    profile: Optional[Profile]
    is_admin: bool


class ProfileCache:
    """Profile and admin flag of the last-seen user, owned by one façade."""

    def __init__(self):
        self._entry: Optional[CachedUserData] = None

    @property
    def user_id(self) -> Optional[str]:
        return self._entry.user_id if self._entry else None

    def get(self, user_id: str) -> Optional[CachedUserData]:
        if self._entry is not None and self._entry.user_id == user_id:
            return self._entry
        return None

    def store(self, user_id: str, profile: Optional[Profile], is_admin: bool) -> None:
        self._entry = CachedUserData(user_id=user_id, profile=profile, is_admin=is_admin)

    def invalidate(self) -> None:
        self._entry = None


StateListener = Callable[[SessionState], None]

_SIGNED_OUT = dict(user=None, session=None, profile=None, is_admin=False)


class SessionFacade:
    def __init__(
        self,
        client: Client,
        *,
        email_redirect_url: Optional[str] = None,
        profile_timeout: Optional[float] = None,
        debounce_delay: Optional[float] = None,
        listener_delay: Optional[float] = None,
    ):
        self.client = client
        self.email_redirect_url = email_redirect_url or settings.email_redirect_url
        self.profile_timeout = (
            settings.profile_fetch_timeout_seconds if profile_timeout is None else profile_timeout
        )
        self.debounce_delay = (
            settings.auth_event_debounce_seconds if debounce_delay is None else debounce_delay
        )
        self.listener_delay = (
            settings.auth_listener_delay_seconds if listener_delay is None else listener_delay
        )
        self._state = SessionState()
        self._cache = ProfileCache()
        self._listeners: List[StateListener] = []
        self._mounted = True
        self._coalescer: Optional[AuthEventCoalescer] = None
        self._subscription = None
        self._listener_timer: Optional[asyncio.TimerHandle] = None
        self._inflight: Dict[str, asyncio.Future] = {}

    @classmethod
    def from_settings(cls, storage: Optional[SyncSupportedStorage] = None) -> "SessionFacade":
        return cls(SupabaseClient.create_user_client(storage))

    async def __aenter__(self) -> "SessionFacade":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- state -------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self):
        return self._state.user

    @property
    def profile(self) -> Optional[Profile]:
        return self._state.profile

    @property
    def is_admin(self) -> bool:
        return self._state.is_admin

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register listener for state changes; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, **changes) -> None:
        if not self._mounted:
            return
        new_state = replace(self._state, **changes)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:
                logger.error(f"Session listener failed: {e}")

    # -- lifecycle ---------------------------------------------------------

    async def start(self) -> SessionState:
        """Arm the auth-event listener, then load any stored session once.

        The listener attaches listener_delay seconds after start() is called,
        whether or not the initial profile fetch has finished.
        """
        if not self._mounted:
            raise RuntimeError("SessionFacade has been closed")
        loop = asyncio.get_running_loop()
        self._coalescer = AuthEventCoalescer(self._apply_auth_event, self.debounce_delay, loop)

        if self.listener_delay > 0:
            self._listener_timer = loop.call_later(self.listener_delay, self._subscribe_to_auth_events)
        else:
            self._subscribe_to_auth_events()

        await self._initialize()
        return self._state

    def close(self) -> None:
        """Unmount: pending events are dropped and in-flight results discarded."""
        self._mounted = False
        if self._listener_timer is not None:
            self._listener_timer.cancel()
            self._listener_timer = None
        if self._coalescer is not None:
            self._coalescer.close()
        if self._subscription is not None:
            try:
                self._subscription.unsubscribe()
            except Exception as e:
                logger.warning(f"Failed to unsubscribe from auth events: {e}")
            self._subscription = None

    async def wait_for_pending_events(self) -> None:
        """Block until debounced auth events have been applied."""
        if self._coalescer is None:
            return
        while self._coalescer.has_pending:
            await asyncio.sleep(self.debounce_delay)
        await self._coalescer.drain()

    async def _initialize(self) -> None:
        self._commit(is_loading=True)
        try:
            # Reads the stored session; never forces a new sign-in
            session = await asyncio.to_thread(self.client.auth.get_session)
        except Exception as e:
            logger.warning(f"Session check error: {e}")
            self._commit(is_loading=False, **_SIGNED_OUT)
            return

        if session and session.user:
            self._commit(session=session, user=session.user)
            try:
                await self._fetch_user_data(session.user.id)
            finally:
                self._commit(is_loading=False)
        else:
            self._commit(is_loading=False, **_SIGNED_OUT)

    def _subscribe_to_auth_events(self) -> None:
        self._listener_timer = None
        if not self._mounted:
            return
        self._subscription = self.client.auth.on_auth_state_change(self._on_auth_state_change)

    def _on_auth_state_change(self, event, session) -> None:
        # The SDK may call this from the worker thread running a sign-in
        if not self._mounted or self._coalescer is None:
            return
        self._coalescer.push_threadsafe(event, session)

    async def _apply_auth_event(self, event, session) -> None:
        if not self._mounted:
            return
        logger.info(f"Auth state change: {event}")
        new_user = getattr(session, "user", None) if session else None
        new_user_id = getattr(new_user, "id", None)
        if new_user_id != self._state.user_id:
            self._cache.invalidate()

        self._commit(session=session, user=new_user)
        if new_user_id:
            await self._fetch_user_data(new_user_id)
        else:
            self._commit(profile=None, is_admin=False)
        self._commit(is_loading=False)

    # -- profile / role ----------------------------------------------------

    async def _fetch_user_data(self, user_id: str) -> None:
        cached = self._cache.get(user_id)
        if cached is not None:
            self._commit(profile=cached.profile, is_admin=cached.is_admin)
            return

        # Sign-in and the auth event that follows it share one load
        task = self._inflight.get(user_id)
        if task is None:
            task = asyncio.ensure_future(self._load_user_data(user_id))
            self._inflight[user_id] = task
            task.add_done_callback(lambda _: self._inflight.pop(user_id, None))
        await asyncio.shield(task)

    async def _load_user_data(self, user_id: str) -> None:
        try:
            profile_row, admin = await asyncio.wait_for(
                asyncio.gather(
                    asyncio.to_thread(fetch_profile_row, self.client, user_id),
                    asyncio.to_thread(fetch_admin_role, self.client, user_id),
                ),
                timeout=self.profile_timeout,
            )
            profile = Profile(**profile_row) if profile_row else None
        except asyncio.TimeoutError:
            logger.warning("User data fetch timed out")
            return
        except Exception as e:
            logger.warning(f"Error fetching user data: {e}")
            return

        # The user may have signed out or switched while the fetch was in flight
        if self._state.user_id != user_id:
            return

        if profile is not None:
            self._cache.store(user_id, profile, admin)
            self._commit(profile=profile, is_admin=admin)
        else:
            self._commit(is_admin=admin)

    async def refresh_profile(self) -> None:
        user_id = self._state.user_id
        if user_id is None:
            return
        self._cache.invalidate()
        await self._load_user_data(user_id)

    # -- auth operations ---------------------------------------------------

    async def sign_in(self, email: str, password: str) -> AuthResult:
        self._commit(is_loading=True)
        self._cache.invalidate()
        try:
            response = await asyncio.to_thread(
                self.client.auth.sign_in_with_password,
                {"email": email, "password": password},
            )
        except Exception as e:
            result = AuthResult.from_error(e)
            if result.category is AuthErrorCategory.UNKNOWN:
                logger.error(f"Sign in exception: {e}")
            self._commit(is_loading=False)
            return result

        try:
            session = getattr(response, "session", None)
            if session is not None:
                self._commit(session=session, user=session.user)
                await self._fetch_user_data(session.user.id)
        finally:
            self._commit(is_loading=False)
        return AuthResult.success()

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthResult:
        """Create the account; no session until the email link is followed."""
        self._commit(is_loading=True)
        try:
            await asyncio.to_thread(self.client.auth.sign_up, {
                "email": email,
                "password": password,
                "options": {
                    "email_redirect_to": self.email_redirect_url,
                    "data": {"full_name": full_name},
                },
            })
        except Exception as e:
            result = AuthResult.from_error(e)
            if result.category is AuthErrorCategory.UNKNOWN:
                logger.error(f"Sign up exception: {e}")
            return result
        finally:
            self._commit(is_loading=False)
        return AuthResult.success()

    async def sign_out(self) -> None:
        self._commit(is_loading=True)
        self._cache.invalidate()
        try:
            await asyncio.to_thread(self.client.auth.sign_out)
        except Exception as e:
            logger.error(f"Sign out error: {e}")
        self._commit(is_loading=False, **_SIGNED_OUT)
