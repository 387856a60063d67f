"""
Authentication session

Holds the signed-in identity and profile for one client and notifies
subscribers whenever it changes.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
import inspect
import logging

from referralhub.core.exceptions import ValidationError
from referralhub.models.user import UserProfile, UserRole
from referralhub.services.analytics import AnalyticsService
from referralhub.services.auth_provider import AuthIdentity, AuthProvider
from referralhub.services.user_service import ProfileService
from referralhub.utils.validators import require_email

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional[AuthIdentity]], Union[None, Awaitable[None]]]

class AuthSession:
    """Session with an explicit start/stop lifecycle"""

    def __init__(
        self,
        auth_provider: AuthProvider,
        profiles: ProfileService,
        analytics: Optional[AnalyticsService] = None
    ):
        self.auth_provider = auth_provider
        self.profiles = profiles
        self.analytics = analytics or profiles.analytics
        self.current_user: Optional[AuthIdentity] = None
        self.current_profile: Optional[UserProfile] = None
        self._listeners: List[AuthListener] = []
        self._started = False

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    async def start(self, listener: Optional[AuthListener] = None) -> Callable[[], None]:
        """
        Begin observing auth state

        The listener is called right away with the current identity and then
        after every sign-in, sign-up and sign-out. Returns an unsubscribe
        callable.
        """
        self._started = True
        if listener is None:
            return lambda: None

        self._listeners.append(listener)
        await self._call(listener, self.current_user)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def stop(self) -> None:
        """Drop every subscriber and forget the signed-in user"""
        self._listeners.clear()
        self.current_user = None
        self.current_profile = None
        self._started = False

    async def _call(self, listener: AuthListener, identity: Optional[AuthIdentity]) -> None:
        try:
            result = listener(identity)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Auth state listener failed")

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            await self._call(listener, self.current_user)

    async def sign_in(self, email: str, password: str) -> UserProfile:
        email = require_email(email)
        try:
            identity = await self.auth_provider.sign_in(email, password)
        except Exception as e:
            await self.analytics.log_event("login_error", {"error": str(e)})
            raise

        self.current_user = identity
        self.current_profile = await self.profiles.find_profile(identity.uid)
        if self.current_profile is None:
            logger.warning(f"No user profile found for UID: {identity.uid}")

        await self.analytics.log_event("login_success", {"method": "email"}, user_id=identity.uid)
        await self._notify()
        return self.current_profile

    async def sign_up(
        self,
        email: str,
        password: str,
        user_type: Union[UserRole, str],
        additional_data: Optional[Dict[str, Any]] = None
    ) -> UserProfile:
        try:
            user_type = UserRole(user_type)
        except ValueError:
            raise ValidationError("Invalid user type", error_code="INVALID_USER_TYPE")
        email = require_email(email)

        try:
            identity = await self.auth_provider.sign_up(email, password)
        except Exception as e:
            await self.analytics.log_event("sign_up_error", {"error": str(e)})
            raise

        self.current_user = identity
        self.current_profile = await self.profiles.create_profile(identity, user_type, additional_data)
        await self._notify()
        return self.current_profile

    async def sign_out(self) -> None:
        if self.current_user is None:
            return
        uid = self.current_user.uid
        await self.analytics.log_event("logout", user_id=uid)
        await self.auth_provider.sign_out(uid)
        self.current_user = None
        self.current_profile = None
        await self._notify()

    async def reset_password(self, email: str) -> None:
        email = require_email(email)
        try:
            await self.auth_provider.reset_password(email)
        except Exception as e:
            await self.analytics.log_event("password_reset_error", {"error": str(e)})
            raise
        await self.analytics.log_event("password_reset_email_sent")
