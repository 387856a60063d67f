"""
Authentication provider service
Wraps Firebase Authentication (Identity Toolkit REST + Admin SDK)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import asyncio
import functools
import hashlib
import logging
import secrets

import httpx

from referralhub.core.config import settings
from referralhub.core.exceptions import (
    RemoteError,
    UnauthorizedException,
    ValidationError,
)

logger = logging.getLogger(__name__)

@dataclass
class AuthIdentity:
    """Authenticated user as reported by the provider"""
    uid: str
    email: str
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    display_name: Optional[str] = None

class AuthProvider(ABC):
    """Email/password identity provider"""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthIdentity:
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthIdentity:
        pass

    @abstractmethod
    async def sign_out(self, uid: str) -> None:
        pass

    @abstractmethod
    async def reset_password(self, email: str) -> None:
        pass

    @abstractmethod
    async def verify_token(self, id_token: str) -> AuthIdentity:
        """Resolve an ID token to an identity or raise UnauthorizedException"""

    async def close(self) -> None:
        pass

# Identity Toolkit error messages that are the caller's fault
CREDENTIAL_ERRORS = {
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "USER_DISABLED",
}
INPUT_ERRORS = {
    "EMAIL_EXISTS",
    "INVALID_EMAIL",
    "MISSING_PASSWORD",
    "MISSING_EMAIL",
}

class FirebaseAuthProvider(AuthProvider):
    """Firebase Authentication over the Identity Toolkit REST API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.api_key = api_key or settings.FIREBASE_WEB_API_KEY
        self.base_url = base_url or settings.FIREBASE_AUTH_URL
        self.client = client or httpx.AsyncClient(timeout=settings.FIREBASE_AUTH_TIMEOUT)

    async def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/accounts:{endpoint}"
        try:
            response = await self.client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Auth provider call {endpoint} failed: {str(e)}")
            raise RemoteError(f"Authentication service unavailable: {e}")

        data = response.json() if response.content else {}
        if response.status_code >= 400:
            message = data.get("error", {}).get("message", "UNKNOWN")
            # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
            code = message.split(" ")[0]
            logger.warning(f"Auth provider rejected {endpoint}: {message}")
            if code in CREDENTIAL_ERRORS:
                raise UnauthorizedException("Invalid email or password")
            if code in INPUT_ERRORS or code == "WEAK_PASSWORD":
                raise ValidationError(message, error_code=code)
            raise RemoteError(f"Authentication failed: {message}")
        return data

    @staticmethod
    def _identity(data: Dict[str, Any]) -> AuthIdentity:
        return AuthIdentity(
            uid=data["localId"],
            email=data.get("email", ""),
            id_token=data.get("idToken"),
            refresh_token=data.get("refreshToken"),
            display_name=data.get("displayName") or None,
        )

    async def sign_in(self, email: str, password: str) -> AuthIdentity:
        data = await self._post(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True}
        )
        return self._identity(data)

    async def sign_up(self, email: str, password: str) -> AuthIdentity:
        data = await self._post(
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True}
        )
        return self._identity(data)

    async def close(self) -> None:
        await self.client.aclose()

    async def _admin_call(self, func: Callable, *args, **kwargs) -> Any:
        """Run a blocking Admin SDK call in the thread pool"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    async def reset_password(self, email: str) -> None:
        await self._post("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    async def sign_out(self, uid: str) -> None:
        """Revoke refresh tokens so every device has to sign in again"""
        from firebase_admin import auth, exceptions as firebase_exceptions
        from referralhub.core.firebase import initialize_firebase

        try:
            await self._admin_call(auth.revoke_refresh_tokens, uid, app=initialize_firebase())
        except firebase_exceptions.FirebaseError as e:
            logger.error(f"Failed to revoke tokens for {uid}: {str(e)}")
            raise RemoteError(f"Sign out failed: {e}")

    async def verify_token(self, id_token: str) -> AuthIdentity:
        from firebase_admin import auth, exceptions as firebase_exceptions
        from referralhub.core.firebase import initialize_firebase

        try:
            decoded = await self._admin_call(
                auth.verify_id_token, id_token, app=initialize_firebase(), check_revoked=True
            )
        except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError):
            raise UnauthorizedException("Invalid authentication credentials")
        except firebase_exceptions.FirebaseError as e:
            logger.error(f"Token verification failed: {str(e)}")
            raise RemoteError(f"Token verification failed: {e}")

        return AuthIdentity(
            uid=decoded["uid"],
            email=decoded.get("email", ""),
            id_token=id_token,
            display_name=decoded.get("name"),
        )

class InMemoryAuthProvider(AuthProvider):
    """Local stand-in for Firebase Authentication"""

    def __init__(self):
        self._accounts: Dict[str, Dict[str, str]] = {}
        self._tokens: Dict[str, str] = {}
        self.reset_requests: list = []

    @staticmethod
    def _hash(password: str) -> str:
        return hashlib.sha256(password.encode()).hexdigest()

    def _issue(self, account: Dict[str, str]) -> AuthIdentity:
        token = secrets.token_urlsafe(24)
        self._tokens[token] = account["uid"]
        return AuthIdentity(
            uid=account["uid"],
            email=account["email"],
            id_token=token,
            refresh_token=secrets.token_urlsafe(24),
        )

    async def sign_in(self, email: str, password: str) -> AuthIdentity:
        account = self._accounts.get(email.lower())
        if not account or account["password"] != self._hash(password):
            raise UnauthorizedException("Invalid email or password")
        return self._issue(account)

    async def sign_up(self, email: str, password: str) -> AuthIdentity:
        email = email.lower()
        if email in self._accounts:
            raise ValidationError("EMAIL_EXISTS", error_code="EMAIL_EXISTS")
        if len(password) < 6:
            raise ValidationError("WEAK_PASSWORD", error_code="WEAK_PASSWORD")
        account = {
            "uid": secrets.token_hex(14),
            "email": email,
            "password": self._hash(password),
        }
        self._accounts[email] = account
        return self._issue(account)

    async def sign_out(self, uid: str) -> None:
        self._tokens = {token: owner for token, owner in self._tokens.items() if owner != uid}

    async def reset_password(self, email: str) -> None:
        self.reset_requests.append(email.lower())

    async def verify_token(self, id_token: str) -> AuthIdentity:
        uid = self._tokens.get(id_token)
        if uid is None:
            raise UnauthorizedException("Invalid authentication credentials")
        account = next(a for a in self._accounts.values() if a["uid"] == uid)
        return AuthIdentity(uid=uid, email=account["email"], id_token=id_token)

def create_auth_provider(use_memory: bool) -> AuthProvider:
    if use_memory:
        return InMemoryAuthProvider()
    return FirebaseAuthProvider()
