"""
Google sign-in.

The authorization code from the frontend is exchanged at Google's token
endpoint. Identity comes from the returned ID token (received directly
from Google over TLS, so its claims are read without re-verifying the
signature); when that is missing or unreadable, the userinfo endpoint is
asked instead with the access token.
"""
from datetime import timedelta
from typing import Any, Dict, Optional
from uuid import UUID

import httpx
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, settings as default_settings
from ..core.auth import create_access_token
from ..core.exceptions import AuthenticationFailedError, UserNotFoundError
from ..models import User
from ..repositories import SqlUserRepository, UserRepository
from ..schemas import AuthResponse, UserResponse
from .base import TransactionalService


class AuthService(TransactionalService):

    def __init__(
        self,
        db: AsyncSession,
        users: Optional[UserRepository] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None
    ) -> None:
        super().__init__(db)
        self.users = users or SqlUserRepository(db)
        self.http_client = http_client
        self.settings = settings or default_settings

    async def verify_google_code(self, code: str, redirect_uri: Optional[str] = None) -> AuthResponse:
        token_data = await self._exchange_code(code, redirect_uri or self.settings.app_url)
        google_user = await self._resolve_identity(token_data)

        user = await self._find_or_create_user(google_user)

        expires_in = int(token_data.get("expires_in") or self.settings.access_token_expire_minutes * 60)
        token = create_access_token(
            {"sub": str(user.id), "email": user.email, "google_id": user.google_id},
            expires_delta=timedelta(seconds=expires_in)
        )

        self._logger.info("User %s signed in with Google", user.id)
        return AuthResponse(
            token=token,
            expires_in=expires_in,
            user=UserResponse.model_validate(user)
        )

    async def get_current_user(self, user_id: UUID) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        token_request = {
            "code": code,
            "client_id": self.settings.google_client_id,
            "client_secret": self.settings.google_client_secret,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }

        response = await self._request(
            "POST",
            self.settings.google_token_url,
            data=token_request,
            headers={"Accept": "application/json"}
        )
        if response.status_code != 200:
            self._logger.warning("Google token exchange failed: %d", response.status_code)
            raise AuthenticationFailedError(
                f"Token exchange failed: {response.status_code}",
                code="token_exchange_failed"
            )

        return response.json()

    async def _resolve_identity(self, token_data: Dict[str, Any]) -> Dict[str, Any]:
        id_token = token_data.get("id_token")
        if id_token:
            try:
                claims = jwt.get_unverified_claims(id_token)
                if claims.get("sub") and claims.get("email"):
                    return claims
            except JWTError as e:
                self._logger.warning("Unreadable ID token, falling back to userinfo: %s", str(e))

        access_token = token_data.get("access_token")
        if not access_token:
            raise AuthenticationFailedError("Google returned no usable token")

        response = await self._request(
            "GET",
            self.settings.google_userinfo_url,
            headers={"Authorization": f"Bearer {access_token}"}
        )
        if response.status_code != 200:
            raise AuthenticationFailedError(
                f"Failed to get user info: {response.status_code}",
                code="userinfo_failed"
            )

        info = response.json()
        if not info.get("sub") or not info.get("email"):
            raise AuthenticationFailedError("Google profile is missing id or email")
        return info

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            if self.http_client is not None:
                return await self.http_client.request(method, url, **kwargs)

            async with httpx.AsyncClient(timeout=self.settings.google_timeout_seconds) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            self._logger.error("Google request to %s failed: %s", url, str(e))
            raise AuthenticationFailedError("Could not reach Google") from e

    async def _find_or_create_user(self, google_user: Dict[str, Any]) -> User:
        google_id = str(google_user["sub"])
        email = google_user["email"]
        name = google_user.get("name") or email
        picture = google_user.get("picture") or None

        async with self._unit_of_work("Find or create user"):
            user = await self.users.get_by_google_id(google_id)
            if user is not None:
                if user.name != name:
                    user.name = name
                if picture and user.avatar_url != picture:
                    user.avatar_url = picture
                await self.users.update(user)
            else:
                user = await self.users.get_by_email(email)
                if user is not None:
                    # Account created another way; link it to Google
                    user.google_id = google_id
                    if picture:
                        user.avatar_url = picture
                    await self.users.update(user)
                else:
                    user = User(
                        google_id=google_id,
                        email=email,
                        name=name,
                        avatar_url=picture,
                    )
                    await self.users.create(user)
                    self._logger.info("Created user %s for %s", user.id, email)

        return user
