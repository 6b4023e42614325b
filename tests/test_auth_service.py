"""
Tests for Google sign-in, with Google's endpoints served by httpx.MockTransport.
"""
import httpx
import pytest
from jose import jwt

from sprint_backlog.config import settings
from sprint_backlog.core.auth import decode_access_token
from sprint_backlog.core.exceptions import AuthenticationFailedError
from sprint_backlog.repositories import SqlUserRepository
from sprint_backlog.services import AuthService


def make_id_token(**claims):
    return jwt.encode(claims, "google-signing-key", algorithm="HS256")


class FakeGoogle:
    """Records requests and answers the token and userinfo endpoints."""

    def __init__(self, token_status=200, token_body=None, userinfo_body=None):
        self.token_status = token_status
        self.token_body = token_body or {}
        self.userinfo_body = userinfo_body
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == settings.google_token_url:
            return httpx.Response(self.token_status, json=self.token_body)
        if str(request.url) == settings.google_userinfo_url and self.userinfo_body is not None:
            return httpx.Response(200, json=self.userinfo_body)
        return httpx.Response(404, json={"error": "not_found"})


@pytest.fixture
async def make_auth_service(db):
    clients = []

    def _make(google: FakeGoogle) -> AuthService:
        client = httpx.AsyncClient(transport=httpx.MockTransport(google))
        clients.append(client)
        return AuthService(db, http_client=client)

    yield _make

    for client in clients:
        await client.aclose()


class TestGoogleSignIn:

    async def test_new_user_from_id_token(self, db, make_auth_service):
        google = FakeGoogle(token_body={
            "access_token": "ya29.token",
            "expires_in": 3599,
            "id_token": make_id_token(sub="g-123", email="dana@example.com", name="Dana",
                                      picture="https://example.com/dana.png"),
        })
        service = make_auth_service(google)

        result = await service.verify_google_code("auth-code", "http://localhost:5173")

        assert result.expires_in == 3599
        assert result.user.email == "dana@example.com"
        assert result.user.avatar_url == "https://example.com/dana.png"
        assert decode_access_token(result.token) == result.user.id

        assert len(google.requests) == 1
        body = google.requests[0].content.decode()
        assert "code=auth-code" in body
        assert "grant_type=authorization_code" in body

        stored = await SqlUserRepository(db).get_by_google_id("g-123")
        assert stored.id == result.user.id

    async def test_userinfo_fallback_without_id_token(self, make_auth_service):
        google = FakeGoogle(
            token_body={"access_token": "ya29.token", "expires_in": 600},
            userinfo_body={"sub": "g-456", "email": "eli@example.com", "name": "Eli"},
        )
        service = make_auth_service(google)

        result = await service.verify_google_code("auth-code")

        assert result.user.name == "Eli"
        assert google.requests[1].headers["Authorization"] == "Bearer ya29.token"

    async def test_existing_email_is_linked(self, db, make_auth_service, user_id):
        google = FakeGoogle(token_body={
            "access_token": "ya29.token",
            "id_token": make_id_token(sub="g-new", email="alice@example.com", name="Alice"),
        })
        service = make_auth_service(google)

        result = await service.verify_google_code("auth-code")

        assert result.user.id == user_id
        assert result.expires_in == settings.access_token_expire_minutes * 60
        user = await SqlUserRepository(db).get_by_id(user_id)
        assert user.google_id == "g-new"

    async def test_returning_user_keeps_id_and_refreshes_name(self, make_auth_service, user_id):
        google = FakeGoogle(token_body={
            "access_token": "ya29.token",
            "id_token": make_id_token(sub="google-alice", email="alice@example.com", name="Alice Cooper"),
        })
        service = make_auth_service(google)

        result = await service.verify_google_code("auth-code")

        assert result.user.id == user_id
        assert result.user.name == "Alice Cooper"

    async def test_token_exchange_failure(self, make_auth_service):
        service = make_auth_service(FakeGoogle(token_status=400, token_body={"error": "invalid_grant"}))

        with pytest.raises(AuthenticationFailedError) as exc_info:
            await service.verify_google_code("expired-code")

        assert exc_info.value.code == "token_exchange_failed"

    async def test_userinfo_failure(self, make_auth_service):
        service = make_auth_service(FakeGoogle(token_body={"access_token": "ya29.token"}))

        with pytest.raises(AuthenticationFailedError) as exc_info:
            await service.verify_google_code("auth-code")

        assert exc_info.value.code == "userinfo_failed"

    async def test_no_usable_token(self, make_auth_service):
        service = make_auth_service(FakeGoogle(token_body={"token_type": "Bearer"}))

        with pytest.raises(AuthenticationFailedError):
            await service.verify_google_code("auth-code")

    async def test_network_error(self, db):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(unreachable)) as client:
            service = AuthService(db, http_client=client)

            with pytest.raises(AuthenticationFailedError):
                await service.verify_google_code("auth-code")


class TestAccessTokens:

    def test_garbage_token(self):
        assert decode_access_token("not-a-jwt") is None

    def test_token_signed_with_other_key(self, user_id):
        token = jwt.encode({"sub": str(user_id)}, "someone-else", algorithm="HS256")

        assert decode_access_token(token) is None
