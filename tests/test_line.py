from urllib.parse import parse_qs

import pytest
import respx
from httpx import Response

from oauth_verifier.clients.errors import InputValidationError, NetworkError, ProviderNotImplementedError
from oauth_verifier.providers import AuthType, LineProvider, ProviderService

LINE_BASE = "https://api.line.me"


@pytest.fixture
def line():
    service = ProviderService(
        client_id="1657000000",
        client_secret="line-channel-secret",
        auth_type=AuthType.LINE,
    )
    return LineProvider(service)


@pytest.mark.asyncio
@respx.mock
async def test_verify_access_token(line):
    route = respx.get(LINE_BASE + "/oauth2/v2.1/verify").mock(
        return_value=Response(200, json={"scope": "profile openid", "client_id": "1657000000", "expires_in": 2591659})
    )

    verification = await line.verify_access_token("at-1")

    assert route.calls.last.request.url.params["access_token"] == "at-1"
    assert verification.client_id == "1657000000"
    assert verification.expires_in == 2591659


@pytest.mark.asyncio
@respx.mock
async def test_expired_access_token_is_network_error(line):
    respx.get(LINE_BASE + "/oauth2/v2.1/verify").mock(
        return_value=Response(400, json={"error": "invalid_request", "error_description": "access token expired"})
    )

    with pytest.raises(NetworkError) as ei:
        await line.verify_access_token("expired")
    assert ei.value.status_code == 400
    assert ei.value.details["error_description"] == "access token expired"


@pytest.mark.asyncio
@respx.mock
async def test_refresh_access_token(line):
    route = respx.post(LINE_BASE + "/oauth2/v2.1/token").mock(
        return_value=Response(
            200,
            json={
                "token_type": "Bearer",
                "scope": "profile",
                "access_token": "at-2",
                "expires_in": 2592000,
                "refresh_token": "rt-2",
            },
        )
    )

    token = await line.refresh_access_token("rt-1")

    assert token.access_token == "at-2"
    assert token.refresh_token == "rt-2"
    assert parse_qs(route.calls.last.request.content.decode()) == {
        "grant_type": ["refresh_token"],
        "refresh_token": ["rt-1"],
        "client_id": ["1657000000"],
        "client_secret": ["line-channel-secret"],
    }


@pytest.mark.asyncio
@respx.mock
async def test_revoke_access_token(line):
    route = respx.post(LINE_BASE + "/oauth2/v2.1/revoke").mock(return_value=Response(200))

    assert await line.revoke_access_token("at-1") is True
    assert "access_token=at-1" in route.calls.last.request.content.decode()


@pytest.mark.asyncio
@respx.mock
async def test_verify_identity_token_posts_to_line(line):
    route = respx.post(LINE_BASE + "/oauth2/v2.1/verify").mock(
        return_value=Response(
            200,
            json={
                "iss": "https://access.line.me",
                "sub": "U1234567890abcdef",
                "aud": "1657000000",
                "exp": 1504169092,
                "iat": 1504263657,
                "amr": ["pwd"],
                "name": "Taro Line",
            },
        )
    )

    claims = await line.verify_identity_token("id-token")

    assert claims.sub == "U1234567890abcdef"
    assert claims.amr == ["pwd"]
    assert parse_qs(route.calls.last.request.content.decode()) == {
        "id_token": ["id-token"],
        "client_id": ["1657000000"],
    }


@pytest.mark.asyncio
@respx.mock
async def test_user_information_uses_bearer_token(line):
    route = respx.get(LINE_BASE + "/oauth2/v2.1/userinfo").mock(
        return_value=Response(200, json={"sub": "U1234567890abcdef", "name": "Taro Line"})
    )

    info = await line.user_information("at-1")

    assert info.name == "Taro Line"
    assert route.calls.last.request.headers["authorization"] == "Bearer at-1"


@pytest.mark.asyncio
@respx.mock
async def test_user_profile(line):
    respx.get(LINE_BASE + "/v2/profile").mock(
        return_value=Response(
            200,
            json={"userId": "U1234567890abcdef", "displayName": "Taro", "pictureUrl": "https://profile.line-scdn.net/abc"},
        )
    )

    profile = await line.user_profile("at-1")

    assert profile.user_id == "U1234567890abcdef"
    assert profile.display_name == "Taro"
    assert profile.status_message is None


@pytest.mark.asyncio
@respx.mock
async def test_friendship_status(line):
    respx.get(LINE_BASE + "/friendship/v1/status").mock(return_value=Response(200, json={"friendFlag": True}))

    assert await line.friendship_status("at-1") is True


@pytest.mark.parametrize(
    "method",
    [
        "verify_access_token",
        "refresh_access_token",
        "revoke_access_token",
        "verify_identity_token",
        "user_information",
        "user_profile",
        "friendship_status",
    ],
)
@pytest.mark.asyncio
@respx.mock
async def test_empty_argument_is_rejected_without_network(line, method):
    route = respx.route(host="api.line.me").mock(return_value=Response(200, json={}))

    with pytest.raises(InputValidationError):
        await getattr(line, method)("")
    assert not route.called


@pytest.mark.asyncio
async def test_exchange_code_is_not_implemented(line):
    with pytest.raises(ProviderNotImplementedError) as ei:
        await line.exchange_code("c0de")
    assert ei.value.details["operation"] == "exchange_code"


@pytest.mark.asyncio
@respx.mock
async def test_custom_base_url():
    service = ProviderService("1657000000", "secret", AuthType.LINE)
    line = LineProvider(service, base_url="https://line.test/")
    route = respx.get("https://line.test/friendship/v1/status").mock(
        return_value=Response(200, json={"friendFlag": False})
    )

    assert await line.friendship_status("at-1") is False
    assert route.called
