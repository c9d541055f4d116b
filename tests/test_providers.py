import pytest

from oauth_verifier.clients.errors import InputValidationError, ProviderNotImplementedError
from oauth_verifier.clients.types import KeySetProvider
from oauth_verifier.providers import (
    AppleProvider,
    AuthType,
    FacebookProvider,
    GoogleProvider,
    LineProvider,
    ProviderRegistry,
    ProviderService,
    new_provider,
    new_service,
)
from oauth_verifier.settings import Settings
from oauth_verifier.settings.config import AppleSettings, LineSettings


def test_new_service_requires_credentials():
    with pytest.raises(InputValidationError) as ei:
        new_service("", "secret", AuthType.APPLE)
    assert ei.value.error == "invalid_client_id"

    with pytest.raises(InputValidationError) as ei:
        new_service("com.short.roll", "", AuthType.APPLE)
    assert ei.value.error == "invalid_client_secret"


def test_new_service_normalizes_empty_proxy():
    service = new_service("com.short.roll", "secret", AuthType.APPLE, proxy_url="")
    assert service.proxy_url is None
    assert service.auth_type is AuthType.APPLE


@pytest.mark.parametrize(
    "value, expected",
    [("apple", AuthType.APPLE), ("Line", AuthType.LINE), (" GOOGLE ", AuthType.GOOGLE), ("facebook", AuthType.FACEBOOK)],
)
def test_auth_type_parse(value, expected):
    assert AuthType.parse(value) is expected


def test_auth_type_parse_rejects_unknown():
    with pytest.raises(InputValidationError):
        AuthType.parse("twitter")


@pytest.mark.parametrize(
    "auth_type, cls",
    [
        (AuthType.APPLE, AppleProvider),
        (AuthType.LINE, LineProvider),
        (AuthType.GOOGLE, GoogleProvider),
        (AuthType.FACEBOOK, FacebookProvider),
    ],
)
def test_new_provider_matches_auth_type(auth_type, cls):
    provider = new_provider(ProviderService("id", "secret", auth_type), settings=Settings())
    assert isinstance(provider, cls)


@pytest.mark.parametrize("auth_type", [AuthType.GOOGLE, AuthType.FACEBOOK])
@pytest.mark.asyncio
async def test_stub_providers_report_not_implemented(auth_type):
    provider = new_provider(ProviderService("id", "secret", auth_type), settings=Settings())

    with pytest.raises(ProviderNotImplementedError) as ei:
        await provider.verify_identity_token("token")
    assert ei.value.details == {"provider": auth_type.value, "operation": "verify_identity_token"}

    with pytest.raises(ProviderNotImplementedError):
        await provider.exchange_code("c0de")


def test_registry_only_holds_configured_providers():
    settings = Settings(apple=AppleSettings(client_id="com.short.roll", client_secret="secret"))

    registry = ProviderRegistry.from_settings(settings)

    assert isinstance(registry.get(AuthType.APPLE), AppleProvider)
    assert registry.get(AuthType.LINE) is None
    assert AuthType.LINE not in registry
    assert AuthType.GOOGLE in registry
    assert AuthType.FACEBOOK in registry


def test_registry_with_both_configured():
    settings = Settings(
        apple=AppleSettings(client_id="com.short.roll", client_secret="secret"),
        line=LineSettings(client_id="1657000000", client_secret="secret"),
    )

    registry = ProviderRegistry.from_settings(settings)

    assert isinstance(registry.get(AuthType.LINE), LineProvider)
    assert registry.get(AuthType.APPLE).service.client_id == "com.short.roll"


def test_only_apple_publishes_a_key_set(apple_service):
    assert isinstance(AppleProvider(apple_service), KeySetProvider)
    assert not isinstance(LineProvider(ProviderService("id", "secret", AuthType.LINE)), KeySetProvider)
    assert not isinstance(GoogleProvider(ProviderService("", "", AuthType.GOOGLE)), KeySetProvider)
