from oauth_verifier.providers.apple import AppleProvider
from oauth_verifier.providers.base import AuthType, ProviderService, UnsupportedProvider, new_service
from oauth_verifier.providers.facebook import FacebookProvider
from oauth_verifier.providers.google import GoogleProvider
from oauth_verifier.providers.line import LineProvider
from oauth_verifier.providers.registry import ProviderRegistry, get_provider_registry, new_provider

__all__ = [
    "AppleProvider",
    "AuthType",
    "FacebookProvider",
    "GoogleProvider",
    "LineProvider",
    "ProviderRegistry",
    "ProviderService",
    "UnsupportedProvider",
    "get_provider_registry",
    "new_provider",
    "new_service",
]
