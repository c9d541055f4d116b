from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict, Mapping, Optional

from oauth_verifier.clients.request import RequestExecutor
from oauth_verifier.clients.types import IdentityProvider
from oauth_verifier.providers.apple import AppleProvider
from oauth_verifier.providers.base import AuthType, ProviderService, new_service
from oauth_verifier.providers.facebook import FacebookProvider
from oauth_verifier.providers.google import GoogleProvider
from oauth_verifier.providers.line import LineProvider
from oauth_verifier.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def new_provider(
    service: ProviderService,
    *,
    settings: Optional[Settings] = None,
    executor: RequestExecutor | None = None,
) -> IdentityProvider:
    """Build the facade matching ``service.auth_type``."""
    s = settings or get_settings()
    executor = executor or RequestExecutor(default_timeout=s.http.default_timeout)

    if service.auth_type is AuthType.APPLE:
        return AppleProvider(
            service,
            executor=executor,
            keys_url=s.apple.keys_url,
            token_url=s.apple.token_url,
            revoke_url=s.apple.revoke_url,
            timeout=s.http.provider_timeout,
            key_cache_ttl=s.key_cache.ttl_seconds,
            validate_claims=s.claims.validate_claims,
            leeway=s.claims.leeway_seconds,
        )
    if service.auth_type is AuthType.LINE:
        return LineProvider(
            service,
            executor=executor,
            base_url=s.line.base_url,
            timeout=s.http.provider_timeout,
        )
    if service.auth_type is AuthType.GOOGLE:
        return GoogleProvider(service)
    return FacebookProvider(service)


class ProviderRegistry:
    """Long-lived set of provider facades, one per configured auth type."""

    def __init__(self, providers: Mapping[AuthType, IdentityProvider]) -> None:
        self._providers: Dict[AuthType, IdentityProvider] = dict(providers)

    def get(self, auth_type: AuthType) -> Optional[IdentityProvider]:
        return self._providers.get(auth_type)

    def __contains__(self, auth_type: object) -> bool:
        return auth_type in self._providers

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ProviderRegistry":
        s = settings or get_settings()
        executor = RequestExecutor(default_timeout=s.http.default_timeout)
        providers: Dict[AuthType, IdentityProvider] = {}

        for auth_type, creds in ((AuthType.APPLE, s.apple), (AuthType.LINE, s.line)):
            if not creds.configured:
                logger.info("provider not configured", extra={"provider": auth_type.value})
                continue
            service = new_service(
                creds.client_id,
                creds.client_secret,
                auth_type,
                redirect_url=creds.redirect_url,
                proxy_url=s.http.proxy_url,
            )
            providers[auth_type] = new_provider(service, settings=s, executor=executor)

        # Stubs need no credentials; they only report not implemented
        for auth_type in (AuthType.GOOGLE, AuthType.FACEBOOK):
            providers[auth_type] = new_provider(ProviderService("", "", auth_type), settings=s, executor=executor)

        return cls(providers)


@lru_cache()
def get_provider_registry() -> ProviderRegistry:
    return ProviderRegistry.from_settings()
