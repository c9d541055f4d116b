from __future__ import annotations

import logging
import time
from typing import Callable

from oauth_verifier.app.claims import AppleClaims, check_claims
from oauth_verifier.clients.errors import InputValidationError
from oauth_verifier.clients.keys import CachedKeySetFetcher, KeySetFetcher, PublicKeySet
from oauth_verifier.clients.request import (
    PROVIDER_TIMEOUT,
    ContentType,
    OutboundRequest,
    RequestExecutor,
    expect_ok,
)
from oauth_verifier.clients.types import KeySetSource
from oauth_verifier.clients.verifier import CodeExchanger, IdentityTokenVerifier
from oauth_verifier.providers.base import ProviderService

logger = logging.getLogger(__name__)

APPLE_BASE_ENDPOINT = "https://appleid.apple.com"
APPLE_URL_AUTH_KEYS = APPLE_BASE_ENDPOINT + "/auth/keys"
APPLE_URL_AUTH_TOKEN = APPLE_BASE_ENDPOINT + "/auth/token"
APPLE_URL_AUTH_REVOKE = APPLE_BASE_ENDPOINT + "/auth/revoke"
APPLE_ISSUER = APPLE_BASE_ENDPOINT


class AppleProvider:
    """Sign in with Apple: identity token verification, code exchange and revocation."""

    def __init__(
        self,
        service: ProviderService,
        *,
        executor: RequestExecutor | None = None,
        keys_url: str = APPLE_URL_AUTH_KEYS,
        token_url: str = APPLE_URL_AUTH_TOKEN,
        revoke_url: str = APPLE_URL_AUTH_REVOKE,
        timeout: float = PROVIDER_TIMEOUT,
        key_cache_ttl: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
        validate_claims: bool = False,
        leeway: int = 0,
    ) -> None:
        self.service = service
        self._executor = executor or RequestExecutor()
        self._revoke_url = revoke_url
        self._timeout = timeout
        self._validate_claims = validate_claims
        self._leeway = leeway

        keys: KeySetSource = KeySetFetcher(
            keys_url,
            proxy_url=service.proxy_url,
            timeout=timeout,
            executor=self._executor,
        )
        if key_cache_ttl > 0:
            keys = CachedKeySetFetcher(keys, key_cache_ttl, clock=clock)
        self._keys = keys
        self._verifier = IdentityTokenVerifier(keys, AppleClaims)
        self._exchanger = CodeExchanger(
            token_url,
            client_id=service.client_id,
            client_secret=service.client_secret,
            redirect_uri=service.redirect_url,
            proxy_url=service.proxy_url,
            timeout=timeout,
            executor=self._executor,
        )

    async def fetch_key_set(self) -> PublicKeySet:
        return await self._keys.fetch()

    async def verify_identity_token(self, token: str) -> AppleClaims:
        claims = await self._verifier.verify(token)
        if self._validate_claims:
            check_claims(
                claims,
                audience=self.service.client_id,
                issuer=APPLE_ISSUER,
                leeway=self._leeway,
            )
        return claims

    async def exchange_code(self, code: str) -> int:
        # Apple requires an https redirect_uri for this call; it is passed through unchecked
        return await self._exchanger.exchange(code)

    async def revoke_token(self, token: str, token_type_hint: str = "access_token") -> bool:
        """Invalidate an access or refresh token previously issued by Apple."""
        if not token:
            raise InputValidationError("Invalid access token", error="invalid_access_token")
        resp = await self._executor.execute(
            OutboundRequest(
                url=self._revoke_url,
                method="POST",
                proxy_url=self.service.proxy_url,
                content_type=ContentType.WWW_FORM,
                timeout=self._timeout,
                data={
                    "client_id": self.service.client_id,
                    "client_secret": self.service.client_secret,
                    "token": token,
                    "token_type_hint": token_type_hint,
                },
            )
        )
        expect_ok(resp, "Token revocation failed", error="revoke_failed")
        logger.info("apple token revoked", extra={"token_type_hint": token_type_hint})
        return True
