from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from oauth_verifier.clients.request import (
    PROVIDER_TIMEOUT,
    OutboundRequest,
    RequestExecutor,
    expect_ok,
    parse_json_response,
)
from oauth_verifier.clients.types import KeySetSource

logger = logging.getLogger(__name__)


class PublicKeyEntry(BaseModel):
    """One JWK entry as published by a provider's keys endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    key_type: str = Field(alias="kty")
    key_id: Optional[str] = Field(default=None, alias="kid")
    usage: Optional[str] = Field(default=None, alias="use")
    algorithm: Optional[str] = Field(default=None, alias="alg")
    # base64url, big-endian unsigned integers
    modulus: Optional[str] = Field(default=None, alias="n")
    exponent: Optional[str] = Field(default=None, alias="e")


class PublicKeySet(BaseModel):
    model_config = ConfigDict(frozen=True)

    keys: Tuple[PublicKeyEntry, ...]

    def find(self, algorithm: str | None, key_id: str | None) -> PublicKeyEntry | None:
        """Return the first entry matching both ``algorithm`` and ``key_id``."""
        if not algorithm or not key_id:
            return None
        for entry in self.keys:
            if entry.algorithm == algorithm and entry.key_id == key_id:
                return entry
        return None


class KeySetFetcher:
    """Fetches a provider key set on every call."""

    def __init__(
        self,
        endpoint_url: str,
        *,
        proxy_url: str | None = None,
        timeout: float = PROVIDER_TIMEOUT,
        executor: RequestExecutor | None = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self._proxy_url = proxy_url
        self._timeout = timeout
        self._executor = executor or RequestExecutor()

    async def fetch(self) -> PublicKeySet:
        resp = await self._executor.execute(
            OutboundRequest(
                url=self.endpoint_url,
                method="GET",
                proxy_url=self._proxy_url,
                timeout=self._timeout,
            )
        )
        expect_ok(resp, "fetch keys fail", error="fetch_keys_fail")
        key_set = parse_json_response(resp, PublicKeySet, what="key set")
        logger.debug("fetched key set", extra={"url": self.endpoint_url, "keys_count": len(key_set.keys)})
        return key_set


async def fetch_keys(
    endpoint_url: str,
    proxy_url: str | None = None,
    *,
    executor: RequestExecutor | None = None,
) -> PublicKeySet:
    return await KeySetFetcher(endpoint_url, proxy_url=proxy_url, executor=executor).fetch()


class CachedKeySetFetcher:
    """Serves a key set from memory until ``ttl`` seconds have passed.

    Refreshes are single-flight: concurrent callers that find the cache
    stale wait on one lock and reuse the set fetched by whoever got there
    first. Fetch errors propagate and leave the previous entry untouched.
    """

    def __init__(
        self,
        source: KeySetSource,
        ttl: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._source = source
        self._ttl = ttl
        self._clock = clock
        self._keys: PublicKeySet | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    def _fresh(self) -> PublicKeySet | None:
        if self._keys is not None and self._clock() < self._expires_at:
            return self._keys
        return None

    async def fetch(self) -> PublicKeySet:
        cached = self._fresh()
        if cached is not None:
            return cached
        async with self._lock:
            cached = self._fresh()
            if cached is not None:
                return cached
            keys = await self._source.fetch()
            self._keys = keys
            self._expires_at = self._clock() + self._ttl
            logger.info("key set refreshed", extra={"keys_count": len(keys.keys)})
        return keys

    def invalidate(self) -> None:
        self._keys = None
        self._expires_at = 0.0
