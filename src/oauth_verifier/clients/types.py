from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from oauth_verifier.clients.keys import PublicKeySet


class KeySetSource(Protocol):
    async def fetch(self) -> "PublicKeySet":
        ...


class IdentityProvider(Protocol):
    async def verify_identity_token(self, token: str) -> Any:
        ...

    async def exchange_code(self, code: str) -> int:
        ...


@runtime_checkable
class KeySetProvider(IdentityProvider, Protocol):
    async def fetch_key_set(self) -> "PublicKeySet":
        ...
