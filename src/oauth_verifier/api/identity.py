from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from oauth_verifier.clients.errors import InputValidationError, ProviderNotImplementedError
from oauth_verifier.clients.types import IdentityProvider, KeySetProvider
from oauth_verifier.providers import AuthType, ProviderRegistry, get_provider_registry

router = APIRouter(prefix="/providers", tags=["identity"])


class IdTokenRequest(BaseModel):
    id_token: str


class CodeExchangeRequest(BaseModel):
    code: str


class CodeExchangeResponse(BaseModel):
    code: int


def _resolve(provider: str, registry: ProviderRegistry) -> IdentityProvider:
    try:
        auth_type = AuthType.parse(provider)
    except InputValidationError:
        raise HTTPException(status_code=404, detail=f"Unknown provider: {provider}")
    found = registry.get(auth_type)
    if found is None:
        raise HTTPException(status_code=404, detail=f"Provider not configured: {auth_type.value}")
    return found


@router.post("/{provider}/id-token/verify")
async def verify_id_token(
    provider: str,
    body: IdTokenRequest,
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> Dict[str, Any]:
    claims = await _resolve(provider, registry).verify_identity_token(body.id_token)
    return claims.as_dict()


@router.post("/{provider}/code/exchange", response_model=CodeExchangeResponse)
async def exchange_code(
    provider: str,
    body: CodeExchangeRequest,
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> CodeExchangeResponse:
    code = await _resolve(provider, registry).exchange_code(body.code)
    return CodeExchangeResponse(code=code)


@router.get("/{provider}/keys")
async def key_set(
    provider: str,
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> Dict[str, Any]:
    found = _resolve(provider, registry)
    if not isinstance(found, KeySetProvider):
        raise ProviderNotImplementedError(f"{provider} does not publish a key set")
    keys = await found.fetch_key_set()
    return keys.model_dump(by_alias=True, exclude_none=True)
