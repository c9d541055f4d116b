from __future__ import annotations

from fastapi import APIRouter, Depends

from oauth_verifier.providers import AuthType, ProviderRegistry, get_provider_registry

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check() -> dict:
    return {"status": "healthy", "service": "oauth-verifier"}


@router.get("/providers")
async def list_providers(registry: ProviderRegistry = Depends(get_provider_registry)) -> dict:
    return {"providers": [auth_type.value for auth_type in AuthType if auth_type in registry]}
