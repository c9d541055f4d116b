from oauth_verifier.api.identity import router as identity_router
from oauth_verifier.api.system import router as system_router

__all__ = ["identity_router", "system_router"]
