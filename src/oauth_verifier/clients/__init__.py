from oauth_verifier.clients.errors import (
    ClaimsValidationError,
    DecodeError,
    FormatError,
    IdentityError,
    InputValidationError,
    KeyNotFoundError,
    NetworkError,
    ProviderNotImplementedError,
    SignatureError,
)
from oauth_verifier.clients.keys import CachedKeySetFetcher, KeySetFetcher, PublicKeyEntry, PublicKeySet, fetch_keys
from oauth_verifier.clients.request import (
    ContentType,
    OutboundRequest,
    OutboundResponse,
    RequestExecutor,
    execute_request,
)

__all__ = [
    "CachedKeySetFetcher",
    "ClaimsValidationError",
    "ContentType",
    "DecodeError",
    "FormatError",
    "IdentityError",
    "InputValidationError",
    "KeyNotFoundError",
    "KeySetFetcher",
    "NetworkError",
    "OutboundRequest",
    "OutboundResponse",
    "ProviderNotImplementedError",
    "PublicKeyEntry",
    "PublicKeySet",
    "RequestExecutor",
    "SignatureError",
    "execute_request",
    "fetch_keys",
]
