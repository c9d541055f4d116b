from __future__ import annotations

from typing import Any, Mapping


class IdentityError(Exception):
    """Base error for identity token verification and provider calls."""

    default_error = "identity_error"

    def __init__(
        self,
        message: str,
        *,
        error: str | None = None,
        description: str | None = None,
        status_code: int | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error = error or self.default_error
        self.description = description
        self.status_code = status_code
        self.details = dict(details or {})


class InputValidationError(IdentityError):
    """Raised when the caller passes an empty token/code or a bad request config."""

    default_error = "invalid_request"


class FormatError(IdentityError):
    """Raised for a malformed compact token or an unexpected JSON shape."""

    default_error = "invalid_format"


class DecodeError(IdentityError):
    """Raised when a token segment is not valid raw base64url."""

    default_error = "invalid_encoding"

    def __init__(self, message: str, *, segment: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.segment = segment


class NetworkError(IdentityError):
    """Raised on transport failures and unexpected provider status codes."""

    default_error = "network_error"


class KeyNotFoundError(IdentityError):
    """Raised when no published key matches the token header."""

    default_error = "invalid_signature"


class SignatureError(IdentityError):
    default_error = "invalid_signature"


class ClaimsValidationError(IdentityError):
    default_error = "invalid_claims"


class ProviderNotImplementedError(IdentityError):
    default_error = "not_implemented"
