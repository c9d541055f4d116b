from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from oauth_verifier.clients.errors import InputValidationError, ProviderNotImplementedError


class AuthType(str, Enum):
    """Third-party login providers."""

    GOOGLE = "Google"
    APPLE = "Apple"
    FACEBOOK = "Facebook"
    LINE = "Line"

    @classmethod
    def parse(cls, value: str) -> "AuthType":
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise InputValidationError(f"Unknown provider: {value}", error="unknown_provider")


@dataclass(frozen=True)
class ProviderService:
    """Credentials and transport options shared by every call to one provider."""

    client_id: str
    client_secret: str
    auth_type: AuthType
    # Where the provider redirects after login; sent with code exchanges
    redirect_url: str = ""
    proxy_url: Optional[str] = None


def new_service(
    client_id: str,
    client_secret: str,
    auth_type: AuthType,
    *,
    redirect_url: str = "",
    proxy_url: str | None = None,
) -> ProviderService:
    if not client_id:
        raise InputValidationError("Invalid client id", error="invalid_client_id")
    if not client_secret:
        raise InputValidationError("Invalid client secret", error="invalid_client_secret")
    return ProviderService(
        client_id=client_id,
        client_secret=client_secret,
        auth_type=auth_type,
        redirect_url=redirect_url,
        proxy_url=proxy_url or None,
    )


class UnsupportedProvider:
    """Provider whose capabilities are declared but not implemented."""

    def __init__(self, service: ProviderService) -> None:
        self.service = service

    def _not_implemented(self, operation: str) -> ProviderNotImplementedError:
        return ProviderNotImplementedError(
            f"{self.service.auth_type.value} does not implement {operation}",
            details={"provider": self.service.auth_type.value, "operation": operation},
        )

    async def verify_identity_token(self, token: str) -> Any:
        raise self._not_implemented("verify_identity_token")

    async def exchange_code(self, code: str) -> int:
        raise self._not_implemented("exchange_code")
