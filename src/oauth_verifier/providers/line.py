from __future__ import annotations

from typing import Dict, List, Optional, Type, TypeVar
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field

from oauth_verifier.app.claims import IdTokenClaims
from oauth_verifier.clients.errors import InputValidationError, ProviderNotImplementedError
from oauth_verifier.clients.request import (
    PROVIDER_TIMEOUT,
    ContentType,
    OutboundRequest,
    OutboundResponse,
    RequestExecutor,
    expect_ok,
    parse_json_response,
)
from oauth_verifier.providers.base import ProviderService

LINE_BASE_ENDPOINT = "https://api.line.me"

ModelT = TypeVar("ModelT", bound=BaseModel)


class LineAccessToken(BaseModel):
    access_token: str
    expires_in: int
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    scope: Optional[str] = None


class LineAccessTokenVerification(BaseModel):
    scope: str
    client_id: str
    expires_in: int


class LineIdTokenClaims(IdTokenClaims):
    amr: Optional[List[str]] = None
    name: Optional[str] = None
    picture: Optional[str] = None


class LineUserInformation(BaseModel):
    sub: str
    name: Optional[str] = None
    picture: Optional[str] = None


class LineUserProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    display_name: str = Field(alias="displayName")
    picture_url: Optional[str] = Field(default=None, alias="pictureUrl")
    status_message: Optional[str] = Field(default=None, alias="statusMessage")


class LineFriendship(BaseModel):
    friend_flag: bool = Field(alias="friendFlag")


class LineProvider:
    """LINE Login v2.1 API.

    LINE verifies ID tokens server-side, so ``verify_identity_token`` posts
    the token to the verify endpoint instead of checking a signature locally.

    documentation https://developers.line.biz/en/reference/line-login/
    """

    def __init__(
        self,
        service: ProviderService,
        *,
        executor: RequestExecutor | None = None,
        base_url: str = LINE_BASE_ENDPOINT,
        timeout: float = PROVIDER_TIMEOUT,
    ) -> None:
        self.service = service
        self._executor = executor or RequestExecutor()
        self._timeout = timeout
        base = base_url.rstrip("/")
        self.url_access_token = base + "/oauth2/v2.1/token"
        self.url_verify = base + "/oauth2/v2.1/verify"
        self.url_revoke = base + "/oauth2/v2.1/revoke"
        self.url_userinfo = base + "/oauth2/v2.1/userinfo"
        self.url_profile = base + "/v2/profile"
        self.url_friendship_status = base + "/friendship/v1/status"

    async def _send(
        self,
        url: str,
        method: str,
        *,
        data: Dict[str, str] | None = None,
        bearer: str | None = None,
    ) -> OutboundResponse:
        headers: Dict[str, str] = {}
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        return await self._executor.execute(
            OutboundRequest(
                url=url,
                method=method,
                proxy_url=self.service.proxy_url,
                content_type=ContentType.WWW_FORM if data else None,
                timeout=self._timeout,
                headers=headers,
                data=dict(data or {}),
            )
        )

    def _decode(self, resp: OutboundResponse, model: Type[ModelT], message: str) -> ModelT:
        expect_ok(resp, message)
        return parse_json_response(resp, model, what=message.lower())

    async def verify_access_token(self, access_token: str) -> LineAccessTokenVerification:
        """Check an access token; an expired one yields a 400 from LINE."""
        if not access_token:
            raise InputValidationError("Invalid access token", error="invalid_access_token")
        url = f"{self.url_verify}?{urlencode({'access_token': access_token})}"
        resp = await self._send(url, "GET")
        return self._decode(resp, LineAccessTokenVerification, "Access token verification")

    async def refresh_access_token(self, refresh_token: str) -> LineAccessToken:
        if not refresh_token:
            raise InputValidationError("Invalid refresh token", error="invalid_refresh_token")
        resp = await self._send(
            self.url_access_token,
            "POST",
            data={
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.service.client_id,
                "client_secret": self.service.client_secret,
            },
        )
        return self._decode(resp, LineAccessToken, "Access token refresh")

    async def revoke_access_token(self, access_token: str) -> bool:
        if not access_token:
            raise InputValidationError("Invalid access token", error="invalid_access_token")
        resp = await self._send(
            self.url_revoke,
            "POST",
            data={
                "access_token": access_token,
                "client_id": self.service.client_id,
                "client_secret": self.service.client_secret,
            },
        )
        expect_ok(resp, "Access token revocation")
        return True

    async def verify_identity_token(self, token: str) -> LineIdTokenClaims:
        if not token or not token.strip():
            raise InputValidationError("Invalid id token", error="invalid_id_token")
        resp = await self._send(
            self.url_verify,
            "POST",
            data={"id_token": token, "client_id": self.service.client_id},
        )
        return self._decode(resp, LineIdTokenClaims, "ID token verification")

    async def exchange_code(self, code: str) -> int:
        raise ProviderNotImplementedError(
            "Line does not implement exchange_code",
            details={"provider": self.service.auth_type.value, "operation": "exchange_code"},
        )

    async def user_information(self, access_token: str) -> LineUserInformation:
        """Requires an access token with the openid scope."""
        if not access_token:
            raise InputValidationError("Invalid access token", error="invalid_access_token")
        resp = await self._send(self.url_userinfo, "GET", bearer=access_token)
        return self._decode(resp, LineUserInformation, "User information")

    async def user_profile(self, access_token: str) -> LineUserProfile:
        """Requires an access token with the profile scope."""
        if not access_token:
            raise InputValidationError("Invalid access token", error="invalid_access_token")
        resp = await self._send(self.url_profile, "GET", bearer=access_token)
        return self._decode(resp, LineUserProfile, "User profile")

    async def friendship_status(self, access_token: str) -> bool:
        """Whether the user has added the linked LINE Official Account as a friend."""
        if not access_token:
            raise InputValidationError("Invalid access token", error="invalid_access_token")
        resp = await self._send(self.url_friendship_status, "GET", bearer=access_token)
        return self._decode(resp, LineFriendship, "Friendship status").friend_flag
