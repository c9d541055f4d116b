from __future__ import annotations

import logging
from typing import Any, Dict, Generic, Optional, Type

from pydantic import BaseModel, ConfigDict, StrictInt

from oauth_verifier.app.jwt import ClaimsT, decode_header, decode_payload, split_token, verify_signature
from oauth_verifier.clients.errors import InputValidationError
from oauth_verifier.clients.request import (
    PROVIDER_TIMEOUT,
    ContentType,
    OutboundRequest,
    RequestExecutor,
    expect_ok,
    parse_json_response,
)
from oauth_verifier.clients.types import KeySetSource

logger = logging.getLogger(__name__)


class IdentityTokenVerifier(Generic[ClaimsT]):
    """Verifies a compact identity token against a provider key set.

    Stages run in order and the first failure propagates:
    empty check, split, header decode, key fetch, key selection and
    signature check, payload decode. Expiry, audience and issuer are not
    checked here.
    """

    def __init__(self, keys: KeySetSource, claims_model: Type[ClaimsT]) -> None:
        self._keys = keys
        self._claims_model = claims_model

    async def verify(self, token: str) -> ClaimsT:
        if not token or not token.strip():
            raise InputValidationError("Invalid id token", error="invalid_id_token")

        compact = split_token(token)
        header = decode_header(compact.header)
        key_set = await self._keys.fetch()
        entry = verify_signature(compact, key_set, header=header)
        claims = decode_payload(compact.payload, self._claims_model)

        logger.debug("id token verified", extra={"kid": entry.key_id, "alg": entry.algorithm})
        return claims


class CodeExchangeResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: StrictInt


class CodeExchanger:
    """Trades an authorization code at a provider token endpoint."""

    def __init__(
        self,
        token_url: str,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str = "",
        proxy_url: Optional[str] = None,
        timeout: float = PROVIDER_TIMEOUT,
        executor: RequestExecutor | None = None,
    ) -> None:
        self.token_url = token_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._proxy_url = proxy_url
        self._timeout = timeout
        self._executor = executor or RequestExecutor()

    def form(self, code: str) -> Dict[str, Any]:
        return {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self._redirect_uri,
        }

    async def exchange(self, code: str) -> int:
        if not code:
            raise InputValidationError("Invalid id code", error="invalid_id_code")

        resp = await self._executor.execute(
            OutboundRequest(
                url=self.token_url,
                method="POST",
                proxy_url=self._proxy_url,
                content_type=ContentType.WWW_FORM,
                timeout=self._timeout,
                data=self.form(code),
            )
        )
        expect_ok(resp, "Code exchange failed", error="code_exchange_failed")
        result = parse_json_response(resp, CodeExchangeResult, what="code exchange response")
        return result.code
