from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from oauth_verifier.clients.errors import ClaimsValidationError


class IdTokenClaims(BaseModel):
    """Payload of a verified identity token.

    Fields a provider adds beyond the declared ones are kept as extras.
    """

    model_config = ConfigDict(extra="allow")

    iss: Optional[str] = None
    aud: Union[str, List[str], None] = None
    sub: Optional[str] = None
    iat: Union[int, float, None] = None
    exp: Union[int, float, None] = None
    auth_time: Union[int, float, None] = None
    nonce: Optional[str] = None
    email: Optional[str] = None
    # Apple sends "true"/"false" strings, others send booleans
    email_verified: Union[bool, str, None] = None

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class AppleClaims(IdTokenClaims):
    c_hash: Optional[str] = None
    nonce_supported: Optional[bool] = None
    is_private_email: Union[bool, str, None] = None
    real_user_status: Optional[int] = None


def check_claims(
    claims: IdTokenClaims,
    *,
    audience: str | None = None,
    issuer: str | None = None,
    now: float | None = None,
    leeway: int = 0,
) -> None:
    """Check expiry, issue time, issuer and audience of verified claims.

    Signature verification does not run these checks; callers opt in.
    """
    current = time.time() if now is None else now

    if claims.exp is None:
        raise ClaimsValidationError("Token has no expiry", error="missing_exp")
    if claims.exp + leeway <= current:
        raise ClaimsValidationError("Token has expired", error="token_expired")
    if claims.iat is not None and claims.iat - leeway > current:
        raise ClaimsValidationError("Token issued in the future", error="invalid_iat")

    if issuer and claims.iss != issuer:
        raise ClaimsValidationError("Invalid issuer", error="invalid_issuer")

    if audience:
        aud = claims.aud
        if isinstance(aud, list):
            if audience not in aud:
                raise ClaimsValidationError("Invalid audience", error="invalid_audience")
        elif aud != audience:
            raise ClaimsValidationError("Invalid audience", error="invalid_audience")
