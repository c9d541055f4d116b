from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Dict, Optional, Type, TypeVar

from authlib.jose import JsonWebKey
from authlib.jose.errors import JoseError
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from oauth_verifier.clients.errors import DecodeError, FormatError, KeyNotFoundError, SignatureError
from oauth_verifier.clients.keys import PublicKeyEntry, PublicKeySet

ClaimsT = TypeVar("ClaimsT", bound=BaseModel)

_B64URL_RAW = re.compile(r"[A-Za-z0-9_-]*")

RSA_DIGESTS: Dict[str, Type[hashes.HashAlgorithm]] = {
    "RS256": hashes.SHA256,
    "RS384": hashes.SHA384,
    "RS512": hashes.SHA512,
}


@dataclass(frozen=True)
class CompactToken:
    header: str
    payload: str
    signature: str

    @property
    def signing_input(self) -> bytes:
        return f"{self.header}.{self.payload}".encode("utf-8")


class TokenHeader(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    algorithm: str = Field(alias="alg")
    key_id: Optional[str] = Field(default=None, alias="kid")


def split_token(token: str) -> CompactToken:
    parts = token.split(".")
    if len(parts) != 3:
        raise FormatError("Invalid id token format", error="invalid_token_format")
    return CompactToken(*parts)


def b64url_decode(data: str, role: str = "segment") -> bytes:
    """Decode raw (unpadded) base64url, rejecting padding and foreign characters."""
    if not _B64URL_RAW.fullmatch(data):
        raise DecodeError(f"Failed to base64url decode {role}", segment=role)
    try:
        return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Failed to base64url decode {role}", segment=role) from exc


def decode_header(segment: str) -> TokenHeader:
    raw = b64url_decode(segment, "header")
    try:
        return TokenHeader.model_validate_json(raw)
    except ValidationError as exc:
        raise FormatError("Failed to parse id token header", error="invalid_header") from exc


def decode_payload(segment: str, model: Type[ClaimsT]) -> ClaimsT:
    raw = b64url_decode(segment, "payload")
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        raise FormatError("Failed to unmarshal id token claims", error="invalid_claims_format") from exc


def select_key(key_set: PublicKeySet, header: TokenHeader) -> PublicKeyEntry:
    entry = key_set.find(header.algorithm, header.key_id)
    if entry is None:
        # Same error whichever of kid/alg failed to match
        raise KeyNotFoundError("Invalid id signature")
    return entry


def load_public_key(entry: PublicKeyEntry) -> rsa.RSAPublicKey:
    if entry.key_type != "RSA" or not entry.modulus or not entry.exponent:
        raise SignatureError("Invalid id signature", description="unusable key material")
    try:
        # authlib decodes leniently; reject malformed material first
        b64url_decode(entry.modulus, "modulus")
        b64url_decode(entry.exponent, "exponent")
        jwk = JsonWebKey.import_key({"kty": "RSA", "n": entry.modulus, "e": entry.exponent})
        return jwk.get_public_key()
    except (DecodeError, JoseError, ValueError) as exc:
        raise SignatureError("Invalid id signature", description="unusable key material") from exc


def verify_signature(
    token: CompactToken,
    key_set: PublicKeySet,
    header: TokenHeader | None = None,
) -> PublicKeyEntry:
    """Verify the PKCS#1 v1.5 signature of ``token`` against ``key_set``.

    Returns the key entry that verified the token. Bad key material and a
    mismatching signature both raise SignatureError.
    """
    header = header or decode_header(token.header)
    entry = select_key(key_set, header)

    digest = RSA_DIGESTS.get(entry.algorithm or "")
    if digest is None:
        raise SignatureError("Invalid id signature", description=f"unsupported algorithm {entry.algorithm}")

    public_key = load_public_key(entry)
    signature = b64url_decode(token.signature, "signature")
    try:
        public_key.verify(signature, token.signing_input, padding.PKCS1v15(), digest())
    except InvalidSignature as exc:
        raise SignatureError("Invalid id signature") from exc
    return entry
