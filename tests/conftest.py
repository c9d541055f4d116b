import base64

import pytest
from authlib.jose import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from oauth_verifier.providers import AuthType, ProviderService

KID = "W6WcOKB"


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_uint(value: int) -> str:
    return _b64url(value.to_bytes((value.bit_length() + 7) // 8, "big"))


@pytest.fixture(scope="session")
def signing_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rotated_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jwk_for():
    def build(private_key, kid: str, alg: str = "RS256") -> dict:
        numbers = private_key.public_key().public_numbers()
        return {
            "kty": "RSA",
            "kid": kid,
            "use": "sig",
            "alg": alg,
            "n": _b64url_uint(numbers.n),
            "e": _b64url_uint(numbers.e),
        }

    return build


@pytest.fixture
def key_document(signing_key, rotated_key, jwk_for):
    return {"keys": [jwk_for(rotated_key, "YuyXoY"), jwk_for(signing_key, KID)]}


@pytest.fixture(scope="session")
def sign_token(signing_key):
    def sign(payload: dict, *, kid: str = KID, alg: str = "RS256", key=None) -> str:
        pem = (key or signing_key).private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
        return jwt.encode({"alg": alg, "kid": kid}, payload, pem).decode("ascii")

    return sign


@pytest.fixture
def apple_payload():
    return {
        "iss": "https://appleid.apple.com",
        "aud": "com.short.roll",
        "exp": 1698996183,
        "iat": 1698909783,
        "sub": "001597.3efce279e74849ce936f38b726a9b3e5.0345",
        "c_hash": "iALygbkQspLwD4p7tjuuTw",
        "email": "rollshort@icloud.com",
        "email_verified": "true",
        "auth_time": 1698909783,
        "nonce_supported": True,
    }


@pytest.fixture
def apple_service():
    return ProviderService(
        client_id="com.short.roll",
        client_secret="apple-client-secret",
        auth_type=AuthType.APPLE,
        redirect_url="https://example.test/callback",
    )


@pytest.fixture
def tamper():
    def flip_signature_bit(token: str) -> str:
        header, payload, signature = token.split(".")
        raw = bytearray(base64.urlsafe_b64decode(signature + "=" * (-len(signature) % 4)))
        raw[0] ^= 0x01
        return f"{header}.{payload}.{_b64url(bytes(raw))}"

    return flip_signature_bit
