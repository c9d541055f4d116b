from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Type, TypeVar, Union
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ValidationError

from oauth_verifier.clients.errors import FormatError, InputValidationError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
PROVIDER_TIMEOUT = 30.0
ALLOWED_METHODS = ("GET", "POST")
# socks schemes need the httpx[socks] extra at request time
PROXY_SCHEMES = ("http", "https", "socks5", "socks5h")

ModelT = TypeVar("ModelT", bound=BaseModel)
DataValue = Union[str, Sequence[str]]


class ContentType(str, Enum):
    JSON = "application/json;charset=utf-8"
    WWW_FORM = "application/x-www-form-urlencoded"

    @classmethod
    def from_header(cls, value: str | None) -> Optional["ContentType"]:
        if not value:
            return None
        media_type = value.split(";", 1)[0].strip().lower()
        if media_type == "application/json":
            return cls.JSON
        if media_type == cls.WWW_FORM.value:
            return cls.WWW_FORM
        return None


@dataclass
class OutboundRequest:
    url: str
    method: str = "GET"
    proxy_url: str | None = None
    content_type: ContentType | None = None
    timeout: float = 0.0
    headers: Dict[str, str] = field(default_factory=dict)
    data: Dict[str, DataValue] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None


@dataclass(frozen=True)
class OutboundResponse:
    status_code: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def encode_body(request: OutboundRequest) -> bytes:
    """Serialize ``request.data`` according to its content type.

    The content type falls back to the ``Content-Type`` header when unset.
    A request without data always has an empty body.
    """
    if not request.data:
        return b""

    content_type = request.content_type or ContentType.from_header(request.header("Content-Type"))
    if content_type is ContentType.JSON:
        return json.dumps(request.data).encode("utf-8")
    if content_type is ContentType.WWW_FORM:
        return urlencode(request.data, doseq=True).encode("ascii")
    raise InputValidationError(
        "Request data requires a JSON or form content type",
        error="unsupported_content_type",
    )


def _validate_proxy(proxy_url: str) -> str:
    try:
        parsed = httpx.URL(proxy_url)
    except httpx.InvalidURL as exc:
        raise InputValidationError(f"Invalid proxy url: {exc}", error="invalid_proxy_url") from exc
    if parsed.scheme not in PROXY_SCHEMES or not parsed.host:
        raise InputValidationError(f"Invalid proxy url: {proxy_url!r}", error="invalid_proxy_url")
    return proxy_url


class RequestExecutor:
    """Runs a single outbound HTTP request per call, with no retries."""

    def __init__(self, *, default_timeout: float = DEFAULT_TIMEOUT) -> None:
        self._default_timeout = default_timeout

    def client_options(self, request: OutboundRequest) -> Dict[str, Any]:
        timeout = request.timeout if request.timeout > 0 else self._default_timeout
        options: Dict[str, Any] = {"timeout": timeout}
        if request.proxy_url:
            options["proxy"] = _validate_proxy(request.proxy_url)
        return options

    async def execute(self, request: OutboundRequest) -> OutboundResponse:
        if not request.url:
            raise InputValidationError("Request url is required", error="invalid_url")
        method = request.method.upper()
        if method not in ALLOWED_METHODS:
            raise InputValidationError(f"Unsupported request method: {request.method}", error="invalid_method")

        options = self.client_options(request)
        body = encode_body(request)
        headers = dict(request.headers)
        if body and request.header("Content-Type") is None:
            content_type = request.content_type or ContentType.WWW_FORM
            headers["Content-Type"] = content_type.value

        try:
            async with httpx.AsyncClient(**options) as client:
                resp = await client.request(method, request.url, content=body or None, headers=headers)
        except httpx.InvalidURL as exc:
            raise InputValidationError(f"Invalid request url: {exc}", error="invalid_url") from exc
        except httpx.HTTPError as exc:
            logger.debug("outbound request failed", extra={"method": method, "url": request.url})
            raise NetworkError(
                f"Network error calling {request.url}",
                description=str(exc),
            ) from exc

        logger.debug(
            "outbound request",
            extra={"method": method, "url": request.url, "status_code": resp.status_code},
        )
        return OutboundResponse(status_code=resp.status_code, body=resp.content, headers=dict(resp.headers))

    async def get(self, url: str, *, proxy_url: str | None = None, **kwargs: Any) -> OutboundResponse:
        return await self.execute(OutboundRequest(url=url, method="GET", proxy_url=proxy_url, **kwargs))

    async def post(self, url: str, *, proxy_url: str | None = None, **kwargs: Any) -> OutboundResponse:
        return await self.execute(OutboundRequest(url=url, method="POST", proxy_url=proxy_url, **kwargs))


async def execute_request(request: OutboundRequest) -> OutboundResponse:
    return await RequestExecutor().execute(request)


def expect_ok(response: OutboundResponse, message: str, *, error: str | None = None) -> OutboundResponse:
    if response.status_code != 200:
        raise NetworkError(
            f"{message}: the status code is {response.status_code}",
            error=error,
            status_code=response.status_code,
            details=_safe_json(response),
        )
    return response


def parse_json_response(response: OutboundResponse, model: Type[ModelT], *, what: str = "response") -> ModelT:
    try:
        return model.model_validate_json(response.body)
    except ValidationError as exc:
        raise FormatError(
            f"Unexpected {what} format",
            details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)},
        ) from exc


def _safe_json(response: OutboundResponse) -> Dict[str, Any]:
    try:
        value = json.loads(response.body)
    except ValueError:
        return {"raw": response.text}
    return value if isinstance(value, dict) else {"raw": value}
