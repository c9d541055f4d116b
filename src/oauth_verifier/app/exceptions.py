from __future__ import annotations

import logging
from typing import Any, Dict, Type

from fastapi import FastAPI
from fastapi.responses import JSONResponse

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

logger = logging.getLogger("oauth_verifier")

STATUS_BY_ERROR: Dict[Type[IdentityError], int] = {
    InputValidationError: 400,
    FormatError: 401,
    DecodeError: 401,
    KeyNotFoundError: 401,
    SignatureError: 401,
    ClaimsValidationError: 401,
    NetworkError: 502,
    ProviderNotImplementedError: 501,
}


def status_for(exc: IdentityError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return 500


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(IdentityError)
    async def identity_error_handler(_, exc: IdentityError):
        status = status_for(exc)
        content: Dict[str, Any] = {"error": exc.error, "detail": exc.message}
        if exc.status_code is not None:
            content["status_code"] = exc.status_code
        logger.info("request rejected", extra={"error": exc.error, "status_code": status})
        return JSONResponse(status_code=status, content=content)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_, exc: Exception):
        logger.exception("unhandled error", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
