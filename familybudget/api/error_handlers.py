from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from familybudget.api.schemas.common import err
from familybudget.domain.errors import INTERNAL_ERROR_MESSAGE, DomainError
from familybudget.logger import current_request_id, get_logger

_HTTP_STATUS_CODES = {
    404: "not_found",
    405: "method_not_allowed",
}


def _request_id(request: Request) -> str:
    # the outermost handler runs after the middleware has reset the context
    return getattr(request.state, "request_id", None) or current_request_id()


def _envelope(
    request: Request, status_code: int, code: str, message: str, details: Any = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=err(
            request_id=_request_id(request),
            code=code,
            message=message,
            details=details,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def _on_domain_error(request: Request, exc: DomainError) -> JSONResponse:
        return _envelope(request, exc.status_code, exc.code, exc.message, exc.details)

    # routing misses raise starlette's exception, not fastapi's subclass
    @app.exception_handler(StarletteHTTPException)
    async def _on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = _HTTP_STATUS_CODES.get(exc.status_code, "http_error")
        return _envelope(request, exc.status_code, code, str(exc.detail))

    # malformed bodies and query values answer 400, not 422
    @app.exception_handler(RequestValidationError)
    async def _on_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _envelope(
            request,
            400,
            "validation_error",
            "request validation failed",
            jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(Exception)
    async def _on_unexpected(request: Request, exc: Exception) -> JSONResponse:
        get_logger().bind(request_id=_request_id(request)).opt(exception=exc).error(
            f"unhandled error on {request.method} {request.url.path}"
        )
        return _envelope(request, 500, "internal_error", INTERNAL_ERROR_MESSAGE)
