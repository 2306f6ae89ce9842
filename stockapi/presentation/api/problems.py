"""
HTTP error shaping.

Validation failures are answered with a bare ``{field: [messages]}`` map so
every 400 has the same shape. Everything else uses RFC 7807 problem details
(``type``, ``title``, ``status``, ``detail``, ``instance``) served as
``application/problem+json``. Unexpected exceptions are logged and answered
with a generic 500 that leaks nothing about the failure.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Dict, List, Mapping, Optional, Sequence, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...domain.errors import ProductNotFoundError, RequestValidationFailed

logger = logging.getLogger(__name__)

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"

_PROBLEM_TYPES: Dict[int, str] = {
    400: "https://tools.ietf.org/html/rfc9110#section-15.5.1",
    401: "https://tools.ietf.org/html/rfc9110#section-15.5.2",
    403: "https://tools.ietf.org/html/rfc9110#section-15.5.4",
    404: "https://tools.ietf.org/html/rfc9110#section-15.5.5",
    405: "https://tools.ietf.org/html/rfc9110#section-15.5.6",
    409: "https://tools.ietf.org/html/rfc9110#section-15.5.10",
    415: "https://tools.ietf.org/html/rfc9110#section-15.5.16",
    500: "https://tools.ietf.org/html/rfc9110#section-15.6.1",
}

# Path parameters are exposed to clients under their route names.
_FIELD_ALIASES = {"product_id": "id"}


def problem_response(
    request: Request,
    status_code: int,
    detail: str,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    try:
        title = HTTPStatus(status_code).phrase
    except ValueError:
        title = "Error"
    body = {
        "type": _PROBLEM_TYPES.get(status_code, "about:blank"),
        "title": title,
        "status": status_code,
        "detail": detail,
        "instance": request.url.path,
    }
    return JSONResponse(
        status_code=status_code,
        content=body,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
        headers=dict(headers) if headers else None,
    )


def validation_response(errors: Mapping[str, List[str]]) -> JSONResponse:
    return JSONResponse(status_code=400, content=dict(errors))


def _field_name(loc: Sequence[Union[str, int]]) -> str:
    names = [part for part in loc[1:] if isinstance(part, str)]
    if names:
        name = names[0]
    elif loc:
        name = str(loc[0])
    else:
        name = "body"
    return _FIELD_ALIASES.get(name, name)


# Handlers ---------------------------------------------------------------
async def request_validation_failed_handler(
    request: Request, exc: RequestValidationFailed
) -> JSONResponse:
    return validation_response(exc.errors)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(error.get("loc", ())), []).append(error.get("msg", "Invalid value."))
    return validation_response(errors)


async def product_not_found_handler(request: Request, exc: ProductNotFoundError) -> JSONResponse:
    return problem_response(request, 404, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return problem_response(
        request,
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return problem_response(request, 500, "An unexpected error occurred.")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationFailed, request_validation_failed_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(ProductNotFoundError, product_not_found_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
