# ============================================================================
# OCPI RESPONSE ENVELOPE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - Single place that turns results and errors into responses
# PURPOSE: Envelope, HTTP status selection, pagination headers, error mapping
# CREATED: 18 OCT 2026
# ============================================================================
"""
OCPI Response Envelope

Every response leaving the OCPI surface goes through OcpiResponder.

HTTP status for a returned envelope:
    1000 with data         -> 200
    1000 without data      -> 404 (200 for DELETE)
    2001                   -> 400
    anything else          -> 200

Raised errors:
    OcpiError              -> its http_status / ocpi_status
                              (401 adds WWW-Authenticate: Token)
    RequestValidationError -> 400 / 2001
    HTTPException          -> its status / 2000
    anything else          -> 500 / 3000

Paginated data (SearchResult) is sent as the bare item list with
Link / X-Total-Count / X-Limit headers.
"""

import uuid
from urllib.parse import urlencode
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.clock import Clock, SystemClock
from core.contracts import OcpiStatus
from core.errors import OcpiError
from core.logging import ComponentType, get_logger, log_context
from core.models.envelope import OcpiResponseBody, SearchResult

logger = get_logger(__name__, ComponentType.API)

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_ID_HEADER = "X-Correlation-ID"


# ============================================================================
# PAGINATION HEADERS
# ============================================================================

def pagination_headers(request: Request, result: SearchResult) -> Dict[str, str]:
    """
    Link / X-Total-Count / X-Limit for a page.

    The next link keeps every query parameter except offset, which is
    replaced by offset + limit. It is omitted on the last page.
    """
    headers = {
        "X-Total-Count": str(result.total_count),
        "X-Limit": str(result.limit),
    }

    next_offset = result.next_offset
    if next_offset is not None:
        params = [
            (key, value)
            for key, value in request.query_params.multi_items()
            if key != "offset"
        ]
        params.append(("offset", str(next_offset)))
        next_url = request.url.replace(query=urlencode(params))
        headers["Link"] = f'<{next_url}>; rel="next"'

    return headers


# ============================================================================
# RESPONDER
# ============================================================================

class OcpiResponder:
    """Builds envelope responses with an injected clock."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SystemClock()

    def envelope(
        self,
        data: Any = None,
        status: OcpiStatus = OcpiStatus.SUCCESS,
        message: Optional[str] = None,
    ) -> OcpiResponseBody:
        return OcpiResponseBody.build(data=data, status=status, message=message, clock=self.clock)

    @staticmethod
    def http_status_for(body: OcpiResponseBody, method: str) -> int:
        if body.status_code == OcpiStatus.SUCCESS:
            if method.upper() == "DELETE" or body.data is not None:
                return 200
            return 404
        if body.status_code == OcpiStatus.CLIENT_INVALID_PARAMETERS:
            return 400
        return 200

    def respond(self, request: Request, body: OcpiResponseBody) -> JSONResponse:
        """Response for an envelope returned by a handler."""
        data = body.data
        headers: Dict[str, str] = {}

        if isinstance(data, SearchResult):
            headers.update(pagination_headers(request, data))
            data = data.items

        status_code = self.http_status_for(body, request.method)
        content = {
            "data": jsonable_encoder(data),
            "status_code": body.status_code,
            "status_message": body.status_message,
            "timestamp": body.timestamp,
        }
        return JSONResponse(status_code=status_code, content=content, headers=headers)

    def success(self, request: Request, data: Any = None) -> JSONResponse:
        """Shortcut: envelope with status 1000 around data."""
        return self.respond(request, self.envelope(data))

    def error(
        self,
        http_status: int,
        ocpi_status: OcpiStatus,
        message: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> JSONResponse:
        """Response for a failure; data is always null."""
        body = self.envelope(None, status=ocpi_status, message=message)
        response_headers = dict(headers or {})
        if http_status == 401:
            response_headers["WWW-Authenticate"] = "Token"
        return JSONResponse(
            status_code=http_status,
            content=body.model_dump(),
            headers=response_headers,
        )

    def from_exception(self, exc: OcpiError) -> JSONResponse:
        return self.error(exc.http_status, exc.ocpi_status, exc.message)


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================

def _readable_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or OcpiStatus.CLIENT_INVALID_PARAMETERS.message


def _with_request_ids(request: Request, response: JSONResponse) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    correlation_id = getattr(request.state, "correlation_id", None)
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    if correlation_id:
        response.headers[CORRELATION_ID_HEADER] = correlation_id
    return response


def install_exception_handlers(app: FastAPI, responder: OcpiResponder) -> None:
    """Render every error raised during a request as an envelope."""

    @app.exception_handler(OcpiError)
    async def ocpi_error_handler(request: Request, exc: OcpiError):
        level = logger.warning if exc.http_status >= 500 else logger.info
        level(f"{request.method} {request.url.path} -> {exc.http_status} {type(exc).__name__}: {exc.message}")
        return responder.from_exception(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        message = _readable_validation_errors(exc)
        logger.info(f"{request.method} {request.url.path} -> 400 invalid parameters: {message}")
        return responder.error(400, OcpiStatus.CLIENT_INVALID_PARAMETERS, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return responder.error(
            exc.status_code,
            OcpiStatus.CLIENT_ERROR if exc.status_code < 500 else OcpiStatus.SERVER_ERROR,
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        response = responder.error(500, OcpiStatus.SERVER_ERROR)
        return _with_request_ids(request, response)


def install_request_context(app: FastAPI) -> None:
    """
    Echo X-Request-ID / X-Correlation-ID on every response and bind them
    to the logging context for the duration of the request.
    """

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        correlation_id = request.headers.get(CORRELATION_ID_HEADER) or request_id
        request.state.request_id = request_id
        request.state.correlation_id = correlation_id

        with log_context(
            request_id=request_id,
            correlation_id=correlation_id,
            operation=f"{request.method} {request.url.path}",
        ):
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response


__all__ = [
    "REQUEST_ID_HEADER",
    "CORRELATION_ID_HEADER",
    "pagination_headers",
    "OcpiResponder",
    "install_exception_handlers",
    "install_request_context",
]
