from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from property_lister.core.database import InvalidIdentifier, RecordNotFound
from property_lister.schemas.response import ErrorResponse, ErrorDetail
from datetime import datetime, timezone
import logging
import uuid

logger = logging.getLogger(__name__)

def _get_error_code(status_code: int) -> str:
    code_map = {
        400: "BAD_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        409: "CONFLICT",
        422: "VALIDATION_ERROR",
        500: "INTERNAL_SERVER_ERROR",
    }
    return code_map.get(status_code, f"HTTP_{status_code}")

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())

def _error_response(request: Request, request_id: str, status_code: int, message: str, details: dict | None = None) -> JSONResponse:
    error_response = ErrorResponse(
        error=ErrorDetail(code=_get_error_code(status_code), message=message, details=details),
        timestamp=datetime.now(timezone.utc).isoformat(),
        path=str(request.url),
        request_id=request_id
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump())

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = _request_id(request)
    logger.warning(f"[{request_id}] Validation error: {exc.errors()}", extra={"request_id": request_id})
    return _error_response(
        request, request_id, 422, "Request validation failed",
        {"validation_errors": jsonable_encoder(exc.errors())}
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    request_id = _request_id(request)
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    logger.warning(f"[{request_id}] HTTP {exc.status_code}: {message}", extra={"request_id": request_id})
    response = _error_response(request, request_id, exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response

async def invalid_identifier_handler(request: Request, exc: InvalidIdentifier):
    request_id = _request_id(request)
    logger.warning(f"[{request_id}] {exc}", extra={"request_id": request_id})
    return _error_response(request, request_id, 400, "Invalid user ID")

async def record_not_found_handler(request: Request, exc: RecordNotFound):
    request_id = _request_id(request)
    logger.warning(f"[{request_id}] {exc}", extra={"request_id": request_id})
    return _error_response(request, request_id, 404, str(exc))

async def global_exception_handler(request: Request, exc: Exception):
    request_id = _request_id(request)
    logger.error(f"[{request_id}] Unhandled exception: {exc}", exc_info=True, extra={"request_id": request_id})
    return _error_response(
        request, request_id, 500, "An unexpected error occurred",
        {"error_type": type(exc).__name__}
    )
