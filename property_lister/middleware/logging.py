import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs one line per response.

    A client-supplied X-Request-ID is reused, otherwise a fresh uuid is
    assigned. Exception handlers read it from ``request.state.request_id``.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()
        line = f"[{request_id}] {request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"{line} - 500 ({self._elapsed_ms(started)} ms)")
            raise

        duration_ms = self._elapsed_ms(started)
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, f"{line} - {response.status_code} ({duration_ms} ms)", extra={
            "request_id": request_id,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        })

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{duration_ms}ms"
        return response

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 2)
