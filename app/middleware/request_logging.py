from fastapi import Request
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

PROCESS_TIME_HEADER = "X-Process-Time"

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request, reads at debug and mutations at info"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        response.headers[PROCESS_TIME_HEADER] = f"{elapsed_ms:.1f}"

        line = f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.1f}ms"
        if response.status_code >= 500:
            logger.error(line)
        elif request.method in ("GET", "HEAD", "OPTIONS"):
            logger.debug(line)
        else:
            logger.info(line)

        return response
