from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        has_auth = bool(request.headers.get("Authorization"))

        # Mutations always need an acting user
        if not has_auth and request.method in ("POST", "PUT", "DELETE"):
            logger.debug(f"{request.method} {path} called without auth header")

        response = await call_next(request)

        # Log auth-related status codes
        if response.status_code in [401, 403]:
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path} (auth header: {has_auth})")

        return response
