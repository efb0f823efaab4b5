"""
Shared-Secret Guard
===================
Optional X-API-Key check in front of the classifier API.

Only routes under /api (chat, intent listing, classify dry run) are guarded.
The root banner, /health and the OpenAPI docs stay reachable so that health checks
from load balancers and browsers work without a key.

With API_SECRET_KEY unset the guard is a pass-through, which is the normal
local-development setup.
"""

import logging
import secrets

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from intentbot.config import settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"
GUARDED_PREFIX = "/api"


def _is_exempt(request: Request) -> bool:
    # CORS preflight never carries custom headers
    if request.method == "OPTIONS":
        return True
    path = request.url.path
    return not (path == GUARDED_PREFIX or path.startswith(GUARDED_PREFIX + "/"))


def _reject(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code})


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Rejects /api requests whose X-API-Key does not match settings.api_secret_key"""

    async def dispatch(self, request: Request, call_next):
        secret = settings.api_secret_key
        if not secret or _is_exempt(request):
            return await call_next(request)

        supplied = request.headers.get(API_KEY_HEADER)
        if not supplied:
            logger.info(f"Rejected {request.method} {request.url.path}: no {API_KEY_HEADER}")
            return _reject(
                status.HTTP_401_UNAUTHORIZED,
                f"Missing API key. Please provide {API_KEY_HEADER} header.",
                "MISSING_API_KEY",
            )

        if not secrets.compare_digest(supplied.encode(), secret.encode()):
            logger.info(f"Rejected {request.method} {request.url.path}: wrong {API_KEY_HEADER}")
            return _reject(status.HTTP_403_FORBIDDEN, "Invalid API key.", "INVALID_API_KEY")

        return await call_next(request)
