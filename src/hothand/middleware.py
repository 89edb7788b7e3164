from __future__ import annotations

import asyncio
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .api.schemas.common import fail
from .config import get_settings


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, timeout_seconds: int) -> None:
        super().__init__(app)
        self._timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
        request.state.request_id = request_id
        try:
            response = await asyncio.wait_for(call_next(request), timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            payload = fail(
                code="REQUEST_TIMEOUT",
                message="Request timed out.",
                request_id=request_id,
            )
            return JSONResponse(status_code=504, content=payload, headers={"X-Request-Id": request_id})

        response.headers["X-Request-Id"] = request_id
        return response


class CacheHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app) -> None:
        super().__init__(app)
        self._settings = get_settings()

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if request.method.upper() in {"GET", "HEAD"}:
            self._apply_cache_control(request.url.path, response)
        else:
            response.headers.setdefault("Cache-Control", "no-store")
        return response

    def _apply_cache_control(self, path: str, response: Response) -> None:
        if response.headers.get("Cache-Control"):
            return
        if path.startswith("/api/health") or response.status_code >= 400:
            response.headers["Cache-Control"] = "no-store"
            return
        if path == "/api/teams":
            response.headers["Cache-Control"] = (
                f"public, max-age={self._settings.api_cache_teams_seconds}, stale-while-revalidate=60"
            )
            return
        # The gateway owns freshness for everything else.
        response.headers["Cache-Control"] = "no-cache"
