from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.hothand.api.routes import health_router, players_router, teams_router
from src.hothand.api.schemas.common import fail
from src.hothand.config import get_settings
from src.hothand.db.store import CacheStore
from src.hothand.errors import GatewayError
from src.hothand.middleware import CacheHeadersMiddleware, RequestContextMiddleware
from src.hothand.services.gateway import build_gateways
from src.hothand.services.upstream_client import UpstreamClient

logger = logging.getLogger("hothand.api")


def create_app(client: UpstreamClient | None = None) -> FastAPI:
    settings = get_settings()
    logging.getLogger("hothand").setLevel(settings.log_level)

    app = FastAPI(title="Hot Hand Stats Gateway", version="0.1.0", docs_url="/api/docs", redoc_url="/api/redoc")

    app.add_middleware(RequestContextMiddleware, timeout_seconds=settings.request_timeout_seconds)
    app.add_middleware(CacheHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )

    @app.on_event("startup")
    def on_startup() -> None:
        store = CacheStore.open(settings.db_path, batch_size=settings.store_batch_size)
        upstream = client or UpstreamClient.from_settings(settings)
        if not upstream.has_credentials:
            logger.warning("SPORTRADAR_API_KEY is not set; only cached data can be served")
        app.state.store = store
        app.state.gateways = build_gateways(store, upstream, settings)

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        store = getattr(app.state, "store", None)
        if store is not None:
            store.close()

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError):
        request_id = getattr(request.state, "request_id", uuid.uuid4().hex)
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.code, exc.message, extra={"request_id": request_id})
        if exc.payload is not None:
            return JSONResponse(status_code=exc.status_code, content=exc.payload)
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(code=exc.code, message=exc.message, request_id=request_id),
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        request_id = getattr(request.state, "request_id", uuid.uuid4().hex)
        logger.exception("Cache store failure", extra={"request_id": request_id})
        return JSONResponse(
            status_code=500,
            content=fail(code="STORAGE_ERROR", message="Cache store failure.", request_id=request_id),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        request_id = getattr(request.state, "request_id", uuid.uuid4().hex)
        message = "; ".join([err.get("msg", "invalid input") for err in exc.errors()])
        return JSONResponse(
            status_code=422,
            content=fail(code="VALIDATION_ERROR", message=message, request_id=request_id),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        request_id = getattr(request.state, "request_id", uuid.uuid4().hex)
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(code="HTTP_ERROR", message=str(exc.detail), request_id=request_id),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", uuid.uuid4().hex)
        logger.exception("Unhandled error", extra={"request_id": request_id})
        return JSONResponse(
            status_code=500,
            content=fail(code="INTERNAL_ERROR", message="Internal server error.", request_id=request_id),
        )

    app.include_router(health_router, prefix="/api")
    app.include_router(teams_router, prefix="/api")
    app.include_router(players_router, prefix="/api")

    return app


app = create_app()
