from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from familybudget.api.dependencies import ApiContext, build_context
from familybudget.api.error_handlers import register_error_handlers
from familybudget.api.routers.analytics import router as analytics_router
from familybudget.api.routers.health import router as health_router
from familybudget.api.routers.operations import router as operations_router
from familybudget.infrastructure.persistence.sqla import (
    connection_scope,
    ensure_schema,
    wait_for_database,
)
from familybudget.infrastructure.persistence.sqla.engine import dispose_engine
from familybudget.logger import get_logger, reset_request_id, set_request_id, setup_logging
from familybudget.settings import Settings, load_settings


def _bootstrap_store(ctx: ApiContext) -> None:
    wait_for_database(
        ctx.engine,
        retries=ctx.settings.db_connect_retries,
        delay_seconds=ctx.settings.db_connect_retry_delay_seconds,
    )
    if ctx.settings.auto_create_schema:
        with connection_scope(ctx.engine) as conn:
            ensure_schema(conn)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    ctx: ApiContext = app.state.ctx
    await run_in_threadpool(_bootstrap_store, ctx)
    ctx.logger.info(f"store ready dialect={ctx.engine.dialect.name}")
    yield
    dispose_engine(ctx.settings.db_url)
    ctx.logger.info("store connections released")


def _log_level_for(status_code: int) -> str:
    if status_code >= 500:
        return "ERROR"
    if status_code >= 400:
        return "WARNING"
    return "INFO"


def _operation_id_from_path(path: str) -> str:
    parts = [seg for seg in path.split("/") if seg]
    # /operations/{id}; /operations/csv is a listing
    if len(parts) == 2 and parts[0] == "operations" and parts[1] != "csv":
        return parts[1]
    return "-"


def _install_request_logging(app: FastAPI) -> None:
    logger = get_logger()

    @app.middleware("http")
    async def request_log_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id", "").strip() or uuid4().hex[:16]
        req_logger = logger.bind(
            request_id=request_id,
            operation_id=_operation_id_from_path(request.url.path),
            method=request.method,
            path=request.url.path,
        )
        request.state.request_id = request_id
        token = set_request_id(request_id)
        started = perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (perf_counter() - started) * 1000
            req_logger.bind(status_code=500).opt(exception=True).error(
                f"{request.method} {request.url.path} crashed after {elapsed_ms:.2f}ms"
            )
            raise
        finally:
            reset_request_id(token)

        elapsed_ms = (perf_counter() - started) * 1000
        status_code = int(response.status_code)
        response.headers["X-Request-Id"] = request_id
        req_logger.bind(status_code=status_code).log(
            _log_level_for(status_code),
            f"{request.method} {request.url.path} -> {status_code} in {elapsed_ms:.2f}ms",
        )
        return response


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings)

    app = FastAPI(title="Family Budget API", version="1.0.0", lifespan=_lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "Location", "X-Request-Id"],
    )
    app.state.ctx = build_context(settings)

    _install_request_logging(app)
    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(operations_router)
    app.include_router(analytics_router)
    return app


def serve(settings: Settings | None = None) -> None:
    settings = settings or load_settings()
    setup_logging(settings)
    app = create_app(settings)
    get_logger().info(f"server listening on http://{settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


def main() -> None:
    serve(load_settings())
