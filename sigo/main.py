"""
FastAPI application factory.

Assembles the app, registers all routers, the uniform error envelope
and lifecycle events.  Database schema is managed by Alembic, NOT
create_all.
"""

import logging
import time
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from sigo.controllers.afilado_controller import router as afilado_router
from sigo.controllers.auth_controller import router as auth_router
from sigo.controllers.catalogo_controller import router as catalogo_router
from sigo.controllers.cliente_controller import router as cliente_router
from sigo.controllers.sierra_controller import router as sierra_router
from sigo.controllers.sucursal_controller import router as sucursal_router
from sigo.controllers.usuario_controller import router as usuario_router
from sigo.core.config import settings
from sigo.core.database import async_session_factory, engine
from sigo.core.exceptions import AppError
from sigo.core.responses import fail
from sigo.models import Base  # noqa: F401  registers all models

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.error)
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(exc.message, exc.error),
            headers=exc.headers,
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(str(exc.detail)),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        details = "; ".join(
            f"{'.'.join(str(p) for p in e.get('loc', ()) if p != 'body')}: {e.get('msg')}"
            for e in errors
        )
        message = errors[0].get("msg", "Datos inválidos") if errors else "Datos inválidos"
        return JSONResponse(status_code=400, content=fail(message, details))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"success": False, "message": str(exc) or "Error interno del servidor"}
        if not settings.is_production:
            content["stack"] = "".join(traceback.format_exception(exc))
        return JSONResponse(status_code=500, content=content)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="API para gestionar el control de afilado de sierras",
        docs_url="/api-docs",
        redoc_url=None,
    )

    # ── Middleware ───────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    _register_exception_handlers(app)

    # ── Register routers ─────────────────────────────────────────────
    app.include_router(auth_router)
    app.include_router(cliente_router)
    app.include_router(sucursal_router)
    app.include_router(sierra_router)
    app.include_router(afilado_router)
    app.include_router(usuario_router)
    app.include_router(catalogo_router)

    # ── Startup / Shutdown ───────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup() -> None:
        """Seed reference catalogs on startup.

        NOTE: Database schema is managed by Alembic migrations.
        Run `alembic upgrade head` before starting the app.
        """
        if not settings.SEED_ON_STARTUP:
            return
        from sigo.rbac.catalog_seed import seed

        async with async_session_factory() as session:
            await seed(session)
        logger.info("Catalog seed complete.")

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await engine.dispose()
        logger.info("Database engine disposed.")

    # ── Status & health ──────────────────────────────────────────────
    @app.get("/", tags=["Health"])
    async def root():
        return {
            "message": settings.APP_NAME,
            "version": app.version,
            "documentation": "/api-docs",
        }

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
