import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from tablelock import config
from tablelock.api.routes.tables import router as tables_router
from tablelock.exceptions import TableLockError
from tablelock.schemas.errors import ErrorResponse
from tablelock.schemas.service import HealthResponse, ServiceInfo
from tablelock.services.lock_service import start_lock_sweep_task
from tablelock.store.lock_store import LockStore, utc_now

logger = logging.getLogger(__name__)

ENDPOINTS = [
    "POST /api/tables/lock",
    "POST /api/tables/unlock",
    "GET /api/tables/:tableId/status",
    "GET /api/tables/locks",
    "GET /health",
]

SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'self'; object-src 'none'",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Frame-Options": "SAMEORIGIN",
}


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweep_task = None
    if app.state.sweep_interval > 0:
        sweep_task = start_lock_sweep_task(app.state.lock_store, app.state.sweep_interval)
        logger.info("Background lock sweep every %ss", app.state.sweep_interval)
    yield
    if sweep_task is not None:
        sweep_task.cancel()


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(message=message).model_dump()
    )


def create_app(store: LockStore | None = None, sweep_interval: float | None = None) -> FastAPI:
    """Build the application around its own lock store.

    Each call gets an isolated store unless one is passed in, so tests and
    embedding code never share lock state by accident.
    """
    app = FastAPI(title=config.SERVICE_NAME, version=config.SERVICE_VERSION, lifespan=lifespan)
    app.state.lock_store = store if store is not None else LockStore()
    app.state.sweep_interval = (
        config.SWEEP_INTERVAL_SECONDS if sweep_interval is None else sweep_interval
    )
    app.state.started_at = time.monotonic()

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TableLockError)
    async def table_lock_error_handler(request: Request, exc: TableLockError) -> JSONResponse:
        logger.info(
            "%s %s -> %s %s (request %s)",
            request.method,
            request.url.path,
            exc.status_code,
            exc.code,
            _get_request_id(request),
        )
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
        return _error_response(400, "Invalid request body.")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code in (404, 405):
            return _error_response(404, "Endpoint not found.")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception (request %s)", _get_request_id(request))
        return _error_response(500, "Internal server error.")

    app.include_router(tables_router)

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        return HealthResponse(
            status="OK",
            timestamp=utc_now(),
            uptime=time.monotonic() - request.app.state.started_at,
        )

    @app.get("/", response_model=ServiceInfo)
    async def root():
        return ServiceInfo(
            message=config.SERVICE_NAME,
            version=config.SERVICE_VERSION,
            endpoints=ENDPOINTS,
        )

    return app
