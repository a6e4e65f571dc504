"""
Backend API routes mounted in front of the Reflex app (rx.App api_transformer)
- GET /api/health
- GET /api/metrics
- JSON error bodies for every /api error
"""
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .errors import ErrorJSON
from .middleware import TelemetryMiddleware
from .utils.logger import get_logger

logger = get_logger(__name__)


def error_response(status_code: int) -> JSONResponse:
    return JSONResponse(ErrorJSON.render(f"{status_code}.json", {}), status_code=status_code)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(exc.status_code)


async def server_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}", exc_info=exc)
    return error_response(500)


async def health(request: Request) -> JSONResponse:
    from .application import get_supervisor
    from .db import get_repo

    supervisor = get_supervisor()
    children = [
        {"name": name, "status": status, "restarts": restarts}
        for name, status, restarts in (supervisor.which_children() if supervisor else [])
    ]

    try:
        database_ok = await get_repo().ping()
    except Exception as e:
        logger.warning(f"Health check: database unavailable: {e}")
        database_ok = False

    if not database_ok:
        return error_response(503)
    return JSONResponse({"status": "ok", "children": children})


async def metrics(request: Request) -> JSONResponse:
    from .telemetry import get_telemetry

    return JSONResponse(get_telemetry().snapshot())


async def not_found(request: Request) -> JSONResponse:
    raise HTTPException(status_code=404)


def create_api() -> Starlette:
    return Starlette(
        routes=[
            Route("/api/health", health, methods=["GET"]),
            Route("/api/metrics", metrics, methods=["GET"]),
            Route("/api/{path:path}", not_found),
        ],
        middleware=[Middleware(TelemetryMiddleware)],
        exception_handlers={
            HTTPException: http_exception_handler,
            Exception: server_error_handler,
        },
    )
