"""
routetrack/main.py
============================================
Route Tracking Service - FastAPI application
============================================

- REST: /api/user/* (ping ingestion, route completion, return-to-start,
  history and location queries), /api/locations and /api/routes (raw
  points, routes by day, bulk route import)
- WebSocket: /logs streams the service's log records to monitoring clients
- The tracking engine is synchronous and runs in FastAPI's worker threads

Run:
    uvicorn routetrack.main:app --host 0.0.0.0 --port 8000
"""

from dotenv import load_dotenv
load_dotenv()

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from routetrack.Controller.Routes import locations, tracking, users
from routetrack.Core import log_ws
from routetrack.Core.config import settings
from routetrack.Core.logging_config import setup_logging
from routetrack.DB.base import Base
from routetrack.DB.session import engine
from routetrack.Services.errors import TrackingError

logger = logging.getLogger("routetrack.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: logging, event loop for the /logs stream, optional create_all
    (local SQLite runs; deployments use Alembic).
    Shutdown: detach the loop so worker threads stop scheduling broadcasts.
    """
    setup_logging(settings.LOG_LEVEL)
    log_ws.log_ws_manager.set_main_loop(asyncio.get_running_loop())

    if settings.CREATE_TABLES_ON_STARTUP:
        Base.metadata.create_all(bind=engine)
        logger.info("[STARTUP] Tables created")

    logger.info("[STARTUP] %s %s ready", settings.PROJECT_NAME, settings.PROJECT_VERSION)
    yield
    logger.info("[SHUTDOWN] Stopping")
    log_ws.log_ws_manager.set_main_loop(None)


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)

_http_origins = settings.http_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_http_origins,
    # browsers reject credentials with a wildcard origin
    allow_credentials="*" not in _http_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# ERROR RESPONSES: {"error": "<message>"}
# ============================================================
@app.exception_handler(TrackingError)
async def tracking_error_handler(request: Request, exc: TrackingError):
    if exc.status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ()) if loc not in ("body", "query", "path", "header"))
        messages.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return JSONResponse(status_code=400, content={"error": "; ".join(messages) or "Invalid request"})


# ============================================================
# ROUTES
# ============================================================
@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api")
def api_info():
    """Service status and endpoint map."""
    return {
        "status": "online",
        "name": settings.PROJECT_NAME,
        "version": settings.PROJECT_VERSION,
        "websockets": ["/logs"],
        "endpoints": {
            "user": "/api/user/*",
            "locations": "/api/locations",
            "routes": "/api/routes",
            "logs": "/logs (WebSocket)",
            "health": "/health"
        }
    }


app.include_router(tracking.router, prefix="/api/user", tags=["tracking"])
app.include_router(users.router, prefix="/api/user", tags=["users"])
app.include_router(locations.router, prefix="/api", tags=["locations"])


@app.websocket("/logs")
async def websocket_logs(ws: WebSocket):
    """
    Live log stream. Each message:
        {"msg_type": "log" | "warning" | "error", "message": "...",
         "timestamp": "2025-01-01T10:30:00Z", "logger": "routetrack.Services.session_manager"}

    Origins outside WS_ALLOWED_ORIGINS are closed with 1008 (policy violation).
    """
    allowed = settings.ws_origins
    origin = ws.headers.get("origin")
    if "*" not in allowed and origin not in allowed:
        logger.warning("[WS] Rejected connection from origin %s", origin)
        await ws.close(code=1008)
        return

    manager = log_ws.log_ws_manager
    await manager.register(ws)
    try:
        while True:
            await manager.handle_message(ws, await ws.receive_text())
    except WebSocketDisconnect:
        pass
    finally:
        manager.unregister(ws)
