"""
Panic Relay Backend - FastAPI Application Entry Point

REST API for accounts, emergency contacts and panic history, plus the
Socket.IO channel that relays panic alerts to connected contacts.
"""

from contextlib import asynccontextmanager
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

import socketio
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.deps import get_connection_registry
from api.v1 import auth, emergency, panic_events
from core.config import settings
from core.database import AsyncSessionLocal, init_models
from core.exceptions import AppException
from core.logging import log_request_middleware, setup_logging
from schemas.responses import HealthResponse
from services.connection_registry import ConnectionRegistry
from services.notifier import Notifier
from services.panic_alert import PanicAlertService
from services.realtime import RealtimeGateway

# Setup logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Panic Relay Backend application...")

    # Create database tables (for development)
    if settings.ENV == "development":
        await init_models()
        logger.info("Database tables created (development mode)")

    yield

    logger.info("Shutting down Panic Relay Backend application...")


def create_realtime(session_factory=AsyncSessionLocal) -> RealtimeGateway:
    """Build the Socket.IO server and the registry it owns."""
    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.origins,
        logger=False,
        engineio_logger=False,
    )
    registry = ConnectionRegistry()
    notifier = Notifier(sio, registry)
    alerts = PanicAlertService(session_factory, notifier)
    return RealtimeGateway(sio, registry, alerts)


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Records panic events and relays them to emergency contacts in real time",
    version=settings.VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

gateway = create_realtime()
app.state.connection_registry = gateway.registry

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.ENABLE_REQUEST_LOGGING:
    app.middleware("http")(log_request_middleware)


def _client_host(request: Request):
    return request.client.host if request.client else None


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"App Exception: {exc.message} | "
        f"Path: {request.url.path} | "
        f"Method: {request.method} | "
        f"Client: {_client_host(request)}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.message,
            "detail": type(exc).__name__
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation exceptions."""
    logger.error(
        f"Validation Exception: {exc.errors()} | "
        f"Path: {request.url.path} | "
        f"Method: {request.method} | "
        f"Client: {_client_host(request)}"
    )
    errors = exc.errors()
    user_message = errors[0].get("msg", "Invalid input data") if errors else "Invalid input data"

    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "message": user_message,
            "detail": _jsonable_errors(errors)
        }
    )


def _jsonable_errors(errors):
    # ctx may carry exception instances
    return [
        {key: value for key, value in error.items() if key in ("type", "loc", "msg")}
        for error in errors
    ]


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.error(
        f"HTTP Exception: {exc.detail} | "
        f"Path: {request.url.path} | "
        f"Method: {request.method} | "
        f"Client: {_client_host(request)}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.detail,
            "detail": str(exc)
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(
        f"Server Exception: {exc} | "
        f"Path: {request.url.path} | "
        f"Method: {request.method} | "
        f"Client: {_client_host(request)}"
    )
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "detail": type(exc).__name__
        }
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health(registry: ConnectionRegistry = Depends(get_connection_registry)):
    return HealthResponse(
        version=settings.VERSION,
        connections=len(registry),
        authenticated=sum(1 for _ in registry.authenticated()),
    )


# Include API routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(emergency.router, prefix="/api/v1/emergency", tags=["Emergency Contacts"])
app.include_router(panic_events.router, prefix="/api/v1/panic-events", tags=["Panic Events"])

# Socket.IO in front, everything else falls through to FastAPI
asgi_app = socketio.ASGIApp(gateway.sio, other_asgi_app=app, socketio_path=settings.SOCKETIO_PATH)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:asgi_app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
