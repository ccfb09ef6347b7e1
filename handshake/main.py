import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from handshake.config import settings
from handshake.routers import handshake, profile, history, health
from handshake.domain.errors import NotFoundError, ValidationError, AuthorizationError
from handshake.application.event_handlers import register_event_handlers
from handshake.application.search_history import SearchHistoryRecorder
from handshake.application.maintenance_service import MaintenanceService
from handshake.dependencies import (
    build_cache_store,
    build_cache_manager,
    build_http_client,
    build_directory_client,
)
from handshake.db.database import SessionLocal, dispose_engine
from handshake.db.init_db import init_database

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "origin-when-cross-origin",
}

app = FastAPI(
    title="Steam Handshake API",
    description="Degrees of separation between Steam users",
    version=settings.VERSION,
)


@app.on_event("startup")
async def startup_event():
    register_event_handlers()

    app.state.cache_store = build_cache_store()
    app.state.cache_manager = build_cache_manager(app.state.cache_store)
    app.state.http_client = build_http_client()
    app.state.directory = build_directory_client(app.state.http_client, app.state.cache_manager)
    app.state.history = None
    app.state.maintenance = None

    if not settings.STEAM_API_KEY:
        logger.warning("STEAM_API_KEY is not set; every Steam lookup will fail")

    if settings.HISTORY_ENABLED:
        try:
            init_database()
        except SQLAlchemyError as e:
            logger.warning(f"Search history disabled, database unavailable: {e}")
        else:
            app.state.history = SearchHistoryRecorder(SessionLocal)
            app.state.maintenance = MaintenanceService(SessionLocal)


@app.on_event("shutdown")
async def shutdown_event():
    await app.state.http_client.aclose()
    await app.state.cache_store.close()
    dispose_engine()


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods
    allow_headers=["*"],  # Allows all headers
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


# Domain error handlers
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})

# Include routers
app.include_router(health.router, tags=["Health"])  # Health check endpoints first
app.include_router(handshake.router, tags=["Handshake"])
app.include_router(profile.router, tags=["Profiles"])
app.include_router(history.router, tags=["History"])

@app.get("/")
async def root():
    return {"message": "Welcome to the Steam Handshake API. See /docs for API documentation"}
