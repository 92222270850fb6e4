"""
FastAPI Application Entry Point

Main application with lifecycle management for the backend HTTP client,
request trace ids and uniform error responses.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import API_VERSION, api_router
from app.core.config import check_production_settings, is_production, settings
from app.core.errors import AppError
from app.core.logging import get_trace_id, new_trace_id, set_trace_id, setup_logging
from app.schemas.base import ErrorResponse
from app.tools import backend_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Configures logging and checks production settings on startup,
    closes the backend client on shutdown.
    """
    # Startup
    setup_logging()
    check_production_settings()
    logger.info(f"Booking service starting up ({settings.APP_ENV})...")

    yield

    # Shutdown - close the HTTP client gracefully
    logger.info("Booking service shutting down...")
    await backend_client.aclose_client()
    logger.info("Booking service shutdown complete")


# Initialize FastAPI app with lifespan
app = FastAPI(
    title="Identity Appointment Booking Service",
    description="Slot recommendation, face-verified booking and profile updates",
    version=API_VERSION,
    docs_url=None if is_production() else "/docs",
    redoc_url=None if is_production() else "/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def trace_id_middleware(request: Request, call_next):
    """Bind a trace id to the request and echo it back in x-request-id."""
    trace_id = request.headers.get("x-request-id") or new_trace_id()
    set_trace_id(trace_id)
    response = await call_next(request)
    response.headers["x-request-id"] = trace_id
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render application errors as {"detail": {code, message, details, trace_id}}."""
    trace_id = get_trace_id()
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} - {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.to_dict(trace_id=None if trace_id == "-" else trace_id)}
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """422 with the usual error list, without echoing rejected input (NaN is not valid JSON)."""
    errors = [{k: v for k, v in error.items() if k != "input"} for error in exc.errors()]
    logger.info(f"{request.method} {request.url.path} rejected: {len(errors)} validation error(s)")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


app.include_router(
    api_router,
    prefix="/api",
    responses={code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 422, 503)}
)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "service": "Booking Service",
        "status": "running",
        "version": API_VERSION
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "booking_service",
        "components": {
            "api": "ok",
            "backend_url": settings.BACKEND_URL
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
