"""Main FastAPI application entry point."""

import time
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from modules.cor_mapper.router import router as cor_router
from modules.form_converter.router import router as converter_router
from shared.exceptions import CORPathwaysException
from .config import settings


# Configure logging
logger.add(
    str(settings.log_dir / "cor_pathways_{time}.log"),
    rotation="1 day",
    retention="7 days",
    level=settings.log_level,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Database: {settings.database_path}, uploads: {settings.upload_dir}")

    yield

    logger.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Convert paper safety forms into digital forms mapped to COR audit elements",
    version=settings.app_version,
    docs_url=f"{settings.api_prefix}/docs",
    redoc_url=f"{settings.api_prefix}/redoc",
    openapi_url=f"{settings.api_prefix}/openapi.json",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Middleware for request logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests."""
    start_time = time.time()

    logger.debug(f"{request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.debug(f"{request.method} {request.url.path} - {response.status_code} ({duration:.3f}s)")

    return response


# Health check endpoint
@app.get("/health")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
    }


# Root API endpoint
@app.get(settings.api_prefix)
async def api_root() -> Dict[str, Any]:
    """API root endpoint with basic information."""
    return {
        "message": f"Welcome to {settings.app_name} API",
        "version": settings.app_version,
        "docs": f"{settings.api_prefix}/docs",
        "health": "/health",
    }


app.include_router(converter_router, prefix=f"{settings.api_prefix}/pdf-converter")
app.include_router(cor_router, prefix=f"{settings.api_prefix}/cor")


# Error handlers
@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle validation errors."""
    logger.error(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content={"error": str(exc)},
    )


@app.exception_handler(CORPathwaysException)
async def cor_pathways_error_handler(request: Request, exc: CORPathwaysException):
    """Handle application errors that were not translated by a router."""
    logger.error(f"{type(exc).__name__}: {exc.message}")
    return JSONResponse(
        status_code=500,
        content={"error": exc.message, "details": exc.details},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred. Please try again later."},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
