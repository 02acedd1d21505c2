"""
Main application entry point for the Hardhat Detection Service.
"""
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from hardhat.api.api_v1.api import api_router
from hardhat.core.config import settings
from hardhat.core.exceptions import (
    APIError,
    api_error_handler,
    generic_error_handler,
    validation_error_handler
)
from hardhat.core.logging import logger, mask_secret, setup_logging


# Sinks are configured before anything else logs
setup_logging()


# Lifespan: report configuration once at startup
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Log the detector configuration on startup, with the key masked.
    """
    logger.info(f"Roboflow model: {settings.ROBOFLOW_MODEL_ID or 'MISSING'} v{settings.ROBOFLOW_MODEL_VERSION}")
    logger.info(f"Roboflow API key: {mask_secret(settings.ROBOFLOW_API_KEY)}")
    logger.info(f"Thresholds: confidence={settings.ROBOFLOW_CONFIDENCE} overlap={settings.ROBOFLOW_OVERLAP}")
    if settings.MOCK_INFER:
        logger.warning("MOCK_INFER is enabled, detector calls return canned predictions")

    logger.info(f"{settings.PROJECT_NAME} started")
    yield

    # History is in memory only and is lost here
    logger.info(f"{settings.PROJECT_NAME} shutting down...")


# Application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.PROJECT_DESCRIPTION,
    version=settings.API_VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan
)


# Browser clients may call the API from any configured origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error responses share the {"success": false, "message": ...} envelope
app.add_exception_handler(APIError, api_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, generic_error_handler)


# Request timing
@app.middleware("http")
async def add_process_time(request: Request, call_next):
    """
    Time each request and expose the duration as X-Process-Time.
    """
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    logger.debug(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed * 1000:.1f}ms")
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"

    return response


# Versioned API
app.include_router(api_router, prefix=settings.API_V1_STR)


# Service banner
@app.get("/", status_code=status.HTTP_200_OK)
async def root():
    """
    Name, version and where to find the API.
    """
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.API_VERSION,
        "message": "Welcome to the Hardhat Detection Service",
        "docs_url": "/docs",
        "api_prefix": settings.API_V1_STR
    }


if __name__ == "__main__":
    # Local development server with auto-reload
    import uvicorn

    uvicorn.run(
        "hardhat.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="debug"
    )
