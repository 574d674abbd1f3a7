"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routes, exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.adapters.kvstore.json_file import JsonFileKeyValueStore
from src.api.enrollments import EnrollmentRegistry
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Local accounts and phone enrollment API v1 - Sign up, log in and onboard by phone",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Opens the local key-value store on startup
    - Creates the open-enrollment registry on startup
    - Closes every open enrollment (and its countdown) on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    store = JsonFileKeyValueStore(settings.storage_path)
    logger.info("Using key-value store at %s", store.path)

    # Store shared objects in app state for dependency injection
    app.state.store = store
    app.state.enrollments = EnrollmentRegistry(idle_ttl_seconds=settings.enrollment_idle_ttl_seconds)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    app.state.enrollments.close_all()
    logger.info("Open enrollments closed")


app = FastAPI(
    title="fondy-auth",
    description="Local accounts and phone enrollment API - Credential store and sign-up state machine",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report request validation errors without the submitted values.

    Inputs can carry passwords or text that does not encode as UTF-8, so each
    error keeps its type, location and message only.
    """
    errors = [{key: value for key, value in error.items() if key != "input"} for error in exc.errors()]
    return JSONResponse(status_code=422, content=jsonable_encoder({"detail": errors}))


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint.

    Returns 200 OK with the number of open enrollments.
    """
    enrollments = request.app.state.enrollments
    return {"status": "healthy", "open_enrollments": str(len(enrollments))}
