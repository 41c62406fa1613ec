"""
FastAPI application for the MovieDB API.

REST API behind the movie review frontend: browsing, reviews, movie
requests and user profile management. Bulk imports and interactive
request review are handled via the CLI.
"""

import os
import time

from bson.errors import InvalidId
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.dependencies import get_config, get_db
from api.exceptions import (
    APIError,
    DatabaseError,
    api_error_handler,
    database_error_handler,
    generic_exception_handler,
    identity_provider_error_handler,
    invalid_id_handler,
    route_error_handler,
)
from api.logging_config import configure_api_logging, logger, start_request
from moviedb.database import DatabaseManager
from moviedb.identity import IdentityProviderError

# Import routers
from api.routers import movie_requests, movies, reviews, users

API_PREFIX = "/api/v1/movies"

# Create FastAPI app
app = FastAPI(
    title="MovieDB API",
    description="REST API for browsing and reviewing movies",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# Register exception handlers
app.add_exception_handler(APIError, api_error_handler)
app.add_exception_handler(StarletteHTTPException, route_error_handler)
app.add_exception_handler(InvalidId, invalid_id_handler)
app.add_exception_handler(IdentityProviderError, identity_provider_error_handler)
app.add_exception_handler(PyMongoError, database_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Comma-separated ALLOWED_ORIGINS; unset means any origin
_origins = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins or ["*"],
    allow_credentials=bool(_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def configure_logging():
    """Log next to the core components, at the configured level."""
    config = app.dependency_overrides.get(get_config, get_config)()
    configure_api_logging(config.log_dir, config.log_level)
    logger.info("MovieDB API started")


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Log all HTTP requests with timing and response status."""
    request_id = start_request()

    # Skip logging for health checks and docs
    skip_paths = {"/health", "/", "/api/docs", "/api/redoc", "/api/openapi.json"}
    if request.url.path in skip_paths:
        return await call_next(request)

    start_time = time.time()
    client_ip = request.client.host if request.client else "unknown"

    logger.info(
        f"Request started: {request.method} {request.url.path} "
        f"from {client_ip}"
    )

    try:
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        log_msg = (
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration_ms:.2f}ms"
        )

        if response.status_code >= 500:
            logger.error(log_msg)
        elif response.status_code >= 400:
            logger.warning(log_msg)
        else:
            logger.info(log_msg)

        # Add request ID to response headers for debugging
        response.headers["X-Request-ID"] = request_id
        return response

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"Request failed: {request.method} {request.url.path} "
            f"duration={duration_ms:.2f}ms error={str(e)}"
        )
        raise


# Mount routers
app.include_router(movies.router, prefix=API_PREFIX, tags=["Movies"])
app.include_router(reviews.router, prefix=API_PREFIX, tags=["Reviews"])
app.include_router(movie_requests.router, prefix=API_PREFIX, tags=["Requests"])
app.include_router(users.router, prefix=API_PREFIX, tags=["Users"])


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint points at the docs."""
    return {
        "message": "MovieDB API",
        "docs": "/api/docs",
        "redoc": "/api/redoc",
    }


@app.get("/health", include_in_schema=False)
def health(db: DatabaseManager = Depends(get_db)):
    """Health check that pings the database."""
    try:
        db.ping()
    except PyMongoError as e:
        logger.error(f"Health check failed: {e}")
        raise DatabaseError("Database is not reachable")
    return {"status": "ok"}

