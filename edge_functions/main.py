"""
FastAPI application for the HashEBooks edge functions.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Dict, List

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from edge_functions import auth_email, book_review, book_status_email, delete_user, welcome_email
from edge_functions.config import config as api_config
from edge_functions.dependencies import build_services
from edge_functions.errors import HandlerError
from edge_functions.models import ErrorResponse, HealthResponse
from utilities.config import config
from utilities.logger import setup_logging

logger = structlog.get_logger(__name__)

# Endpoints whose callers also send the platform identification headers
PLATFORM_HEADER_PATHS = {"/send-book-status-email"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
        debug=config.debug
    )
    logger.info("Starting HashEBooks edge functions")

    services = getattr(app.state, "services", None)
    owns_services = services is None
    if owns_services:
        services = build_services(config, api_config)
        app.state.services = services

    yield

    logger.info("Shutting down HashEBooks edge functions")
    if owns_services:
        await services.aclose()
        app.state.services = None


app = FastAPI(
    title=api_config.api_title,
    description=api_config.api_description,
    version=api_config.api_version,
    lifespan=lifespan
)


class ResponseOnlyCORSMiddleware(CORSMiddleware):
    """
    Adds CORS headers to responses but leaves every OPTIONS request to the
    preflight route, which always answers 200 with an empty body.
    """

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http" and scope["method"] == "OPTIONS":
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


app.add_middleware(
    ResponseOnlyCORSMiddleware,
    allow_origins=api_config.cors_origins,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=api_config.cors_allow_headers + api_config.cors_platform_headers,
)


def cors_headers(path: str) -> Dict[str, str]:
    """CORS headers answered for an OPTIONS request on path."""
    allowed: List[str] = list(api_config.cors_allow_headers)
    if path in PLATFORM_HEADER_PATHS:
        allowed += api_config.cors_platform_headers
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": ", ".join(allowed),
        "Access-Control-Allow-Methods": "POST, OPTIONS",
    }


@app.exception_handler(HandlerError)
async def handler_error_handler(request: Request, exc: HandlerError):
    """Render taxonomy errors as {"error": message}."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(exclude_none=True),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
        headers=exc.headers
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error="Invalid request").model_dump(exclude_none=True),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="An unexpected error occurred",
            detail=str(exc) if api_config.debug else None
        ).model_dump(exclude_none=True)
    )


# Preflight probes carry no sensitive signal and skip the timing floor
@app.options("/{path:path}", include_in_schema=False)
async def preflight(path: str):
    return Response(status_code=status.HTTP_200_OK, headers=cors_headers(f"/{path}"))


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version=api_config.api_version
    )


app.include_router(delete_user.router)
app.include_router(welcome_email.router)
app.include_router(book_status_email.router)
app.include_router(auth_email.router)
app.include_router(book_review.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "edge_functions.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=True,
        log_level="info"
    )
