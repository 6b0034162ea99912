"""
Main application entry point.

This module initializes the FastAPI application, its error handlers and
includes all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from municipal_budget.core.config import settings
from municipal_budget.core.exceptions import BudgetAPIError, InvalidRequestBody
from municipal_budget.core.logging import logger
from municipal_budget.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from municipal_budget.db.session import create_tables
from municipal_budget.routers.budgets import router as budgets_router
from municipal_budget.routers.health import router as health_router
from municipal_budget.routers.imports import router as imports_router
from municipal_budget.routers.insights import router as insights_router


app = FastAPI(
    title=settings.api.title,
    description=settings.api.description,
    version=settings.api.version,
    debug=settings.debug,
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_urls,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.exception_handler(BudgetAPIError)
async def budget_api_error_handler(request: Request, exc: BudgetAPIError) -> JSONResponse:
    """Render service errors as ``{"error": ..., "details": ...}``."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"{request.url.path}: {exc.message} ({exc.details})")
    else:
        logger.warning(f"{request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors, reported as 400."""
    error = InvalidRequestBody(details=str(exc.errors()))
    logger.warning(f"{request.url.path}: {error.message}")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error in {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


# Include routers with /api prefix
app.include_router(
    health_router,
    prefix="/api/health",
    tags=["health"],
)
app.include_router(
    budgets_router,
    prefix="/api/budget",
    tags=["budget"],
)
app.include_router(
    imports_router,
    prefix="/api/import",
    tags=["import"],
)
app.include_router(
    insights_router,
    prefix="/api/insights",
    tags=["insights"],
)


@app.on_event("startup")
async def startup_event():
    """Actions to run on application startup."""
    logger.info(f"Starting {settings.api.title}")
    logger.info(f"Environment: {settings.environment.value}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Database URL: {settings.database.url[:20]}...")

    if settings.database.create_tables:
        await create_tables()

    if not settings.gemini.api_key:
        logger.warning("GEMINI_API_KEY is not set; insight requests will fail")

    logger.info(f"API Docs available at: http://{settings.api.host}:{settings.api.port}/docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Actions to run on application shutdown."""
    logger.info(f"Shutting down {settings.api.title}")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.api.title,
        "version": settings.api.version,
        "docs": "/docs",
    }
