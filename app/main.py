"""FastAPI application for Novel Forge backend."""
import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from app.config import settings
from app.routers import chat, conversations, novels, chapters
from app.dependencies import get_chat_service
from app.schemas.errors import create_error_response
from app.middleware.logging import LoggingMiddleware

# Configure structured logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    # Startup
    logger.info("Starting Novel Forge backend...")
    logger.info(f"Upstream model: {settings.llm_model} at {settings.llm_api_url}")

    yield

    # Shutdown
    logger.info("Shutting down Novel Forge backend...")
    # Only join streaming turns if the chat service was ever created
    if get_chat_service.cache_info().currsize:
        await get_chat_service().aclose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

# Add logging middleware (before CORS to capture all requests)
app.add_middleware(LoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include routers
app.include_router(chat.router)
app.include_router(conversations.router)
app.include_router(novels.router)
app.include_router(chapters.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/ready")
async def ready():
    """Readiness check endpoint with dependency verification."""
    checks = {}
    all_ready = True

    # Check Supabase connection
    try:
        from app.clients.supabase import get_supabase, CONVERSATIONS_TABLE
        query = get_supabase().table(CONVERSATIONS_TABLE).select("id").limit(1)
        await asyncio.to_thread(query.execute)
        checks["supabase"] = "ready"
    except Exception as e:
        logger.error(f"Supabase connection check failed: {e}")
        checks["supabase"] = f"error: {str(e)}"
        all_ready = False

    # Upstream API is only checked for configuration; it has no health endpoint
    checks["llm_api"] = "configured" if settings.llm_api_key else "missing api key"

    status_code = 200 if all_ready else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "ready" if all_ready else "not ready",
            "checks": checks,
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors."""
    errors = jsonable_encoder(exc.errors())
    return JSONResponse(
        status_code=422,
        content=create_error_response(
            detail="Validation error",
            status_code=422,
            code="VALIDATION_ERROR",
            errors=errors,
        ),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(
            detail=exc.detail,
            status_code=exc.status_code,
            code=f"HTTP_{exc.status_code}",
        ),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=create_error_response(
            detail="Internal server error",
            status_code=500,
            code="INTERNAL_SERVER_ERROR",
        ),
    )
