"""
Shiori - shared day schedules
FastAPI Application Entry Point
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.core.errors import ShioriError
from app.database import Base, build_engine, build_sessionmaker
from app.api import auth, schedule, shares, invites

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

HTTP_CODES = {400: "VALIDATION", 401: "UNAUTHENTICATED", 403: "FORBIDDEN", 404: "NOT_FOUND"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    engine = build_engine(settings.database_url, echo=settings.debug)
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)
    async with engine.begin() as conn:
        # Create tables if they don't exist (for development)
        # In production, use Alembic migrations
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Application started")
    yield
    # Shutdown
    await engine.dispose()
    logger.info("Application stopped")


app = FastAPI(
    title="Shiori API",
    description="Day schedules shared by email or invite link",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ShioriError)
async def shiori_error_handler(request: Request, exc: ShioriError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid input"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    logger.warning(f"Validation error for {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"error": message, "code": "VALIDATION"})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = HTTP_CODES.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": code},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    message = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content={"error": message, "code": "INTERNAL"})


# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(schedule.router, prefix="/api", tags=["Schedule"])
app.include_router(shares.router, prefix="/api/shares", tags=["Shares"])
app.include_router(invites.router, prefix="/api/invites", tags=["Invites"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}
