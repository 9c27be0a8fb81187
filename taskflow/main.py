import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models  # noqa: F401 - registers tables on Base.metadata
from .cache import get_cache_stats
from .config import ALLOWED_ORIGINS
from .csrf import CSRF_COOKIE_NAME, CSRFMiddleware, generate_csrf_token, set_csrf_cookie
from .database import Base, engine
from .domain.analytics.router import router as analytics_router
from .domain.clients.router import router as clients_router
from .domain.planner.router import router as planner_router
from .domain.settings.router import router as settings_router
from .domain.tasks.router import router as tasks_router
from .routes.auth import router as auth_router
from .routes.stream import router as stream_router
from .routes.users import router as users_router
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

# Security settings from environment
CSRF_ENABLED = os.getenv("CSRF_ENABLED", "true").lower() == "true"
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Several workers may race to create the tables
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    try:
        from .rate_limiter import get_redis_client

        get_redis_client()
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(
            f"Redis connection failed - settings cache disabled, rate-limited endpoints will return 503: {e}"
        )

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="TaskFlow API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed Authorization headers are authentication errors, not 422s"""
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={"detail": "Not authenticated. Please provide a valid Bearer token."},
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    logger.debug(
        f"{request.method} {request.url.path} -> {response.status_code} ({(time.time() - start) * 1000:.0f}ms)"
    )
    return response


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

if CSRF_ENABLED:
    app.add_middleware(CSRFMiddleware)
    logger.info("CSRF protection enabled")
else:
    logger.info("CSRF protection disabled")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,  # Session and CSRF cookies
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(clients_router)
app.include_router(tasks_router)
app.include_router(planner_router)
app.include_router(settings_router)
app.include_router(analytics_router)
app.include_router(stream_router)


@app.get("/")
def root():
    return {"message": "TaskFlow API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/redis")
async def redis_health_check():
    """Check Redis connectivity for monitoring"""
    stats = get_cache_stats()
    return {"status": "healthy" if stats.get("available") else "unhealthy", "redis": stats}


@app.get("/csrf-token")
async def get_csrf_token(request: Request, response: Response):
    """
    Get a CSRF token for the frontend.
    The token is also set as a cookie; send it back in the X-CSRF-Token header
    on cookie-authenticated state-changing requests.
    """
    existing_token = request.cookies.get(CSRF_COOKIE_NAME)
    if existing_token:
        return {"csrf_token": existing_token}

    new_token = generate_csrf_token()
    set_csrf_cookie(response, new_token)
    return {"csrf_token": new_token}
