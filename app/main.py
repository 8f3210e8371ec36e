# app/main.py
# TutorHub FastAPI application entry point
#
# Startup:  optional Alembic migrations, DB connection check
# Shutdown: Clean connection pool disposal
# Routes:   /health, /api/v1/* (all endpoints via master router)
# Errors:   every DomainError raised by a service becomes a JSON error response

import logging
from contextlib import asynccontextmanager

from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app.db.base  # noqa: F401 -- registers all models so relationships resolve
from app.api.v1.router import api_router
from app.core.config import settings
from app.core.exceptions import DomainError
from app.db.session import check_db_connection, engine

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("tutorhub")


def run_startup_migrations() -> bool:
    """Run `alembic upgrade head` using the project alembic.ini."""
    try:
        alembic_cfg = Config("alembic.ini")
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations: OK")
        return True
    except Exception as exc:
        logger.warning("Database migrations failed -- %s", exc)
        return False


# ── Lifespan ──────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup and shutdown logic.
    FastAPI's modern replacement for @app.on_event("startup").
    """
    logger.info("Starting %s v%s [%s]", settings.app_name, settings.app_version, settings.app_env)

    if settings.auto_migrate_on_startup:
        run_startup_migrations()

    if check_db_connection():
        logger.info("Database connection: OK")
    else:
        logger.warning("Database connection failed -- check DATABASE_URL")

    yield  # App runs here

    logger.info("Shutting down -- disposing DB connection pool")
    engine.dispose()


# ── App Instance ──────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "TutorHub -- teachers publish lessons, students book and pay for them, "
        "reviews feed teacher ratings."
    ),
    docs_url="/api/docs",       # Swagger UI
    redoc_url="/api/redoc",     # ReDoc
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
    debug=settings.debug,
)


# ── CORS ──────────────────────────────────────────────────────────────────────

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Domain errors ─────────────────────────────────────────────────────────────

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    http_exc = exc.to_http_exception()
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info(
            "%s %s rejected: %s (%s)", request.method, request.url.path, exc.code, exc.message
        )
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


# ── Routes ────────────────────────────────────────────────────────────────────

app.include_router(api_router, prefix="/api/v1")


# ── Health Check ──────────────────────────────────────────────────────────────

@app.get("/health", tags=["Health"], include_in_schema=False)
def health_check():
    """
    Health check endpoint for the load balancer.
    Returns 200 OK if the app is running; DB status included for observability.
    """
    db_ok = check_db_connection()
    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "services": {
                "database": "ok" if db_ok else "unavailable",
            },
        },
    )


@app.get("/", include_in_schema=False)
def root():
    return JSONResponse(
        content={
            "message": "TutorHub API",
            "docs": "/api/docs",
            "health": "/health",
        }
    )
