from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text

from projecthub.core.error_handlers import register_exception_handlers
from projecthub.core.logging import configure_logging, get_logger
from projecthub.core.middleware import RequestLoggingMiddleware
from projecthub.core.rate_limit import limiter
from projecthub.core.settings import settings
from projecthub.db import Base, engine, get_db, get_db_path
from projecthub.routers import api_router
from projecthub.services.storage import ATTACHMENTS_URL_PREFIX, upload_root

# Configure structured logging at module load
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.
    Handles startup and shutdown events.
    """
    import projecthub.models  # noqa: F401 - ensure models are imported for metadata

    logger.info("application_starting", environment=settings.environment)
    db_path = get_db_path()
    if db_path:
        logger.info("using_sqlite_database", path=db_path)
    else:
        logger.info("using_database", url=engine.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=engine)
    upload_root().mkdir(parents=True, exist_ok=True)
    logger.info("database_tables_created")

    yield

    logger.info("application_shutdown")


app = FastAPI(title="ProjectHub Backend", version="0.1.0", lifespan=lifespan)

# ============================================================================
# CORS Middleware Configuration
# ============================================================================
ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization", "Accept", "Origin"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=ALLOWED_METHODS,
    allow_headers=ALLOWED_HEADERS,
)

# ============================================================================
# Rate Limiting Middleware (SlowAPI)
# ============================================================================
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# ============================================================================
# Request Logging Middleware (must be added after other middleware)
# ============================================================================
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)


@app.get("/health")
def health_check():
    """Basic health check endpoint."""
    return {"status": "ok", "service": "projecthub-backend"}


@app.get("/health/ready")
def readiness_check(db=Depends(get_db)):
    """
    Readiness check - verifies database connectivity.
    Used by container orchestration for readiness probes.
    """
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ready", "database": "connected"}
    except Exception as e:
        logger.warning("readiness_check_failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "database": "disconnected", "error": str(e)},
        )


app.include_router(api_router, prefix="/api/v1")
app.mount(ATTACHMENTS_URL_PREFIX, StaticFiles(directory=str(upload_root()), check_dir=False), name="attachments")
