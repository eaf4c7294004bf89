# Main application entry point
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import health_router, notes_router, realtime_router, sharing_router, versions_router
from .config import get_settings
from .core.exceptions import NoteCollabError
from .core.logging import LoggingMiddleware, get_logger, setup_logging
from .core.redis_client import get_redis_client
from .core.schemas.common import ErrorResponse
from .database import create_tables

# Setup logging first
setup_logging()
logger = get_logger("main")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Starting NoteCollab application",
        extra={"version": __version__, "environment": settings.environment, "debug": settings.debug},
    )

    redis_client = get_redis_client()
    try:
        await redis_client.connect()
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Continuing without token revocation...")

    # tests run against SQLite in-memory and create their own tables
    if os.getenv("NOTECOLLAB_SKIP_LIFESPAN_DB") == "1":
        logger.info("Skipping DB table creation due to NOTECOLLAB_SKIP_LIFESPAN_DB=1")
    else:
        try:
            await create_tables()
            logger.info("Database tables created/verified")
        except Exception as e:
            logger.error("Failed to create database tables", exc_info=e)
            raise

    yield

    logger.info("Shutting down NoteCollab application")
    try:
        await redis_client.disconnect()
        logger.info("Redis connection closed")
    except Exception as e:
        logger.warning(f"Redis disconnect failed: {e}")


app = FastAPI(
    title=settings.app_name,
    description="Real-time collaborative note editing with version history",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NoteCollabError)
async def domain_error_handler(request: Request, exc: NoteCollabError):
    """Render domain errors as ``ErrorResponse`` bodies."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "Request failed",
        extra={
            "path": request.url.path,
            "error": exc.error_type,
            "status_code": exc.status_code,
        },
    )
    body = ErrorResponse(error=exc.error_type, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


# sharing before notes: POST /notes/join must not be shadowed by /notes/{note_id} routes
app.include_router(sharing_router, prefix="/api")
app.include_router(notes_router, prefix="/api")
app.include_router(versions_router, prefix="/api")
app.include_router(health_router, prefix="/api")
app.include_router(realtime_router)


@app.get("/")
async def root():
    return {"message": "NoteCollab API"}


@app.get("/api/")
async def api_root():
    return {
        "message": "NoteCollab API",
        "version": __version__,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "endpoints": {
            "notes": "/api/notes/",
            "health": "/api/health/",
            "realtime": "/ws"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.notecollab.main:app", host=settings.host, port=settings.port, reload=settings.reload)
