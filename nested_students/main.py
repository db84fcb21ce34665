"""FastAPI application entry point: student API plus static profile images."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from nested_students.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.APP_DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    logger.info("Starting Nested Students API, serving uploads from %s", settings.UPLOAD_DIR)

    yield

    # Shutdown
    from nested_students.database import engine

    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="Nested Students API",
    description="Students with one-level parent/child nesting and profile images",
    version="0.1.0",
    lifespan=lifespan,
)

# Requests without an Origin header are not CORS requests and pass through.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

# REST API router
from nested_students.api.router import router as api_router  # noqa: E402

app.include_router(api_router)


@app.get("/health")
async def health():
    """Basic liveness probe."""
    return {"status": "ok", "service": "nested-students"}


@app.get("/health/ready")
async def health_ready():
    """Readiness probe with database check."""
    from nested_students.database import engine
    from sqlalchemy import text

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "ready", "database": "ok"}
    except Exception as e:
        logger.error("Health ready check failed: %s", e)
        return JSONResponse(
            {"status": "not_ready", "database": "error"},
            status_code=503
        )


# Profile images at the HTTP root. Mounted last so the routes above win.
app.mount(
    "/",
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)
