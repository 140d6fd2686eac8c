"""FastAPI application: routers, request ids, error envelope."""
import logging
import uuid
from time import perf_counter

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from careconnect.api import admin_surveys, assignments, caregiver, notifications
from careconnect.core.config import settings
from careconnect.core.database import engine
from careconnect.core.errors import register_error_handlers
from careconnect.core.limiter import limiter
from careconnect.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(
    title="CareConnect Survey API",
    description="Dynamic surveys, weekly check-ins and caregiver task lists",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)
app.state.limiter = limiter
register_error_handlers(app)


@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    """Tag each request with an id (the caller's ``X-Request-Id`` when given) and time it."""
    request.state.request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
    started = perf_counter()
    response = await call_next(request)
    response.headers["X-Request-Id"] = request.state.request_id
    logger.debug("%s %s -> %s in %.1fms", request.method, request.url.path,
                 response.status_code, (perf_counter() - started) * 1000)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-Id"],
    expose_headers=["X-Request-Id"],
)

app.include_router(admin_surveys.router)
app.include_router(assignments.router)
app.include_router(caregiver.router)
app.include_router(notifications.router)
app.include_router(notifications.caregiver_router)


@app.get("/")
def root():
    return {
        "message": "CareConnect Survey API",
        "version": API_VERSION,
        "status": "running",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
def health():
    """Liveness plus a round trip to the database; 503 when the database is unreachable."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Health check could not reach the database: %s", exc)
        return JSONResponse(status_code=503, content={"status": "degraded", "database": "unreachable"})
    return {"status": "healthy", "database": "connected"}
