import logging
import sqlite3
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from impact_tracker.core.config import get_settings
from impact_tracker.core.log import configure_logging
from impact_tracker.data_readers.json_provider import get_rubric_taxonomy
from impact_tracker.routers import ai, auth, health, impacts, rubric, stats, summary
from impact_tracker.rubric.enums import InvalidEnumerationValue

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Rubric is reference data; build it before serving so a bad dataset fails fast.
    get_rubric_taxonomy()
    yield


app = FastAPI(
    title="Impact Tracker Backend",
    description="APIs for logging career impacts, rubric coverage, statistics, and period summaries.",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "health", "description": "Service health"},
        {"name": "auth", "description": "Authentication and rubric preferences"},
        {"name": "impacts", "description": "Logged impacts"},
        {"name": "rubric", "description": "Craft skills rubric and coverage"},
        {"name": "stats", "description": "Dashboard statistics"},
        {"name": "summary", "description": "Period summaries and exports"},
        {"name": "ai", "description": "Impact classification"},
    ],
)

# Install CORS middleware early so that OPTIONS preflight is handled
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,  # keep True to allow cookies/Authorization headers if needed
    allow_methods=["*"],     # include OPTIONS automatically
    allow_headers=["*"],     # include requested custom headers
)

# Exception handlers (structured, no sensitive details)
@app.exception_handler(InvalidEnumerationValue)
async def invalid_enum_handler(request: Request, exc: InvalidEnumerationValue):
    return JSONResponse(status_code=422, content={"detail": str(exc)})

@app.exception_handler(sqlite3.DatabaseError)
async def sqlite_error_handler(request: Request, exc: sqlite3.DatabaseError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, type(exc).__name__)
    return JSONResponse(status_code=400, content={"detail": "Database operation failed"})

# Ensure standard HTTP exceptions pass through (do not override FastAPI/Starlette defaults)
@app.exception_handler(StarletteHTTPException)
async def http_exception_passthrough(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

# Do not treat validation errors from OPTIONS as 500s; keep default 422 for non-OPTIONS requests
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    if request.method.upper() == "OPTIONS":
        return Response(status_code=204)
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})

# Catch-all for truly unhandled exceptions only
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(impacts.router)
app.include_router(rubric.router)
app.include_router(stats.router)
app.include_router(summary.router)
app.include_router(ai.router)
