"""
Job Board Backend - Main Application

FastAPI backend with:
- PostgreSQL for users, jobs and applications
- MongoDB GridFS for resume files
- Google sign-in and an administrator login
- Stateless JWT session tokens

Run: uvicorn jobboard.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobboard import __version__
from jobboard.api.routes import api_router
from jobboard.core.config import get_settings
from jobboard.core.errors import (
    AppError, StoreError, app_error_handler, http_exception_handler,
    store_error_handler, unhandled_error_handler, validation_error_handler,
)
from jobboard.db.mongodb import close_mongo_client, test_mongo_connection
from jobboard.db.postgres import dispose_engines, test_postgres_connection

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Job board API starting on port %s", settings.port)
    yield
    await dispose_engines()
    await close_mongo_client()
    logger.info("Job board API stopped")


# Create FastAPI app
app = FastAPI(
    title="Job Board API",
    description="""
    Job postings and applications with Google sign-in.

    ## Features
    - **Authentication**: Google sign-in for applicants, static login for the administrator
    - **Jobs**: Public listing of active postings, admin management
    - **Applications**: Apply with a PDF resume, signed resume links
    - **Admin**: Users, application review, aggregate stats
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(StoreError, store_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "postgres": "connected" if await test_postgres_connection() else "disconnected",
        "mongodb": "connected" if await test_mongo_connection() else "disconnected",
    }
