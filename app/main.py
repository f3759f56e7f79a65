from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from minio.error import S3Error
from sqlmodel import Session

from app.core.config import get_settings, parse_comma_separated_origins
from app.core.error_handlers import register_exception_handlers
from app.core.telemetry import setup_telemetry
from app.database.database import create_db_and_tables, engine
from app.database.init_db import init_db
from app.internal import admin
from app.routers import (
    applications,
    auth,
    bookmarks,
    hosts,
    images,
    opportunities,
    reviews,
    users,
)
from app.services.storage import storage_service
from app.utils.logger import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Perform application startup tasks before the FastAPI app begins serving requests.

    Sets up logging, creates the tables, seeds the first super administrator,
    makes sure the images bucket exists and initializes telemetry. An
    unreachable object store is logged; uploads fail until it is back.
    """
    setup_logging()
    create_db_and_tables()
    with Session(engine) as session:
        init_db(session)
    try:
        storage_service.ensure_bucket_exists()
    except (S3Error, OSError) as e:
        logger.error(f"Image storage unavailable at startup: {e}")
    setup_telemetry(app)
    yield


app = FastAPI(
    title="TaiwanStay API",
    description="RESTful API for the TaiwanStay work-exchange platform",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        str(origin)
        for origin in parse_comma_separated_origins(get_settings().BACKEND_CORS_ORIGINS)
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health", include_in_schema=False)
def health_check():
    """
    Provide the application's liveness state for health checks.

    Returns:
        dict: A mapping with key "status" and value "ok" indicating the service is healthy.
    """
    return {"status": "ok"}


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(hosts.router)
app.include_router(opportunities.router)
app.include_router(applications.router)
app.include_router(reviews.router)
app.include_router(bookmarks.router)
app.include_router(images.router)
app.include_router(admin.router)
