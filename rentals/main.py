import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

# Import models to ensure they're registered with SQLAlchemy Base
from . import models  # noqa: F401
from .config import ICAL_SYNC_ENABLED
from .database import Base, engine
from .domain.bookings import router as bookings_router
from .domain.channels import router as channels_router
from .domain.ical import router as ical_router
from .domain.ical.exceptions import PersistenceFailure
from .domain.ical.scheduler import ICalSyncScheduler
from .domain.ical.service import sync_all_properties
from .domain.properties import router as properties_router
from .utils.dates import utcnow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    scheduler = None
    if ICAL_SYNC_ENABLED:
        scheduler = ICalSyncScheduler(job=sync_all_properties)
        scheduler.start()
    else:
        logger.info("In-process iCal sync disabled (ICAL_SYNC_ENABLED=false)")
    app.state.ical_scheduler = scheduler

    yield

    logger.info("Application shutting down...")
    if scheduler:
        await scheduler.stop()


app = FastAPI(title="Rentals API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error for {request.url.path}: {exc.orig}")
    return JSONResponse(status_code=409, content={"detail": "A record with this data already exists"})


@app.exception_handler(PersistenceFailure)
async def persistence_exception_handler(request: Request, exc: PersistenceFailure):
    logger.error(
        f"❌ Calendar sync aborted for property {exc.property_id} (event {exc.event_uid}): {exc.message}"
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Calendar sync failed while saving bookings", "propertyId": exc.property_id},
    )


ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)

# Routes
app.include_router(properties_router)
app.include_router(channels_router)
app.include_router(bookings_router)
app.include_router(ical_router)


@app.get("/")
def root():
    return {"message": "Rentals API is running"}


@app.get("/health")
def health():
    return {"status": "ok", "timestamp": utcnow().isoformat()}
