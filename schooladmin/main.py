"""School Admin - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from schooladmin.api import activities, attendance, audit_log, class_groups, schools, students, trucks
from schooladmin.config import settings
from schooladmin.container import build_mongo_container
from schooladmin.core.exceptions import (
    DomainError,
    DuplicateKeyError,
    MismatchError,
    NotFoundError,
    ValidationFailure,
)
from schooladmin.db import db_shutdown, db_startup

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await db_startup()
    except ServerSelectionTimeoutError as e:
        logger.error("MongoDB is not reachable at %s. Start a replica set (e.g. docker compose up -d)", settings.mongodb_url)
        raise RuntimeError("MongoDB connection failed. Start MongoDB as a replica set.") from e
    app.state.container = build_mongo_container()
    yield
    await db_shutdown()


app = FastAPI(
    title=settings.app_name,
    description="School administration: students, schools, class groups, activities and attendance",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug,
)

_STATUS_BY_ERROR = {
    DuplicateKeyError: status.HTTP_409_CONFLICT,
    MismatchError: status.HTTP_400_BAD_REQUEST,
    ValidationFailure: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
}


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(PyMongoError)
async def storage_exception_handler(request: Request, exc: PyMongoError):
    logger.error("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected storage error occurred", "error": "storage_error"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(students.router, prefix="/api/students", tags=["Students"])
app.include_router(schools.router, prefix="/api/schools", tags=["Schools"])
app.include_router(activities.router, prefix="/api/activities", tags=["Activities"])
app.include_router(trucks.router, prefix="/api/trucks", tags=["Trucks"])
app.include_router(class_groups.router, prefix="/api/class-groups", tags=["Class Groups"])
app.include_router(attendance.router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(audit_log.router, prefix="/api/audit-log", tags=["Audit Log"])


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}
