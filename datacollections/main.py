"""FastAPI application entrypoint for DataCollections."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from datacollections.api.middleware.rate_limit import configure_rate_limits, setup_rate_limiting
from datacollections.api.routers import maintenance, records, upload
from datacollections.config import Config, StoreConfig
from datacollections.database.connection import Database
from datacollections.exceptions import DataCollectionsError, StoreConnectionError
from datacollections.logging_config import setup_logging
from datacollections.maintenance.progress import MaintenanceProgress
from datacollections.models.errors import ErrorResponse
from datacollections.maintenance.service import MaintenanceService
from datacollections.query.record_query import RecordQueryService
from datacollections.store.record_store import RecordStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = Config.load()
    setup_logging(config.store)
    configure_rate_limits(config.settings.rate_limits)
    config.db_path.parent.mkdir(parents=True, exist_ok=True)
    config.reports_dir.mkdir(parents=True, exist_ok=True)

    db = Database(config.db_path)
    await db.connect()
    logger.info("Connected to record store at %s", config.db_path)

    store = RecordStore(db, batch_size=config.settings.performance.batch_size)
    progress = MaintenanceProgress(config.reports_dir / "maintenance_status.json")

    app.state.config = config
    app.state.db = db
    app.state.store = store
    app.state.query_service = RecordQueryService(store)
    app.state.maintenance_progress = progress
    app.state.maintenance_service = MaintenanceService(store=store, progress=progress, db=db)

    yield

    await db.close()


app = FastAPI(title="DataCollections API", lifespan=lifespan)
setup_rate_limiting(app)

_cors_origins = StoreConfig().cors_origins()
if _cors_origins:
    from fastapi.middleware.cors import CORSMiddleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    response = await call_next(request)
    if request.url.path.startswith("/api/"):
        response.headers["X-API-Version"] = "1"
    return response


def _error_response(status_code: int, detail, headers=None) -> JSONResponse:
    body = ErrorResponse.for_status(status_code, detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return _error_response(422, jsonable_encoder(exc.errors()))


@app.exception_handler(StoreConnectionError)
async def store_connection_handler(request: Request, exc: StoreConnectionError):
    logger.error("Record store connection error: %s", exc)
    return _error_response(503, "Record store unavailable")


@app.exception_handler(DataCollectionsError)
async def datacollections_error_handler(request: Request, exc: DataCollectionsError):
    logger.error("Application error: %s", exc)
    return _error_response(500, "Internal server error")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return _error_response(500, "Internal server error")


app.include_router(upload.router)
app.include_router(records.router)
app.include_router(maintenance.router)


@app.get("/")
async def root():
    return {"message": "DataCollections API is running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
