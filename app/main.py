from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.router import api_router
from app.config import get_settings
from app.core.database import Database
from app.core.datetime_utils import utc_now
from app.core.errors import (
    STORE_CONNECTION_ERRORS,
    ReferentialIntegrityError,
    SnapshotOrderError,
    StoreUnavailableError,
)
from app.core.logging import get_logger, setup_logging
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.dependencies import DBSession
from app.repositories.issuer import IssuerRepository
from app.repositories.offer import OfferRepository
from app.web.pages import router as pages_router

logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Startup
    setup_logging()
    database = Database.from_settings(settings)
    await database.open()
    app.state.database = database
    logger.bind(version=settings.app_version).info("app_started")
    yield
    # Shutdown
    await database.close()


app = FastAPI(
    title="Card Bonus Tracker",
    description="Credit card sign-up offers, valued and tracked over time",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.base_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def store_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """Any sign that the store is unreachable becomes a 503."""
    logger.bind(path=request.url.path, error=str(exc)).warning("database_unavailable")
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, StoreUnavailableError().args[0])


for exc_class in STORE_CONNECTION_ERRORS:
    app.add_exception_handler(exc_class, store_unavailable_handler)


@app.exception_handler(ReferentialIntegrityError)
async def referential_integrity_handler(
    request: Request, exc: ReferentialIntegrityError
) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, str(exc))


@app.exception_handler(SnapshotOrderError)
async def snapshot_order_handler(request: Request, exc: SnapshotOrderError) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, str(exc))


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.bind(path=request.url.path, error=str(exc.orig)).warning("database_integrity_error")
    return _error(status.HTTP_409_CONFLICT, "Conflicts with existing data")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return _error(422, message or "Invalid request")


# Include API routes and pages
app.include_router(api_router)
app.include_router(pages_router)


@app.get("/health")
async def health_check(db: DBSession) -> JSONResponse:
    """Health check with database connectivity and record counts."""
    payload = {
        "status": "healthy",
        "timestamp": utc_now().isoformat() + "Z",
        "database": {"connected": True, "offers": 0, "issuers": 0},
        "version": settings.app_version,
    }
    try:
        payload["database"]["offers"] = await OfferRepository(db).count()
        payload["database"]["issuers"] = await IssuerRepository(db).count()
    except STORE_CONNECTION_ERRORS as e:
        logger.bind(error=str(e)).warning("health_check_database_unavailable")
        await db.rollback()
        payload["status"] = "unhealthy"
        payload["database"] = {"connected": False, "offers": 0, "issuers": 0}
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)

    return JSONResponse(content=payload)
