"""FastAPI application entrypoint. No business logic; only wiring, error rendering and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from civictrack import __version__
from civictrack.api import router as api_router
from civictrack.core.config import Settings, settings
from civictrack.core.database import SessionLocal, engine
from civictrack.core.errors import AppError, StoreUnavailable, Unauthenticated, ValidationError
from civictrack.core.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware
from civictrack.services.bootstrap import bootstrap

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def error_response(exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=headers,
    )


async def app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    return error_response(exc)


async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted(
        {".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()} - {""}
    )
    message = f"Invalid or missing fields: {', '.join(fields)}" if fields else None
    return error_response(ValidationError(message))


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Store error on %s %s", request.method, request.url.path)
    return error_response(StoreUnavailable())


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    db = SessionLocal()
    try:
        bootstrap(engine, db, settings)
    finally:
        db.close()
    logger.info("CivicTrack API ready (env=%s)", settings.APP_ENV)
    yield


def create_app(app_settings: Settings = settings, *, run_bootstrap: bool = True) -> FastAPI:
    """Build the application. Tests pass run_bootstrap=False and seed their own database."""
    app = FastAPI(
        title="CivicTrack API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan if run_bootstrap else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if app_settings.APP_ENV == "dev" else [],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if app_settings.RATE_LIMIT_ENABLED:
        app.add_middleware(
            RateLimitMiddleware,
            limiter=FixedWindowRateLimiter(),
            limit=app_settings.RATE_LIMIT_REQUESTS,
            window=app_settings.RATE_LIMIT_WINDOW_SEC,
            path_prefix=app_settings.API_PREFIX,
        )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)

    app.include_router(api_router, prefix=app_settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "CivicTrack API"}

    return app


app = create_app()
