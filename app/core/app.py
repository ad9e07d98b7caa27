"""
FastAPI application factory
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
import logging
import sentry_sdk

from app.core.config import Settings, get_settings
from app.core.logging_config import setup_logging
from app.api.v1.router import api_router

logger = logging.getLogger(__name__)

# Headers the app's supabase-js client sends on every call
CORS_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings = get_settings()
    setup_logging()

    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set; every model-backed endpoint will fail")
    if not settings.storage_configured:
        logger.info("Supabase storage not configured; imports skip the storage image tier")

    logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV})")
    yield
    logger.info("Application shutdown complete")


def init_sentry(settings: Settings):
    """Report unhandled errors to Sentry when a DSN is configured"""
    if not settings.SENTRY_DSN:
        return
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.APP_ENV,
        release=f"{settings.APP_NAME}@{settings.APP_VERSION}",
        send_default_pii=True,
        traces_sample_rate=0.2 if settings.is_production else 1.0,
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    settings = get_settings()
    init_sentry(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/api/docs",
        redoc_url=None,
    )

    # Browser pre-flight gets a 200 with permissive headers; no cookies are used
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=CORS_ALLOWED_HEADERS,
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Liveness plus which optional integrations are configured"""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.APP_ENV,
            "gemini": bool(settings.GEMINI_API_KEY),
            "storage": settings.storage_configured,
            "pexels": bool(settings.PEXELS_API_KEY),
        }

    return app
