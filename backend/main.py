"""
Hi-Pot Test Log - Main FastAPI Application
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): create_app() factory; store handles built per app and
                      kept on app.state instead of a module-level connection
v1.0.0 (2026-10-01): Initial FastAPI application
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
import logging

from config import Settings, settings as default_settings, init_directories
from api import auth, certificates, debug, logs
from models import init_db
from seed import seed_if_empty
from services.audit_store import AuditStore
from services.auth_gate import AuthGate
from services.credential_store import CredentialStore
from services.errors import ApiError
from services.ingestion import IngestionValidator
from services.query_service import QueryService

logger = logging.getLogger(__name__)


def configure_logging(cfg: Settings):
    logging.basicConfig(
        level=logging.DEBUG if cfg.DEBUG else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(f'{cfg.LOGS_DIR}/api.log'),
            logging.StreamHandler()
        ]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    cfg = app.state.settings
    init_directories(cfg)
    configure_logging(cfg)
    logger.info(f"Starting {cfg.APP_NAME} v{cfg.APP_VERSION}")

    await init_db(cfg.SQLITE_DB_PATH)
    await seed_if_empty(app.state.credentials, cfg)

    logger.info("Startup complete")

    yield

    logger.info("Shutdown complete")


def create_app(cfg: Settings = None) -> FastAPI:
    cfg = cfg or default_settings

    app = FastAPI(
        title=cfg.APP_NAME,
        version=cfg.APP_VERSION,
        description="Hi-Pot / Ground-Bond test log with certificate rendering",
        lifespan=lifespan
    )

    # Store handles, one set per application instance
    credentials = CredentialStore(cfg.SQLITE_DB_PATH)
    audit_store = AuditStore(cfg.SQLITE_DB_PATH)
    auth_gate = AuthGate(
        credentials,
        secret_key=cfg.JWT_SECRET_KEY,
        algorithm=cfg.JWT_ALGORITHM,
        token_ttl=timedelta(minutes=cfg.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    app.state.settings = cfg
    app.state.credentials = credentials
    app.state.audit_store = audit_store
    app.state.auth_gate = auth_gate
    app.state.validator = IngestionValidator(cfg.MAX_SERIAL_ENTRIES)
    app.state.query_service = QueryService(
        auth_gate, audit_store, warn_threshold=cfg.LOG_LIST_WARN_THRESHOLD)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code.value}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Include API routers
    app.include_router(auth.router, prefix="/api", tags=["Auth"])
    app.include_router(logs.router, prefix="/api", tags=["Logs"])
    app.include_router(certificates.router, prefix="/api", tags=["Certificates"])
    app.include_router(debug.router, prefix="/api", tags=["Debug"])

    @app.get("/")
    async def root():
        """Unauthenticated liveness probe"""
        return {
            "status": "ok",
            "message": "Server is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": cfg.APP_VERSION,
            "app": cfg.APP_NAME
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=default_settings.API_HOST,
        port=default_settings.API_PORT,
        reload=default_settings.DEBUG,
        workers=default_settings.API_WORKERS
    )
