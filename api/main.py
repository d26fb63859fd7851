from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import uvicorn

# Logtail direct integration
from logtail import LogtailHandler

from src.settings import Settings
from src.errors import DrivBotsError
from src.middlewares.transform_response import TransformResponseMiddleware
from src.middlewares.api_key_middleware import APIKeyMiddleware
from src.middlewares.logging_middleware import LoggingMiddleware, get_request_id
from src.three_commas import ThreeCommasClient
from src.exchange import CredentialCipher, ExchangeCredentialValidator
from src.bots.service import BotService
from src.accounts.service import AccountService
from src.bots.api import router as bots_router
from src.accounts.api import router as accounts_router
from src.api import router as base_router
from database import build_engine, build_session_factory, create_tables

CONSOLE_FORMAT = '%(asctime)s - API - %(levelname)s - %(message)s'


def setup_api_logging(settings: Settings) -> logging.Logger:
    """Console logging always, plus logtail when a source token and host are configured"""
    logger = logging.getLogger("api")
    logger.handlers = []  # Clear existing handlers
    logger.propagate = False

    if settings.logtail_source_token and settings.logtail_host:
        logger.setLevel(logging.DEBUG)
        logger.addHandler(LogtailHandler(source_token=settings.logtail_source_token, host=settings.logtail_host))
    else:
        logger.setLevel(logging.INFO)

    # Also add console handler for local development
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if settings.logtail_source_token and settings.logtail_host:
        logger.info("✅ Logtail handler added successfully!")
    else:
        logger.info("❌ Missing logtail config - logging to console only")
    return logger


def create_app(
    settings: Settings,
    remote_client=None,
    credential_validator: Optional[ExchangeCredentialValidator] = None,
    engine=None,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the application. Collaborators can be swapped for tests."""
    api_logger = setup_api_logging(settings) if configure_logging else logging.getLogger("api")

    engine = engine or build_engine(settings.async_database_url)
    remote_client = remote_client or ThreeCommasClient(settings)
    credential_validator = credential_validator or ExchangeCredentialValidator(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await create_tables(engine)
        api_logger.info(f"🚀 DrivBots API started ({settings.environment})")
        yield
        await engine.dispose()
        api_logger.info("Database connections closed")

    app = FastAPI(
        title="DrivBots API",
        description="Bot lifecycle management on top of 3Commas",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        swagger_ui_parameters={
            "persistAuthorization": True,  # Keep authorization between page refreshes
            "displayRequestDuration": True,  # Show request timing
        }
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.bot_service = BotService(remote_client, settings)
    app.state.account_service = AccountService(
        remote_client, credential_validator, CredentialCipher(settings.encryption_key)
    )

    # Add CORS middleware for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(APIKeyMiddleware, api_key=settings.api_secret_key)
    app.add_middleware(TransformResponseMiddleware)
    app.add_middleware(LoggingMiddleware)

    @app.exception_handler(DrivBotsError)
    async def service_exception_handler(request: Request, exc: DrivBotsError):
        log = api_logger.error if exc.status_code >= 500 else api_logger.warning
        log(f"[{get_request_id(request)}] {type(exc).__name__}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "statusCode": exc.status_code,
                "message": exc.message,
                "error": exc.details,
            }
        )

    # Custom validation error handler for debugging
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Custom handler for validation errors to provide better debugging info"""
        api_logger.error("🚨 VALIDATION ERROR DETAILS:")
        api_logger.error(f"   URL: {request.url}")
        api_logger.error(f"   Method: {request.method}")

        errors = []
        for error in exc.errors():
            api_logger.error(f"   Field: {' -> '.join(str(loc) for loc in error['loc'])}")
            api_logger.error(f"   Error: {error['msg']}")
            errors.append({"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]})

        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "statusCode": 422,
                "message": "Validation Error",
                "error": {"detail": errors},
            }
        )

    # Include API routers
    app.include_router(base_router, prefix="/api/v1")
    app.include_router(bots_router, prefix="/api/v1")
    app.include_router(accounts_router, prefix="/api/v1")

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "DrivBots API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/api/v1/health"
        }

    return app


def create_app_from_env() -> FastAPI:
    return create_app(Settings.from_env())


if __name__ == "__main__":
    uvicorn.run(
        "main:create_app_from_env",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True
    )
