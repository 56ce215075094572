"""
Card Management API Application Factory
"""

from typing import Optional
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import CardSystem
from .session import router as session_router
from .credit import router as credit_router
from .debit import router as debit_router
from .virtual import router as virtual_router
from .settings import router as settings_router
from .limits import router as limits_router
from ..errors import CardManagementError
from ..config import CardAppConfig, get_config
from ..logging_config import setup_logging, get_logger, log_action
from .. import __version__


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def create_app(system: Optional[CardSystem] = None, config: Optional[CardAppConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    config = config or get_config()
    setup_logging(level=config.log_level, log_format=config.log_format)
    logger = get_logger()

    app = FastAPI(
        title="Card Management API",
        description="Credit, debit and virtual card management for a mobile banking app",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.card_system = system or CardSystem(config=config)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(CardManagementError)
    async def card_management_error_handler(request: Request, exc: CardManagementError):
        if exc.status_code >= 500:
            log_action(
                logger, "error", exc.message,
                action="request_failed", resource=request.url.path
            )
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error_response(400, "Invalid request body")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    # Include routers
    app.include_router(session_router, prefix="/auth", tags=["Auth"])
    app.include_router(credit_router, prefix="/api/cards/credit", tags=["Credit Cards"])
    app.include_router(debit_router, prefix="/api/cards/debit", tags=["Debit Cards"])
    app.include_router(virtual_router, prefix="/api/cards/virtual", tags=["Virtual Cards"])
    app.include_router(settings_router, prefix="/api/cards/settings", tags=["Card Settings"])
    app.include_router(limits_router, prefix="/api/cards/{card_id}/limits", tags=["Card Limits"])

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "card_management_api",
            "version": __version__
        }

    # Root endpoint
    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Card Management API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "login": "/auth/login",
                "credit": "/api/cards/credit",
                "debit": "/api/cards/debit",
                "virtual": "/api/cards/virtual",
                "settings": "/api/cards/settings",
                "limits": "/api/cards/{cardId}/limits",
            }
        }

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    uvicorn.run(
        "card_management.api_modular:create_app",
        factory=True,
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )
