"""
POS Back-Office FastAPI Application
Entry point for the inventory ledger REST API
"""
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backoffice.api.v1.api_router import api_router
from backoffice.core.config import Settings, get_settings
from backoffice.core.database import Database
from backoffice.core.exceptions import (
    BackofficeException, ImmutableRecordError, StockError, StockInvariantError
)
from backoffice.core.logging import get_logger, setup_logging
from backoffice.schemas.common import ErrorResponse

logger = get_logger("api")


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        settings: Application settings; read from the environment when omitted
        database: Store-of-record handle; built from settings when omitted

    Returns:
        Configured application with the database handle on ``app.state``
    """
    settings = settings or get_settings()
    setup_logging(settings)
    database = database or Database(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
        ## POS Back-Office Inventory API

        Stock adjustments and movements with an append-only audit ledger.

        - **Stock**: increase/decrease product stock under a row lock
        - **Ledger**: per-product stock history, newest first
        - **Transactions**: goods in, and goods out to a destination store
        """,
    )
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        """Verify the database and make sure the tables exist"""
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        if not database.check_connection():
            logger.error("Failed to connect to database on startup")
            raise RuntimeError("Database connection failed")
        database.create_all()
        logger.info("Application startup completed successfully")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down application")
        database.dispose()

    @app.get("/health", tags=["System"])
    async def health_check():
        """
        Health check endpoint for monitoring and load balancers

        Returns system status and database connectivity
        """
        db_status = database.check_connection()
        if not db_status:
            raise HTTPException(status_code=503, detail="Service unavailable")

        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
            "database": "connected",
        }

    @app.exception_handler(StockError)
    async def stock_error_handler(request: Request, exc: StockError):
        """Map typed stock failures to a stable error body"""
        if exc.retryable:
            logger.warning(f"{request.method} {request.url.path} failed, retryable: {exc.message}")
        body = ErrorResponse(error=exc.kind, message=exc.message, retryable=exc.retryable)
        headers = {"Retry-After": "1"} if exc.retryable else None
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=headers)

    @app.exception_handler(ImmutableRecordError)
    @app.exception_handler(StockInvariantError)
    async def invariant_handler(request: Request, exc: BackofficeException):
        """Internal guards that refused to corrupt the ledger"""
        logger.error(f"{request.method} {request.url.path}: {exc}")
        error = "IMMUTABLE_RECORD" if isinstance(exc, ImmutableRecordError) else "INVARIANT_VIOLATION"
        body = ErrorResponse(error=error, message=str(exc))
        return JSONResponse(status_code=500, content=body.model_dump())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        body = ErrorResponse(
            error="INTERNAL_ERROR",
            message=str(exc) if settings.DEBUG else "An unexpected error occurred",
        )
        return JSONResponse(status_code=500, content=body.model_dump())

    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "backoffice.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=_settings.DEBUG,
        log_level=_settings.LOG_LEVEL.lower()
    )
