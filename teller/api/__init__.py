"""
Teller API Application Factory
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import TellerConfig, get_config
from ..errors import LedgerError, StorageError
from ..logging_config import get_logger, log_action
from ..system import BankingSystem
from .schemas import error_envelope
from .customers import router as customers_router
from .accounts import router as accounts_router
from .transactions import router as transactions_router
from .demo import router as demo_router
from .request_log import RequestLog, RequestLogMiddleware, router as request_log_router


logger = get_logger("teller.api")


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "Invalid request: " + "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """Map ledger and infrastructure failures onto the JSON envelope"""

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        log_action(
            logger, "warning", str(exc),
            action="reject_request", resource=f"{request.method} {request.url.path}",
            extra={"error": type(exc).__name__}
        )
        return JSONResponse(status_code=exc.http_status, content=error_envelope(str(exc)))

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content=error_envelope(str(exc)))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=error_envelope(_describe_validation_error(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content=error_envelope(str(exc.detail)))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=error_envelope("Internal server error"))


def create_app(
    system: Optional[BankingSystem] = None,
    config: Optional[TellerConfig] = None
) -> FastAPI:
    """Create and configure the FastAPI application"""
    config = config or (system.config if system else get_config())

    app = FastAPI(
        title="Teller Banking API",
        description="Customers, accounts and money movement over JSON documents",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.banking_system = system or BankingSystem(config=config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.request_log_enabled:
        app.state.request_log = RequestLog(config.request_log_size)
        app.add_middleware(RequestLogMiddleware, request_log=app.state.request_log)
        app.include_router(request_log_router, prefix=config.api_prefix, tags=["Debug"])

    register_exception_handlers(app)

    prefix = config.api_prefix
    app.include_router(customers_router, prefix=f"{prefix}/customers", tags=["Customers"])
    app.include_router(accounts_router, prefix=f"{prefix}/accounts", tags=["Accounts"])
    app.include_router(transactions_router, prefix=prefix, tags=["Transactions"])
    app.include_router(demo_router, prefix=prefix, tags=["Demo"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "teller_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Teller Banking API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "customers": f"{prefix}/customers",
                "accounts": f"{prefix}/accounts",
                "transactions": f"{prefix}/transactions",
                "transfer": f"{prefix}/transfer",
                "demo": f"{prefix}/demo/load",
                "dashboard": f"{prefix}/dashboard/overview",
            }
        }

    return app
