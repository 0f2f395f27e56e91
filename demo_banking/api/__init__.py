"""
Demo Banking API Application Factory
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .accounts import router as accounts_router
from .transactions import router as transactions_router
from .admin import router as admin_router
from ..system import BankingSystem
from ..config import get_config
from ..exceptions import BankingError, StorageError
from ..logging_config import setup_logging, get_logger
from .. import __version__


logger = get_logger("demo_banking.api")


def create_app(system: Optional[BankingSystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    config = system.config if system else get_config()
    setup_logging(config.log_level, config.log_format, config.log_file)

    app = FastAPI(
        title="Demo Banking API",
        description="Accounts, deposits, withdrawals, transfers and an admin console",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.banking_system = system or BankingSystem(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"Storage failure on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Server error"})

    @app.exception_handler(BankingError)
    async def banking_error_handler(request: Request, exc: BankingError):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(part) for part in err["loc"][1:]) for err in exc.errors()]
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid or missing fields", "fields": fields}
        )

    app.include_router(accounts_router, prefix="/api", tags=["Accounts"])
    app.include_router(transactions_router, prefix="/api", tags=["Transactions"])
    app.include_router(admin_router, prefix="/api/admin", tags=["Admin"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "demo_banking_api",
            "version": __version__
        }

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the API with uvicorn"""
    import uvicorn

    config = get_config()
    uvicorn.run(create_app(), host=host or config.api_host, port=port or config.api_port)
