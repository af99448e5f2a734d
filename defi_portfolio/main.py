import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import balances, health
from .config import settings
from .errors import PortfolioError
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

setup_logging(settings)
logger = structlog.stdlib.get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="DeFi Portfolio Tracker API",
    description="Token holdings and USD values for a connected wallet",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PortfolioError)
async def portfolio_error_handler(request: Request, exc: PortfolioError) -> JSONResponse:
    logger.warning(
        "portfolio_request_failed",
        category=exc.category.value,
        error=exc.message,
        **exc.details,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(balances.router, tags=["Balances"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "DeFi Portfolio Tracker API",
        "version": "0.1.0",
        "description": "Token holdings and USD values for a connected wallet",
        "docs": "/docs",
        "balances": "/balances?address=<hex>&chain=<name>",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "defi_portfolio.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
