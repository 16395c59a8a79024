from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health, swap, tokens, wallets
from .api.errors import register_error_handlers
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .providers.rpc import close_rpc_clients


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    yield
    await close_rpc_clients()


# Create FastAPI app
app = FastAPI(
    title="Tradebot API",
    description="Testnet token swaps, transfers and wallet custody",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_error_handlers(app)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(wallets.router)
app.include_router(tokens.router)
app.include_router(swap.router, tags=["Swap"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Tradebot API",
        "version": "0.1.0",
        "default_network": settings.default_network,
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "tradebot.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
