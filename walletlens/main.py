from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import ens, health, tools
from .config import settings
from .container import build_services
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings=settings)
    services = build_services(settings)
    app.state.services = services
    try:
        yield
    finally:
        await services.aclose()


# Create FastAPI app
app = FastAPI(
    title="WalletLens API",
    description="OpenSea marketplace tools with ENS identity resolution",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(tools.router, tags=["Tools"])
app.include_router(ens.router, tags=["ENS"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "WalletLens API",
        "version": "0.1.0",
        "description": "OpenSea marketplace tools with ENS identity resolution",
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "walletlens.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
