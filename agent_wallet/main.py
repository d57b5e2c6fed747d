from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api import health, wallet
from .config import settings
from .logging_config import setup_logging
from .services.wallet_agent import close_wallet_agent


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    yield
    await close_wallet_agent()


# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Agent Wallet API",
    description="Multi-chain EVM wallet for autonomous agents",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(wallet.router, tags=["Wallet"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Agent Wallet API",
        "version": "0.1.0",
        "description": "Multi-chain EVM wallet for autonomous agents",
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "agent_wallet.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
