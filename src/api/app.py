"""FastAPI application factory for the token holder API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.middleware.cors import CORSMiddleware

from config.settings import settings
from src.api.errors import register_exception_handlers
from src.parsers.dexscreener.client import DexScreenerClient
from src.parsers.solana_rpc.client import SolanaRpcClient
from src.parsers.token_analyzer import TokenAnalyzer

VERSION = "0.2.0"

# Rate limiter (shared instance)
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.api_rate_limit])


def build_analyzer() -> TokenAnalyzer:
    rpc = SolanaRpcClient(
        settings.rpc_url,
        max_rps=settings.rpc_max_rps,
        timeout=settings.rpc_timeout_sec,
    )
    dexscreener = DexScreenerClient(
        max_rps=settings.dexscreener_max_rps,
        timeout=settings.dexscreener_timeout_sec,
    )
    return TokenAnalyzer(
        rpc,
        dexscreener,
        trusted_venue=settings.trusted_venue,
        largest_accounts_limit=settings.largest_accounts_limit,
        owner_lookup_concurrency=settings.owner_lookup_concurrency,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Tests may pre-seed a fake analyzer
    owned = getattr(app.state, "analyzer", None) is None
    if owned:
        app.state.analyzer = build_analyzer()
    logger.info(f"RPC_URL = {settings.rpc_url}")
    try:
        yield
    finally:
        if owned:
            await app.state.analyzer.close()


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Token Holder Radar API",
        version=VERSION,
        lifespan=lifespan,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_middleware(SlowAPIMiddleware)

    # Public read-only API: any origin may call it
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    from src.api.routers.health import router as health_router
    from src.api.routers.tokens import router as tokens_router
    from src.api.routers.wallets import router as wallets_router

    app.include_router(health_router)
    app.include_router(wallets_router)
    app.include_router(tokens_router)

    return app
