"""Liveness endpoints — no upstream calls."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from src.api.dependencies import get_analyzer
from src.parsers.token_analyzer import TokenAnalyzer

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    rpc_url: str
    trusted_venue: str


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Solana Tools API server is running"


@router.get("/api/v1/health", response_model=HealthResponse)
async def health_check(analyzer: TokenAnalyzer = Depends(get_analyzer)) -> HealthResponse:
    from src.api.app import VERSION

    return HealthResponse(
        status="ok",
        version=VERSION,
        rpc_url=analyzer.rpc.rpc_url,
        trusted_venue=analyzer.trusted_venue,
    )
