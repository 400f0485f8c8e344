"""Token endpoints — mint info, market pools, holders, whales, safety."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from config.settings import settings
from src.api.dependencies import get_analyzer
from src.parsers.concentration import ConcentrationSummary
from src.parsers.dexscreener.models import MarketPool
from src.parsers.exceptions import TransportError
from src.parsers.token_analyzer import TokenAnalyzer

router = APIRouter(prefix="/api", tags=["tokens"])

MintParam = Annotated[
    str | None,
    Query(max_length=64, description="Mint address (defaults to the configured token)"),
]


class TokenInfoResponse(BaseModel):
    mint: str
    rpcUrl: str
    decimals: int
    supplyRaw: str
    supply: float
    mintAuthority: str | None
    freezeAuthority: str | None
    isInitialized: bool
    program: str


class PoolOut(BaseModel):
    dexId: str
    chainId: str
    pairAddress: str
    liquidityUsd: float | None = None
    volume24hUsd: float | None = None
    priceUsd: float | None = None
    url: str = ""
    baseSymbol: str | None = None
    quoteSymbol: str | None = None
    fdv: float | None = None

    @classmethod
    def from_pool(cls, pool: MarketPool) -> PoolOut:
        return cls(
            dexId=pool.venue_id,
            chainId=pool.chain_id,
            pairAddress=pool.pair_address,
            liquidityUsd=pool.liquidity_usd,
            volume24hUsd=pool.volume_24h_usd,
            priceUsd=pool.price_usd,
            url=pool.url,
            baseSymbol=pool.base_symbol,
            quoteSymbol=pool.quote_symbol,
            fdv=pool.fdv,
        )


class MarketMetricsResponse(BaseModel):
    mint: str
    venue: str
    totalPools: int
    trustedCount: int
    otherDexCount: int
    trusted: list[PoolOut]
    others: list[PoolOut]


class ConcentrationOut(BaseModel):
    top1: float
    top5: float
    top10: float

    @classmethod
    def from_summary(cls, summary: ConcentrationSummary) -> ConcentrationOut:
        return cls(
            top1=round(summary.top1, 4),
            top5=round(summary.top5, 4),
            top10=round(summary.top10, 4),
        )


class HolderOut(BaseModel):
    owner: str
    uiAmount: float
    accounts: int


class HoldersResponse(BaseModel):
    mint: str
    supply: float
    decimals: int
    holderCount: int
    usedFallback: bool
    holders: list[HolderOut]


class ConcentrationResponse(BaseModel):
    mint: str
    supply: float
    holderCount: int
    usedFallback: bool
    concentration: ConcentrationOut


class WhaleOut(BaseModel):
    owner: str
    uiAmount: float
    pct: float


class WhalesResponse(BaseModel):
    mint: str
    minPct: float
    limit: int
    holderCount: int
    usedFallback: bool
    whales: list[WhaleOut]
    concentration: ConcentrationOut
    notes: list[str]


class SafetyResponse(BaseModel):
    mint: str
    immutableMint: bool
    canFreeze: bool
    hasLiquidityPool: bool
    lowLiquidity: bool
    veryLowLiquidity: bool
    riskLevel: str
    reasons: list[str]
    totalLiquidityUsd: float
    poolCount: int
    largestPool: PoolOut | None
    marketDataAvailable: bool


def _mint_or_default(mint: str | None) -> str:
    return (mint or settings.default_mint).strip()


@router.get("/token-info", response_model=TokenInfoResponse)
async def token_info(
    mint: MintParam = None,
    analyzer: TokenAnalyzer = Depends(get_analyzer),
) -> TokenInfoResponse:
    """Parsed mint account: supply, decimals and authorities."""
    info = await analyzer.get_token_info(_mint_or_default(mint))
    return TokenInfoResponse(
        mint=info.address,
        rpcUrl=analyzer.rpc.rpc_url,
        decimals=info.decimals,
        supplyRaw=str(info.supply_raw),
        supply=info.supply,
        mintAuthority=info.mint_authority,
        freezeAuthority=info.freeze_authority,
        isInitialized=info.is_initialized,
        program=info.program,
    )


@router.get("/cbs-metrics", response_model=MarketMetricsResponse)
async def market_metrics(
    mint: MintParam = None,
    analyzer: TokenAnalyzer = Depends(get_analyzer),
) -> MarketMetricsResponse | JSONResponse:
    """DexScreener pools split into the trusted venue and everything else."""
    try:
        metrics = await analyzer.get_market_metrics(_mint_or_default(mint))
    except TransportError as e:
        if e.status_code:
            return JSONResponse(
                status_code=e.status_code,
                content={"error": "DexScreener error", "status": e.status_code, "body": e.body},
            )
        logger.error(f"[API] cbs-metrics error: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch metrics from DexScreener", "message": str(e)},
        )

    return MarketMetricsResponse(
        mint=metrics.mint,
        venue=metrics.venue,
        totalPools=metrics.total_pools,
        trustedCount=len(metrics.trusted),
        otherDexCount=len(metrics.others),
        trusted=[PoolOut.from_pool(p) for p in metrics.trusted],
        others=[PoolOut.from_pool(p) for p in metrics.others],
    )


@router.get("/token-holders", response_model=HoldersResponse)
async def token_holders(
    mint: MintParam = None,
    limit: int = Query(100, ge=1, le=1000),
    analyzer: TokenAnalyzer = Depends(get_analyzer),
) -> HoldersResponse:
    """Holders grouped by owner wallet, largest first."""
    report = await analyzer.get_holders(_mint_or_default(mint), limit=limit)
    return HoldersResponse(
        mint=report.mint,
        supply=report.supply,
        decimals=report.decimals,
        holderCount=report.holder_count,
        usedFallback=report.used_fallback,
        holders=[
            HolderOut(owner=h.owner, uiAmount=h.ui_amount, accounts=h.account_count)
            for h in report.holders
        ],
    )


@router.get("/token-concentration", response_model=ConcentrationResponse)
async def token_concentration(
    mint: MintParam = None,
    analyzer: TokenAnalyzer = Depends(get_analyzer),
) -> ConcentrationResponse:
    report = await analyzer.get_concentration(_mint_or_default(mint))
    return ConcentrationResponse(
        mint=report.mint,
        supply=report.supply,
        holderCount=report.holder_count,
        usedFallback=report.used_fallback,
        concentration=ConcentrationOut.from_summary(report.concentration),
    )


@router.get("/whales", response_model=WhalesResponse)
async def whales(
    mint: MintParam = None,
    min_pct: float = Query(1.0, ge=0, le=100),
    limit: int = Query(20, ge=1, le=200),
    analyzer: TokenAnalyzer = Depends(get_analyzer),
) -> WhalesResponse:
    """Holders owning at least ``min_pct`` percent of supply."""
    mint_address = _mint_or_default(mint)
    report = await analyzer.get_whales(mint_address, min_pct=min_pct, limit=limit)
    return WhalesResponse(
        mint=mint_address,
        minPct=report.min_pct,
        limit=report.limit,
        holderCount=report.holder_count,
        usedFallback=report.used_fallback,
        whales=[
            WhaleOut(owner=w.owner, uiAmount=w.ui_amount, pct=round(w.pct, 4))
            for w in report.whales
        ],
        concentration=ConcentrationOut.from_summary(report.concentration),
        notes=report.notes,
    )


@router.get("/token-safety", response_model=SafetyResponse)
async def token_safety(
    mint: MintParam = None,
    analyzer: TokenAnalyzer = Depends(get_analyzer),
) -> SafetyResponse:
    """Authority flags and trusted-venue liquidity folded into a risk level."""
    mint_address = _mint_or_default(mint)
    assessment = await analyzer.get_safety(mint_address)
    largest = assessment.largest_pool
    return SafetyResponse(
        mint=mint_address,
        immutableMint=assessment.immutable_mint,
        canFreeze=assessment.can_freeze,
        hasLiquidityPool=assessment.has_liquidity_pool,
        lowLiquidity=assessment.low_liquidity,
        veryLowLiquidity=assessment.very_low_liquidity,
        riskLevel=assessment.risk_level.value,
        reasons=assessment.reasons,
        totalLiquidityUsd=assessment.total_liquidity_usd,
        poolCount=assessment.pool_count,
        largestPool=PoolOut.from_pool(largest) if largest else None,
        marketDataAvailable=assessment.market_data_available,
    )
