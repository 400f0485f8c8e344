"""Per-request token analysis — wires RPC and DexScreener into the analyzers.

Every call validates its identifiers before touching an upstream and
recomputes from a fresh snapshot; nothing is cached between requests.
"""

from dataclasses import dataclass, field

from loguru import logger

from src.parsers.concentration import ConcentrationSummary, compute_concentration
from src.parsers.dexscreener.client import DexScreenerClient
from src.parsers.dexscreener.models import MarketPool
from src.parsers.exceptions import TransportError
from src.parsers.holder_aggregator import HolderAggregate, HolderAggregation, aggregate_holders
from src.parsers.safety_scorer import SafetyAssessment, score_safety
from src.parsers.solana_rpc.client import SolanaRpcClient
from src.parsers.solana_rpc.models import MintMetadata, WalletBalance
from src.parsers.validation import validate_pubkey
from src.parsers.whale_detector import DEFAULT_LIMIT, DEFAULT_MIN_PCT, WhaleReport, detect_whales


@dataclass(frozen=True)
class MarketMetrics:
    mint: str
    venue: str
    trusted: list[MarketPool] = field(default_factory=list)
    others: list[MarketPool] = field(default_factory=list)

    @property
    def total_pools(self) -> int:
        return len(self.trusted) + len(self.others)


@dataclass(frozen=True)
class HolderReport:
    mint: str
    supply: float
    decimals: int
    holder_count: int
    holders: list[HolderAggregate]
    used_fallback: bool


@dataclass(frozen=True)
class ConcentrationReport:
    mint: str
    supply: float
    holder_count: int
    concentration: ConcentrationSummary
    used_fallback: bool


def is_trusted_venue(pool: MarketPool, venue: str) -> bool:
    return venue.lower() in (pool.venue_id or "").lower()


def split_pools(pools: list[MarketPool], venue: str) -> tuple[list[MarketPool], list[MarketPool]]:
    trusted = [p for p in pools if is_trusted_venue(p, venue)]
    others = [p for p in pools if not is_trusted_venue(p, venue)]
    return trusted, others


class TokenAnalyzer:
    """Entry point for all token questions; one instance per process."""

    def __init__(
        self,
        rpc: SolanaRpcClient,
        dexscreener: DexScreenerClient,
        *,
        trusted_venue: str = "raydium",
        largest_accounts_limit: int = 20,
        owner_lookup_concurrency: int = 10,
    ) -> None:
        self.rpc = rpc
        self.dexscreener = dexscreener
        self.trusted_venue = trusted_venue
        self._largest_accounts_limit = largest_accounts_limit
        self._owner_lookup_concurrency = owner_lookup_concurrency

    async def close(self) -> None:
        await self.rpc.close()
        await self.dexscreener.close()

    async def get_wallet_info(self, address: str) -> WalletBalance:
        address = validate_pubkey(address, "address")
        return await self.rpc.get_balance(address)

    async def get_token_info(self, mint: str) -> MintMetadata:
        mint = validate_pubkey(mint, "mint address")
        return await self.rpc.get_mint_metadata(mint)

    async def get_market_metrics(self, mint: str) -> MarketMetrics:
        """All DexScreener pools, split into trusted venue and the rest.

        Unlike safety scoring, a DexScreener failure is raised here.
        """
        mint = validate_pubkey(mint, "mint address")
        pools = await self.dexscreener.get_token_pools(mint)
        trusted, others = split_pools(pools, self.trusted_venue)
        return MarketMetrics(mint=mint, venue=self.trusted_venue, trusted=trusted, others=others)

    async def aggregate(self, mint: str) -> tuple[MintMetadata, HolderAggregation]:
        mint = validate_pubkey(mint, "mint address")
        info = await self.rpc.get_mint_metadata(mint)
        aggregation = await aggregate_holders(
            self.rpc,
            mint,
            token_2022=info.program == "spl-token-2022",
            fallback_limit=self._largest_accounts_limit,
            owner_lookup_concurrency=self._owner_lookup_concurrency,
        )
        return info, aggregation

    async def get_holders(self, mint: str, *, limit: int | None = None) -> HolderReport:
        info, aggregation = await self.aggregate(mint)
        holders = aggregation.holders if limit is None else aggregation.holders[:limit]
        return HolderReport(
            mint=info.address,
            supply=info.supply,
            decimals=info.decimals,
            holder_count=aggregation.holder_count,
            holders=holders,
            used_fallback=aggregation.used_fallback,
        )

    async def get_concentration(self, mint: str) -> ConcentrationReport:
        info, aggregation = await self.aggregate(mint)
        return ConcentrationReport(
            mint=info.address,
            supply=info.supply,
            holder_count=aggregation.holder_count,
            concentration=compute_concentration(aggregation.holders, info.supply),
            used_fallback=aggregation.used_fallback,
        )

    async def get_whales(
        self,
        mint: str,
        *,
        min_pct: float = DEFAULT_MIN_PCT,
        limit: int = DEFAULT_LIMIT,
    ) -> WhaleReport:
        info, aggregation = await self.aggregate(mint)
        return detect_whales(
            aggregation.holders,
            info.supply,
            supply_raw=info.supply_raw,
            min_pct=min_pct,
            limit=limit,
            used_fallback=aggregation.used_fallback,
        )

    async def get_safety(self, mint: str) -> SafetyAssessment:
        """Mint metadata failure propagates; market data failure degrades."""
        mint = validate_pubkey(mint, "mint address")
        info = await self.rpc.get_mint_metadata(mint)

        market_data_available = True
        try:
            pools = await self.dexscreener.get_token_pools(mint)
        except TransportError as e:
            logger.warning(f"[SAFETY] market data unavailable for {mint[:12]}: {e}")
            pools = []
            market_data_available = False

        trusted, _ = split_pools(pools, self.trusted_venue)
        return score_safety(
            info,
            trusted,
            venue=self.trusted_venue.capitalize(),
            market_data_available=market_data_available,
        )
