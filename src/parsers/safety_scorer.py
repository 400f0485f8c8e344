"""Token safety scoring — mint/freeze authorities plus trusted-venue liquidity.

Risk is decided by an ordered rule table: the first matching rule wins, so
a token with an active mint authority is ``high`` no matter how deep its
pools are.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from loguru import logger

from src.parsers.dexscreener.models import MarketPool
from src.parsers.solana_rpc.models import MintMetadata

VERY_LOW_LIQUIDITY_USD = 200.0
LOW_LIQUIDITY_USD = 1000.0


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class LiquidityStats:
    pool_count: int = 0
    total_liquidity_usd: float = 0.0
    largest_pool: MarketPool | None = None

    @property
    def has_pool(self) -> bool:
        return self.pool_count > 0

    @property
    def very_low(self) -> bool:
        return self.total_liquidity_usd < VERY_LOW_LIQUIDITY_USD

    @property
    def low(self) -> bool:
        return self.total_liquidity_usd < LOW_LIQUIDITY_USD


@dataclass(frozen=True)
class SafetyAssessment:
    immutable_mint: bool
    can_freeze: bool
    has_liquidity_pool: bool
    low_liquidity: bool
    very_low_liquidity: bool
    risk_level: RiskLevel
    reasons: list[str] = field(default_factory=list)
    total_liquidity_usd: float = 0.0
    pool_count: int = 0
    largest_pool: MarketPool | None = None
    market_data_available: bool = True


# (mint, liquidity) -> bool
RulePredicate = Callable[[MintMetadata, LiquidityStats], bool]

RISK_RULES: tuple[tuple[RulePredicate, RiskLevel], ...] = (
    (lambda mint, liq: not liq.has_pool, RiskLevel.HIGH),
    (lambda mint, liq: liq.very_low, RiskLevel.HIGH),
    (lambda mint, liq: not mint.immutable_mint, RiskLevel.HIGH),
    (lambda mint, liq: liq.low, RiskLevel.MEDIUM),
    (lambda mint, liq: mint.can_freeze, RiskLevel.MEDIUM),
)
DEFAULT_RISK = RiskLevel.LOW


def summarize_liquidity(pools: Sequence[MarketPool]) -> LiquidityStats:
    """Total USD liquidity and the deepest pool (first wins ties)."""
    total = 0.0
    largest: MarketPool | None = None
    for pool in pools:
        liquidity = pool.liquidity_usd or 0.0
        total += liquidity
        if largest is None or liquidity > (largest.liquidity_usd or 0.0):
            largest = pool
    return LiquidityStats(
        pool_count=len(pools), total_liquidity_usd=total, largest_pool=largest
    )


def classify_risk(mint: MintMetadata, liquidity: LiquidityStats) -> RiskLevel:
    for predicate, level in RISK_RULES:
        if predicate(mint, liquidity):
            return level
    return DEFAULT_RISK


def score_safety(
    mint: MintMetadata,
    pools: Sequence[MarketPool],
    *,
    venue: str = "Raydium",
    market_data_available: bool = True,
) -> SafetyAssessment:
    """Assess ``mint`` against already-filtered trusted-venue ``pools``.

    Pass an empty ``pools`` with ``market_data_available=False`` when the
    market lookup failed: unverifiable liquidity scores as "no pool".
    """
    liquidity = summarize_liquidity(pools)
    risk = classify_risk(mint, liquidity)

    reasons = [
        _mint_authority_reason(mint),
        _freeze_authority_reason(mint),
        _liquidity_reason(liquidity, venue, market_data_available),
    ]

    logger.debug(
        f"[SAFETY] {mint.address[:12]}: risk={risk.value} "
        f"pools={liquidity.pool_count} liq=${liquidity.total_liquidity_usd:,.0f}"
    )

    return SafetyAssessment(
        immutable_mint=mint.immutable_mint,
        can_freeze=mint.can_freeze,
        has_liquidity_pool=liquidity.has_pool,
        low_liquidity=liquidity.low,
        very_low_liquidity=liquidity.very_low,
        risk_level=risk,
        reasons=reasons,
        total_liquidity_usd=liquidity.total_liquidity_usd,
        pool_count=liquidity.pool_count,
        largest_pool=liquidity.largest_pool,
        market_data_available=market_data_available,
    )


def _mint_authority_reason(mint: MintMetadata) -> str:
    if mint.immutable_mint:
        return "Mint authority is disabled: supply is fixed"
    return f"Mint authority is active ({mint.mint_authority}): new supply can be minted"


def _freeze_authority_reason(mint: MintMetadata) -> str:
    if mint.can_freeze:
        return f"Freeze authority is set ({mint.freeze_authority}): holder accounts can be frozen"
    return "Freeze authority is disabled: holder accounts cannot be frozen"


def _liquidity_reason(liquidity: LiquidityStats, venue: str, market_data_available: bool) -> str:
    if not liquidity.has_pool:
        if not market_data_available:
            return f"Market data unavailable: {venue} liquidity could not be verified"
        return f"No {venue} liquidity pool found"

    noun = "pool" if liquidity.pool_count == 1 else "pools"
    text = (
        f"{liquidity.pool_count} {venue} {noun} with "
        f"${liquidity.total_liquidity_usd:,.2f} total liquidity"
    )
    if liquidity.very_low:
        text += f" (very low, under ${VERY_LOW_LIQUIDITY_USD:,.0f})"
    elif liquidity.low:
        text += f" (low, under ${LOW_LIQUIDITY_USD:,.0f})"
    return text
