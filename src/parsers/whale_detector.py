"""Whale detection — holders owning at least ``min_pct`` of supply."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from loguru import logger

from src.parsers.amounts import supply_share_pct
from src.parsers.concentration import ConcentrationSummary, compute_concentration
from src.parsers.holder_aggregator import HolderAggregate

DEFAULT_MIN_PCT = 1.0
DEFAULT_LIMIT = 20


@dataclass(frozen=True)
class Whale:
    owner: str
    ui_amount: float
    pct: float


@dataclass(frozen=True)
class WhaleReport:
    whales: list[Whale]
    concentration: ConcentrationSummary
    min_pct: float = DEFAULT_MIN_PCT
    limit: int = DEFAULT_LIMIT
    holder_count: int = 0
    used_fallback: bool = False  # True = computed from largest accounts only
    notes: list[str] = field(default_factory=list)


def _meets_threshold(
    holder: HolderAggregate,
    supply: float,
    supply_raw: int | None,
    min_pct: float,
) -> bool:
    """``share >= min_pct`` without float rounding at the boundary."""
    threshold = Decimal(str(min_pct))
    if supply_raw is not None:
        return Decimal(holder.amount_raw) * 100 >= threshold * supply_raw
    return Decimal(str(holder.ui_amount)) * 100 >= threshold * Decimal(str(supply))


def detect_whales(
    holders: Sequence[HolderAggregate],
    supply: float,
    *,
    supply_raw: int | None = None,
    min_pct: float = DEFAULT_MIN_PCT,
    limit: int = DEFAULT_LIMIT,
    used_fallback: bool = False,
) -> WhaleReport:
    """Filter ``holders`` to whales; concentration comes from the same list.

    With ``supply_raw`` the threshold is checked on raw integer amounts
    (holders and supply in the mint's base units); ``pct`` stays a float
    for display only.
    """
    whales: list[Whale] = []
    if supply > 0:
        for holder in holders:
            if _meets_threshold(holder, supply, supply_raw, min_pct):
                pct = supply_share_pct(holder.ui_amount, supply)
                whales.append(Whale(owner=holder.owner, ui_amount=holder.ui_amount, pct=pct))
        whales.sort(key=lambda w: w.ui_amount, reverse=True)
        whales = whales[: max(limit, 0)]

    notes = []
    if used_fallback:
        notes.append(
            "Holder scan was rejected upstream; percentages cover the largest accounts only"
        )
    if supply <= 0:
        notes.append("Supply is zero; no holder can reach a supply share")

    if whales:
        logger.debug(
            f"[WHALES] {len(whales)} holders >= {min_pct}% (largest {whales[0].pct:.2f}%)"
        )

    return WhaleReport(
        whales=whales,
        concentration=compute_concentration(holders, supply),
        min_pct=min_pct,
        limit=limit,
        holder_count=len(holders),
        used_fallback=used_fallback,
        notes=notes,
    )
