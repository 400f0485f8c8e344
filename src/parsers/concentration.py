"""Top-holder concentration — share of supply held by the largest holders."""

from collections.abc import Sequence
from dataclasses import dataclass

from src.parsers.amounts import supply_share_pct
from src.parsers.holder_aggregator import HolderAggregate

TOP_K = (1, 5, 10)


@dataclass(frozen=True)
class ConcentrationSummary:
    top1: float = 0.0
    top5: float = 0.0
    top10: float = 0.0


def compute_concentration(
    holders: Sequence[HolderAggregate], supply: float
) -> ConcentrationSummary:
    """Percent of ``supply`` held by the top 1, 5 and 10 holders.

    ``holders`` must already be sorted descending. Supply <= 0 yields zeros.
    Values are capped at 100: holders and supply come from separate RPC
    reads and can disagree slightly.
    """
    if supply <= 0:
        return ConcentrationSummary()

    shares = []
    for k in TOP_K:
        held = sum(h.ui_amount for h in holders[:k])
        shares.append(min(supply_share_pct(held, supply), 100.0))

    top1, top5, top10 = shares
    return ConcentrationSummary(top1=top1, top5=top5, top10=top10)
