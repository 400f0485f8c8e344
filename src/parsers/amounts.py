"""Raw integer amount helpers.

Ledger amounts arrive as decimal strings of base units. Everything that
sums or compares amounts stays in ``Decimal``; ``float`` only at the edges
for display and percentages.
"""

from decimal import Decimal

LAMPORTS_PER_SOL = 1_000_000_000


def parse_raw_amount(value: str | int | None) -> int:
    """Parse an unsigned base-unit amount (RPC returns it as text)."""
    if value is None or value == "":
        return 0
    amount = int(value)
    if amount < 0:
        raise ValueError(f"negative raw amount: {value}")
    return amount


def to_ui_amount(amount_raw: int, decimals: int) -> Decimal:
    """Exact ``amount_raw / 10**decimals``."""
    return Decimal(amount_raw).scaleb(-decimals)


def supply_share_pct(amount: float, supply: float) -> float:
    """Percentage of supply; 0 when supply is not strictly positive."""
    if supply <= 0:
        return 0.0
    return amount * 100 / supply
