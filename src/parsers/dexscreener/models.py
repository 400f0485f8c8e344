from dataclasses import dataclass
from decimal import Decimal

from pydantic import BaseModel


class DexScreenerToken(BaseModel):
    address: str = ""
    name: str | None = None
    symbol: str | None = None

    model_config = {"extra": "ignore"}


class DexScreenerVolume(BaseModel):
    m5: Decimal | None = None
    h1: Decimal | None = None
    h6: Decimal | None = None
    h24: Decimal | None = None

    model_config = {"extra": "ignore"}


class DexScreenerLiquidity(BaseModel):
    usd: Decimal | None = None
    base: Decimal | None = None
    quote: Decimal | None = None

    model_config = {"extra": "ignore"}


class DexScreenerPair(BaseModel):
    chainId: str = ""
    dexId: str = ""
    pairAddress: str = ""
    url: str = ""
    baseToken: DexScreenerToken | None = None
    quoteToken: DexScreenerToken | None = None
    priceUsd: str | None = None
    volume: DexScreenerVolume | None = None
    liquidity: DexScreenerLiquidity | None = None
    fdv: Decimal | None = None
    pairCreatedAt: int | None = None

    model_config = {"extra": "ignore"}

    def to_pool(self) -> "MarketPool":
        return MarketPool(
            venue_id=self.dexId,
            chain_id=self.chainId,
            pair_address=self.pairAddress,
            liquidity_usd=_as_float(self.liquidity.usd if self.liquidity else None),
            volume_24h_usd=_as_float(self.volume.h24 if self.volume else None),
            price_usd=_as_float(self.priceUsd),
            url=self.url,
            base_symbol=self.baseToken.symbol if self.baseToken else None,
            quote_symbol=self.quoteToken.symbol if self.quoteToken else None,
            fdv=_as_float(self.fdv),
        )


@dataclass(frozen=True)
class MarketPool:
    """Trading venue pool for a token, normalized from a DexScreener pair."""

    venue_id: str
    chain_id: str
    pair_address: str
    liquidity_usd: float | None = None
    volume_24h_usd: float | None = None
    price_usd: float | None = None
    url: str = ""
    base_symbol: str | None = None
    quote_symbol: str | None = None
    fdv: float | None = None


def _as_float(value: Decimal | str | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
