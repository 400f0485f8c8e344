import asyncio

import httpx
from loguru import logger
from pydantic import ValidationError

from src.parsers.dexscreener.models import DexScreenerPair, MarketPool
from src.parsers.exceptions import TransportError
from src.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.dexscreener.com"
MAX_RETRIES = 3
RETRY_DELAYS = [1.0, 2.0, 4.0]


class DexScreenerClient:
    """Async REST client for DexScreener public API (no auth required)."""

    def __init__(
        self,
        rate_limiter: RateLimiter | None = None,
        max_rps: float = 1.0,
        timeout: float = 10.0,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )
        self._rate_limiter = rate_limiter or RateLimiter(max_rps)

    async def _request_with_retry(self, path: str) -> httpx.Response:
        """GET with retry on 429/timeout; any final failure is a TransportError."""
        for attempt in range(MAX_RETRIES):
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            await self._rate_limiter.acquire()
            try:
                response = await self._client.get(path)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES - 1:
                    logger.debug(f"[DEXSCREENER] {type(e).__name__}, retrying in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise TransportError(f"DexScreener request failed: {type(e).__name__}") from e
            except httpx.HTTPError as e:
                raise TransportError(f"DexScreener request failed: {e}") from e

            if response.status_code == 429 and attempt < MAX_RETRIES - 1:
                retry_after = response.headers.get("Retry-After")
                if retry_after:
                    try:
                        delay = max(float(retry_after), delay)
                    except ValueError:
                        pass
                logger.debug(f"[DEXSCREENER] 429 rate limited, retrying in {delay}s")
                await asyncio.sleep(delay)
                continue

            if response.status_code != 200:
                raise TransportError(
                    "DexScreener error",
                    status_code=response.status_code,
                    body=response.text,
                )
            return response

        raise TransportError("DexScreener error: retries exhausted", status_code=429)

    async def get_token_pairs(self, token_address: str) -> list[DexScreenerPair]:
        """All pairs DexScreener lists for a token, across venues."""
        response = await self._request_with_retry(f"/latest/dex/tokens/{token_address}")
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError("DexScreener returned invalid JSON") from e
        if isinstance(data, list):
            pairs = data
        elif isinstance(data, dict):
            pairs = data.get("pairs") or []
        else:
            raise TransportError("DexScreener returned unexpected payload")
        if not isinstance(pairs, list):
            pairs = [pairs]
        try:
            return [DexScreenerPair.model_validate(p) for p in pairs]
        except ValidationError as e:
            raise TransportError(f"Malformed DexScreener pair: {e.error_count()} errors") from e

    async def get_token_pools(self, token_address: str) -> list[MarketPool]:
        return [pair.to_pool() for pair in await self.get_token_pairs(token_address)]

    async def close(self) -> None:
        await self._client.aclose()
