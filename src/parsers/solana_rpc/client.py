"""Solana JSON-RPC client — mint metadata, token account scans, balances."""

import asyncio
from typing import Any

import httpx
from loguru import logger

from src.parsers.amounts import parse_raw_amount
from src.parsers.exceptions import (
    NotAMintError,
    NotFoundError,
    ResourceLimitRejectedError,
    TransportError,
)
from src.parsers.rate_limiter import RateLimiter
from src.parsers.solana_rpc.models import (
    TOKEN_PROGRAMS,
    AccountRecord,
    LargestAccount,
    MintMetadata,
    WalletBalance,
)

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PqnBCw8i9PgcdGX"
TOKEN_ACCOUNT_SIZE = 165  # classic SPL token account; Token-2022 accounts vary

MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]

# JSON-RPC server errors meaning "this scan is too big for this node":
# -32010 key excluded from secondary indexes, -32012 scan aborted at limit
RESOURCE_LIMIT_CODES = {-32010, -32012}
RESOURCE_LIMIT_MARKERS = (
    "too large",
    "scan aborted",
    "exceeded the limit",
    "secondary indexes",
    "response size",
)


class SolanaRpcClient:
    """Async client for the subset of Solana JSON-RPC used by holder analysis."""

    def __init__(
        self,
        rpc_url: str,
        *,
        max_rps: float = 8.0,
        timeout: float = 30.0,
        commitment: str = "confirmed",
    ) -> None:
        self.rpc_url = rpc_url
        self._commitment = commitment
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        """POST one JSON-RPC request and return ``result``.

        Retries 429 and connect/timeout errors. Raises ResourceLimitRejectedError
        when the node refuses the query for size, TransportError otherwise.
        """
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        for attempt in range(MAX_RETRIES + 1):
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            try:
                await self._rate_limiter.acquire()
                resp = await self._client.post(self.rpc_url, json=payload)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    logger.debug(f"[RPC] {method} {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise TransportError(f"{method} failed: {type(e).__name__}: {e}") from e
            except httpx.HTTPError as e:
                raise TransportError(f"{method} failed: {type(e).__name__}: {e}") from e

            if resp.status_code == 429 and attempt < MAX_RETRIES:
                logger.debug(f"[RPC] {method} rate limited, retry in {delay}s")
                await asyncio.sleep(delay)
                continue

            return _unwrap(method, resp)

        raise TransportError(f"{method} failed: retries exhausted", status_code=429)

    async def get_mint_metadata(self, mint: str) -> MintMetadata:
        result = await self._call(
            "getAccountInfo",
            [mint, {"encoding": "jsonParsed", "commitment": self._commitment}],
        )
        value = (result or {}).get("value")
        if not value:
            raise NotFoundError(f"Mint account not found: {mint}")

        data = value.get("data")
        if not isinstance(data, dict):
            raise NotAMintError(mint, program=str(value.get("owner", "")))
        program = data.get("program", "")
        parsed = data.get("parsed") or {}
        account_type = parsed.get("type", "")
        if program not in TOKEN_PROGRAMS or account_type != "mint":
            raise NotAMintError(mint, program=program, account_type=account_type)

        info = parsed.get("info") or {}
        try:
            return MintMetadata(
                address=mint,
                decimals=int(info.get("decimals", 0)),
                supply_raw=parse_raw_amount(info.get("supply")),
                mint_authority=info.get("mintAuthority"),
                freeze_authority=info.get("freezeAuthority"),
                is_initialized=bool(info.get("isInitialized", False)),
                program=program,
            )
        except (TypeError, ValueError) as e:
            raise TransportError(f"Malformed mint account {mint}: {e}") from e

    async def scan_accounts_by_mint(
        self, mint: str, *, token_2022: bool = False
    ) -> list[AccountRecord]:
        """Every token account of ``mint`` (getProgramAccounts).

        Public and most paid nodes reject this for popular mints with
        ResourceLimitRejectedError.
        """
        filters: list[dict[str, Any]] = [{"memcmp": {"offset": 0, "bytes": mint}}]
        if not token_2022:
            filters.insert(0, {"dataSize": TOKEN_ACCOUNT_SIZE})
        program_id = TOKEN_2022_PROGRAM_ID if token_2022 else TOKEN_PROGRAM_ID

        result = await self._call(
            "getProgramAccounts",
            [
                program_id,
                {
                    "encoding": "jsonParsed",
                    "commitment": self._commitment,
                    "filters": filters,
                },
            ],
        )
        if not isinstance(result, list):
            raise TransportError(f"getProgramAccounts returned {type(result).__name__}")

        records = [_parse_token_account(row) for row in result]
        logger.debug(f"[RPC] scanned {len(records)} token accounts for {mint[:12]}")
        return records

    async def get_largest_accounts(self, mint: str) -> list[LargestAccount]:
        """Top token accounts by balance (node caps this at 20)."""
        result = await self._call(
            "getTokenLargestAccounts", [mint, {"commitment": self._commitment}]
        )
        rows = (result or {}).get("value") or []
        try:
            return [
                LargestAccount(
                    address=row["address"],
                    amount_raw=parse_raw_amount(row.get("amount")),
                    decimals=int(row.get("decimals", 0)),
                    ui_amount=row.get("uiAmount"),
                )
                for row in rows
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed getTokenLargestAccounts row: {e}") from e

    async def get_token_account_owner(self, address: str) -> str:
        """Wallet that controls token account ``address``."""
        result = await self._call(
            "getAccountInfo",
            [address, {"encoding": "jsonParsed", "commitment": self._commitment}],
        )
        value = (result or {}).get("value")
        if not value:
            raise NotFoundError(f"Token account not found: {address}")

        data = value.get("data")
        owner = None
        if isinstance(data, dict):
            owner = ((data.get("parsed") or {}).get("info") or {}).get("owner")
        if not owner:
            raise TransportError(f"Account {address} is not a parsed token account")
        return owner

    async def get_balance(self, address: str) -> WalletBalance:
        result = await self._call(
            "getBalance", [address, {"commitment": self._commitment}]
        )
        lamports = (result or {}).get("value")
        if not isinstance(lamports, int):
            raise TransportError(f"getBalance returned no value for {address}")
        return WalletBalance(address=address, lamports=lamports, rpc_url=self.rpc_url)


def _unwrap(method: str, resp: httpx.Response) -> Any:
    """Map an RPC HTTP response to its result or a typed error."""
    if resp.status_code == 413:
        raise ResourceLimitRejectedError(
            f"{method} rejected: response too large", status_code=413, body=resp.text
        )
    if resp.status_code != 200:
        raise TransportError(
            f"{method} HTTP {resp.status_code}",
            status_code=resp.status_code,
            body=resp.text,
        )

    try:
        data = resp.json()
    except ValueError as e:
        raise TransportError(f"{method} returned invalid JSON", status_code=200) from e

    error = data.get("error") if isinstance(data, dict) else None
    if error:
        code = error.get("code") if isinstance(error, dict) else None
        message = (error.get("message") or "") if isinstance(error, dict) else str(error)
        if _is_resource_limit(code, message):
            raise ResourceLimitRejectedError(
                f"{method} rejected: {message}", status_code=200, rpc_code=code
            )
        raise TransportError(f"{method} RPC error {code}: {message}", rpc_code=code)

    if not isinstance(data, dict) or "result" not in data:
        raise TransportError(f"{method} response has no result")
    return data["result"]


def _is_resource_limit(code: int | None, message: str) -> bool:
    if code in RESOURCE_LIMIT_CODES:
        return True
    lowered = message.lower()
    return any(marker in lowered for marker in RESOURCE_LIMIT_MARKERS)


def _parse_token_account(row: dict) -> AccountRecord:
    """Parse one jsonParsed getProgramAccounts row."""
    try:
        info = row["account"]["data"]["parsed"]["info"]
        token_amount = info["tokenAmount"]
        return AccountRecord(
            address=row["pubkey"],
            owner=info["owner"],
            amount_raw=parse_raw_amount(token_amount.get("amount")),
            decimals=int(token_amount.get("decimals", 0)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise TransportError(f"Malformed token account row: {e}") from e
