"""In-memory RPC and DexScreener stand-ins shared by the tests."""

from src.parsers.dexscreener.models import MarketPool
from src.parsers.exceptions import NotFoundError, TransportError
from src.parsers.solana_rpc.models import (
    AccountRecord,
    LargestAccount,
    MintMetadata,
    WalletBalance,
)

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
WSOL_MINT = "So11111111111111111111111111111111111111112"
WALLET = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def record(owner: str, amount_raw: int, decimals: int = 0, address: str = "") -> AccountRecord:
    return AccountRecord(
        address=address or f"acct-{owner}-{amount_raw}",
        owner=owner,
        amount_raw=amount_raw,
        decimals=decimals,
    )


def pool(liquidity_usd: float | None, venue: str = "raydium", pair: str = "pair1") -> MarketPool:
    return MarketPool(
        venue_id=venue,
        chain_id="solana",
        pair_address=pair,
        liquidity_usd=liquidity_usd,
        url=f"https://dexscreener.com/solana/{pair}",
    )


def mint_metadata(
    *,
    address: str = USDC_MINT,
    supply_raw: int = 1_000_000,
    decimals: int = 0,
    mint_authority: str | None = None,
    freeze_authority: str | None = None,
) -> MintMetadata:
    return MintMetadata(
        address=address,
        decimals=decimals,
        supply_raw=supply_raw,
        mint_authority=mint_authority,
        freeze_authority=freeze_authority,
        is_initialized=True,
    )


class FakeRpc:
    """Duck-typed SolanaRpcClient backed by plain lists and dicts."""

    rpc_url = "http://rpc.test"

    def __init__(
        self,
        *,
        mint: MintMetadata | None = None,
        records: list[AccountRecord] | None = None,
        scan_error: Exception | None = None,
        largest: list[LargestAccount] | None = None,
        owners: dict[str, str] | None = None,
        lamports: int = 0,
    ) -> None:
        self.mint = mint
        self.records = records or []
        self.scan_error = scan_error
        self.largest = largest or []
        self.owners = owners or {}
        self.lamports = lamports
        self.calls: list[str] = []
        self.closed = False

    async def get_mint_metadata(self, mint: str) -> MintMetadata:
        self.calls.append("get_mint_metadata")
        if self.mint is None:
            raise NotFoundError(f"Mint account not found: {mint}")
        return self.mint

    async def scan_accounts_by_mint(self, mint: str, *, token_2022: bool = False) -> list[AccountRecord]:
        self.calls.append("scan_accounts_by_mint")
        if self.scan_error:
            raise self.scan_error
        return list(self.records)

    async def get_largest_accounts(self, mint: str) -> list[LargestAccount]:
        self.calls.append("get_largest_accounts")
        return list(self.largest)

    async def get_token_account_owner(self, address: str) -> str:
        self.calls.append("get_token_account_owner")
        if address not in self.owners:
            raise TransportError(f"owner lookup failed for {address}")
        return self.owners[address]

    async def get_balance(self, address: str) -> WalletBalance:
        self.calls.append("get_balance")
        return WalletBalance(address=address, lamports=self.lamports, rpc_url=self.rpc_url)

    async def close(self) -> None:
        self.closed = True


class FakeDexScreener:
    def __init__(self, pools: list[MarketPool] | None = None, error: Exception | None = None) -> None:
        self.pools = pools or []
        self.error = error
        self.closed = False

    async def get_token_pools(self, token_address: str) -> list[MarketPool]:
        if self.error:
            raise self.error
        return list(self.pools)

    async def close(self) -> None:
        self.closed = True


