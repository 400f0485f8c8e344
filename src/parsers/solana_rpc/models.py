"""Pydantic models for Solana JSON-RPC token account payloads."""

from pydantic import BaseModel

from src.parsers.amounts import LAMPORTS_PER_SOL, to_ui_amount

TOKEN_PROGRAMS = ("spl-token", "spl-token-2022")


class MintMetadata(BaseModel):
    """Parsed SPL mint account."""

    address: str
    decimals: int
    supply_raw: int
    mint_authority: str | None = None  # None = supply fixed forever
    freeze_authority: str | None = None  # None = accounts cannot be frozen
    is_initialized: bool = False
    program: str = "spl-token"

    model_config = {"frozen": True}

    @property
    def supply(self) -> float:
        return float(to_ui_amount(self.supply_raw, self.decimals))

    @property
    def immutable_mint(self) -> bool:
        return self.mint_authority is None

    @property
    def can_freeze(self) -> bool:
        return self.freeze_authority is not None


class AccountRecord(BaseModel):
    """One token account holding units of a mint."""

    address: str
    owner: str
    amount_raw: int
    decimals: int

    model_config = {"frozen": True}


class LargestAccount(BaseModel):
    """Row of getTokenLargestAccounts: no owner, not grouped by owner."""

    address: str
    amount_raw: int
    decimals: int
    ui_amount: float | None = None

    model_config = {"frozen": True}


class WalletBalance(BaseModel):
    address: str
    lamports: int
    rpc_url: str = ""

    model_config = {"frozen": True}

    @property
    def sol(self) -> float:
        return self.lamports / LAMPORTS_PER_SOL
