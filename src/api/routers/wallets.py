"""Wallet endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.dependencies import get_analyzer
from src.parsers.token_analyzer import TokenAnalyzer

router = APIRouter(prefix="/api", tags=["wallets"])


class WalletInfoResponse(BaseModel):
    address: str
    rpcUrl: str
    lamports: int
    sol: float


@router.get("/wallet-info", response_model=WalletInfoResponse)
async def wallet_info(
    address: str = Query("", max_length=64),
    analyzer: TokenAnalyzer = Depends(get_analyzer),
) -> WalletInfoResponse | JSONResponse:
    """SOL balance of a wallet."""
    if not address.strip():
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing address query param"},
        )
    balance = await analyzer.get_wallet_info(address)
    return WalletInfoResponse(
        address=balance.address,
        rpcUrl=balance.rpc_url,
        lamports=balance.lamports,
        sol=balance.sol,
    )
