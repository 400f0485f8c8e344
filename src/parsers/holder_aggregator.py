"""Holder aggregation — group token accounts by owning wallet.

One wallet can own many token accounts of the same mint, so raw account
lists overstate the holder count and understate concentration. Accounts are
summed per owner and zero balances dropped.

The full scan (getProgramAccounts) is refused by most nodes for popular
mints. In that case the bounded getTokenLargestAccounts list is used
instead, owners are resolved per account, and the result is flagged
``used_fallback``. Percentages derived from it ignore the long tail.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from loguru import logger

from src.parsers.amounts import to_ui_amount
from src.parsers.exceptions import (
    FallbackFailedError,
    ResourceLimitRejectedError,
    TokenRadarError,
)
from src.parsers.solana_rpc.models import AccountRecord, LargestAccount


class AccountSource(Protocol):
    async def scan_accounts_by_mint(
        self, mint: str, *, token_2022: bool = False
    ) -> list[AccountRecord]: ...

    async def get_largest_accounts(self, mint: str) -> list[LargestAccount]: ...

    async def get_token_account_owner(self, address: str) -> str: ...


@dataclass(frozen=True)
class HolderAggregate:
    """All token accounts of one owner, summed."""

    owner: str
    amount_raw: int
    ui_amount: float
    account_count: int = 1


@dataclass(frozen=True)
class HolderAggregation:
    """Holders sorted by balance, descending, plus how they were obtained."""

    holders: list[HolderAggregate]
    used_fallback: bool = False

    @property
    def holder_count(self) -> int:
        return len(self.holders)


def group_by_owner(records: Iterable[AccountRecord]) -> list[HolderAggregate]:
    """Sum balances per owner; drop zeros; sort descending.

    Equal balances keep the order in which their owner was first seen.
    """
    totals: dict[str, Decimal] = {}
    raw_totals: dict[str, int] = {}
    counts: dict[str, int] = {}

    for record in records:
        amount = to_ui_amount(record.amount_raw, record.decimals)
        if amount == 0:
            continue
        owner = record.owner
        totals[owner] = totals.get(owner, Decimal(0)) + amount
        raw_totals[owner] = raw_totals.get(owner, 0) + record.amount_raw
        counts[owner] = counts.get(owner, 0) + 1

    # sorted() with reverse=True is still stable for equal keys
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [
        HolderAggregate(
            owner=owner,
            amount_raw=raw_totals[owner],
            ui_amount=float(total),
            account_count=counts[owner],
        )
        for owner, total in ranked
    ]


async def aggregate_holders(
    source: AccountSource,
    mint: str,
    *,
    token_2022: bool = False,
    fallback_limit: int = 20,
    owner_lookup_concurrency: int = 10,
) -> HolderAggregation:
    """Aggregate holders of ``mint``, falling back to the largest accounts.

    Non-size failures of the full scan propagate as TransportError.
    """
    try:
        records = await source.scan_accounts_by_mint(mint, token_2022=token_2022)
    except ResourceLimitRejectedError as e:
        logger.warning(f"[HOLDERS] full scan rejected for {mint[:12]} ({e}), using largest accounts")
        records = await _largest_account_records(
            source, mint, limit=fallback_limit, concurrency=owner_lookup_concurrency
        )
        return HolderAggregation(holders=group_by_owner(records), used_fallback=True)

    holders = group_by_owner(records)
    logger.debug(f"[HOLDERS] {mint[:12]}: {len(records)} accounts -> {len(holders)} holders")
    return HolderAggregation(holders=holders, used_fallback=False)


async def _largest_account_records(
    source: AccountSource,
    mint: str,
    *,
    limit: int,
    concurrency: int,
) -> list[AccountRecord]:
    """Resolve owners of the largest accounts; any failed lookup fails all."""
    try:
        largest = (await source.get_largest_accounts(mint))[:limit]
    except TokenRadarError as e:
        raise FallbackFailedError(f"largest accounts query failed for {mint}: {e}") from e

    semaphore = asyncio.Semaphore(max(concurrency, 1))

    async def resolve(account: LargestAccount) -> AccountRecord:
        async with semaphore:
            owner = await source.get_token_account_owner(account.address)
        return AccountRecord(
            address=account.address,
            owner=owner,
            amount_raw=account.amount_raw,
            decimals=account.decimals,
        )

    # TaskGroup cancels the remaining lookups on the first failure
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(resolve(a)) for a in largest]
    except ExceptionGroup as eg:
        failed, rest = eg.split(TokenRadarError)
        if rest is not None or failed is None:
            raise
        first = failed.exceptions[0]
        raise FallbackFailedError(f"owner lookup failed for {mint}: {first}") from first

    return [task.result() for task in tasks]
