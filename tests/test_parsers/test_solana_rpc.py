"""Tests for the Solana JSON-RPC client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.parsers.exceptions import (
    NotAMintError,
    NotFoundError,
    ResourceLimitRejectedError,
    TransportError,
)
from src.parsers.solana_rpc.client import (
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    SolanaRpcClient,
    _is_resource_limit,
)
from tests.fakes import USDC_MINT, WALLET


def _resp(payload: dict | None = None, status_code: int = 200, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = payload
    return resp


def _client(*responses) -> SolanaRpcClient:
    client = SolanaRpcClient("http://rpc.test", max_rps=0)
    client._client = AsyncMock()
    client._client.post = AsyncMock(side_effect=list(responses))
    return client


def _mint_account(info: dict, program: str = "spl-token", account_type: str = "mint") -> dict:
    return {
        "jsonrpc": "2.0",
        "result": {
            "context": {"slot": 1},
            "value": {
                "data": {"program": program, "parsed": {"type": account_type, "info": info}},
                "owner": TOKEN_PROGRAM_ID,
            },
        },
    }


def _token_account_row(pubkey: str, owner: str, amount: str, decimals: int = 6) -> dict:
    return {
        "pubkey": pubkey,
        "account": {
            "data": {
                "program": "spl-token",
                "parsed": {
                    "type": "account",
                    "info": {
                        "mint": USDC_MINT,
                        "owner": owner,
                        "tokenAmount": {"amount": amount, "decimals": decimals},
                    },
                },
            }
        },
    }


class TestMintMetadata:
    @pytest.mark.asyncio
    async def test_parses_mint(self) -> None:
        client = _client(_resp(_mint_account({
            "decimals": 6,
            "supply": "123456789012345678901",
            "mintAuthority": None,
            "freezeAuthority": WALLET,
            "isInitialized": True,
        })))

        info = await client.get_mint_metadata(USDC_MINT)

        assert info.decimals == 6
        assert info.supply_raw == 123456789012345678901
        assert info.supply == pytest.approx(123456789012345.678901)
        assert info.immutable_mint is True
        assert info.can_freeze is True
        assert info.is_initialized is True

    @pytest.mark.asyncio
    async def test_missing_account(self) -> None:
        client = _client(_resp({"jsonrpc": "2.0", "result": {"context": {}, "value": None}}))
        with pytest.raises(NotFoundError):
            await client.get_mint_metadata(USDC_MINT)

    @pytest.mark.asyncio
    async def test_token_account_is_not_a_mint(self) -> None:
        client = _client(_resp(_mint_account({"owner": WALLET}, account_type="account")))
        with pytest.raises(NotAMintError) as exc_info:
            await client.get_mint_metadata(USDC_MINT)
        assert exc_info.value.account_type == "account"

    @pytest.mark.asyncio
    async def test_base64_account_is_not_a_mint(self) -> None:
        client = _client(_resp({
            "result": {"value": {"data": ["AAAA", "base64"], "owner": "11111111111111111111111111111111"}}
        }))
        with pytest.raises(NotAMintError):
            await client.get_mint_metadata(USDC_MINT)

    @pytest.mark.asyncio
    async def test_token_2022_mint_accepted(self) -> None:
        client = _client(_resp(_mint_account(
            {"decimals": 9, "supply": "0", "isInitialized": True}, program="spl-token-2022"
        )))
        info = await client.get_mint_metadata(USDC_MINT)
        assert info.program == "spl-token-2022"
        assert info.supply == 0.0


class TestScan:
    @pytest.mark.asyncio
    async def test_scan_parses_records_and_sends_filters(self) -> None:
        client = _client(_resp({"result": [
            _token_account_row("acc1", "owner1", "1000000"),
            _token_account_row("acc2", "owner1", "0"),
        ]}))

        records = await client.scan_accounts_by_mint(USDC_MINT)

        assert [(r.address, r.owner, r.amount_raw) for r in records] == [
            ("acc1", "owner1", 1_000_000),
            ("acc2", "owner1", 0),
        ]
        payload = client._client.post.call_args.kwargs["json"]
        assert payload["method"] == "getProgramAccounts"
        program_id, config = payload["params"]
        assert program_id == TOKEN_PROGRAM_ID
        assert {"dataSize": 165} in config["filters"]
        assert {"memcmp": {"offset": 0, "bytes": USDC_MINT}} in config["filters"]

    @pytest.mark.asyncio
    async def test_token_2022_scan_has_no_size_filter(self) -> None:
        client = _client(_resp({"result": []}))
        await client.scan_accounts_by_mint(USDC_MINT, token_2022=True)

        program_id, config = client._client.post.call_args.kwargs["json"]["params"]
        assert program_id == TOKEN_2022_PROGRAM_ID
        assert config["filters"] == [{"memcmp": {"offset": 0, "bytes": USDC_MINT}}]

    @pytest.mark.asyncio
    async def test_scan_rejected_for_size(self) -> None:
        client = _client(_resp({
            "jsonrpc": "2.0",
            "error": {
                "code": -32012,
                "message": "scan aborted: The accumulated scan results exceeded the limit",
            },
        }))
        with pytest.raises(ResourceLimitRejectedError) as exc_info:
            await client.scan_accounts_by_mint(USDC_MINT)
        assert exc_info.value.rpc_code == -32012

    @pytest.mark.asyncio
    async def test_scan_http_413_is_resource_limit(self) -> None:
        client = _client(_resp(status_code=413, text="payload too large"))
        with pytest.raises(ResourceLimitRejectedError):
            await client.scan_accounts_by_mint(USDC_MINT)

    @pytest.mark.asyncio
    async def test_scan_other_rpc_error_is_transport(self) -> None:
        client = _client(_resp({"error": {"code": -32602, "message": "Invalid param"}}))
        with pytest.raises(TransportError) as exc_info:
            await client.scan_accounts_by_mint(USDC_MINT)
        assert not isinstance(exc_info.value, ResourceLimitRejectedError)

    @pytest.mark.asyncio
    async def test_rpc_error_with_null_message(self) -> None:
        client = _client(_resp({"error": {"code": -32005, "message": None}}))
        with pytest.raises(TransportError) as exc_info:
            await client.scan_accounts_by_mint(USDC_MINT)
        assert not isinstance(exc_info.value, ResourceLimitRejectedError)
        assert exc_info.value.rpc_code == -32005

    @pytest.mark.asyncio
    async def test_malformed_row_is_transport(self) -> None:
        client = _client(_resp({"result": [{"pubkey": "acc1", "account": {"data": ["x", "base64"]}}]}))
        with pytest.raises(TransportError):
            await client.scan_accounts_by_mint(USDC_MINT)


class TestLargestAccountsAndOwners:
    @pytest.mark.asyncio
    async def test_largest_accounts(self) -> None:
        client = _client(_resp({"result": {"context": {}, "value": [
            {"address": "acc1", "amount": "5000", "decimals": 2, "uiAmount": 50.0},
            {"address": "acc2", "amount": "100", "decimals": 2, "uiAmount": 1.0},
        ]}}))

        rows = await client.get_largest_accounts(USDC_MINT)

        assert [(r.address, r.amount_raw, r.ui_amount) for r in rows] == [
            ("acc1", 5000, 50.0),
            ("acc2", 100, 1.0),
        ]

    @pytest.mark.asyncio
    async def test_token_account_owner(self) -> None:
        client = _client(_resp(_mint_account({"owner": WALLET, "mint": USDC_MINT}, account_type="account")))
        assert await client.get_token_account_owner("acc1") == WALLET

    @pytest.mark.asyncio
    async def test_token_account_owner_missing(self) -> None:
        client = _client(_resp({"result": {"value": None}}))
        with pytest.raises(NotFoundError):
            await client.get_token_account_owner("acc1")


class TestBalanceAndRetries:
    @pytest.mark.asyncio
    async def test_balance(self) -> None:
        client = _client(_resp({"result": {"context": {}, "value": 2_500_000_000}}))
        balance = await client.get_balance(WALLET)
        assert balance.lamports == 2_500_000_000
        assert balance.sol == 2.5
        assert balance.rpc_url == "http://rpc.test"

    @pytest.mark.asyncio
    async def test_retries_on_429(self) -> None:
        client = _client(
            _resp(status_code=429),
            _resp({"result": {"value": 1}}),
        )
        with patch("src.parsers.solana_rpc.client.asyncio.sleep", new=AsyncMock()):
            balance = await client.get_balance(WALLET)
        assert balance.lamports == 1
        assert client._client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_timeouts_exhaust_to_transport_error(self) -> None:
        client = _client(*[httpx.ConnectTimeout("timed out")] * 3)
        with patch("src.parsers.solana_rpc.client.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(TransportError):
                await client.get_balance(WALLET)
        assert client._client.post.await_count == 3

    @pytest.mark.asyncio
    async def test_http_500_is_transport_error(self) -> None:
        client = _client(_resp(status_code=500, text="boom"))
        with pytest.raises(TransportError) as exc_info:
            await client.get_balance(WALLET)
        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "boom"

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        resp = _resp(status_code=200)
        resp.json.side_effect = ValueError("not json")
        client = _client(resp)
        with pytest.raises(TransportError):
            await client.get_balance(WALLET)


@pytest.mark.parametrize(
    ("code", "message", "expected"),
    [
        (-32010, "TokenkegQ... excluded from account secondary indexes", True),
        (-32012, "scan aborted", True),
        (-32600, "Response is too large", True),
        (-32602, "Invalid params", False),
        (-32005, "Node is behind by 42 slots", False),
    ],
)
def test_is_resource_limit(code, message, expected) -> None:
    assert _is_resource_limit(code, message) is expected
