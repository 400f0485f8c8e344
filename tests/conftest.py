"""Shared test fixtures."""

import pytest

from src.parsers.solana_rpc.models import AccountRecord
from tests.fakes import record


@pytest.fixture
def whale_records() -> list[AccountRecord]:
    """Supply 1,000,000: A holds 60% over two accounts, B holds 40%."""
    return [
        record("A", 500_000),
        record("B", 400_000),
        record("A", 100_000),
    ]
