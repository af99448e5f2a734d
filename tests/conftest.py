import pytest

from defi_portfolio.services.networks import SUPPORTED_NETWORKS, NetworkRegistry
from defi_portfolio.types import RawBalance, TokenMetadata
from helpers import DUST, USDC, WETH, FakeIndexer, make_registry


@pytest.fixture
def registry() -> NetworkRegistry:
    return make_registry({name: f"key-{name}" for name in SUPPORTED_NETWORKS})


@pytest.fixture
def sample_indexer() -> FakeIndexer:
    """One zero balance, 1 WETH, 2500 USDC."""
    balances = [
        RawBalance(contract_address=DUST, token_balance_hex="0x0"),
        RawBalance(contract_address=WETH, token_balance_hex="0xde0b6b3a7640000"),
        RawBalance(contract_address=USDC, token_balance_hex="0x9502f900"),
    ]
    metadata = {
        WETH.lower(): TokenMetadata(decimals=18, name="Wrapped Ether", symbol="WETH"),
        USDC.lower(): TokenMetadata(decimals=6, name="USD Coin", symbol="USDC", logo="https://img/usdc.png"),
    }
    return FakeIndexer(balances, metadata)
