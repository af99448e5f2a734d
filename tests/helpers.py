"""Fake providers and wallet data shared by the service and API tests."""

from dataclasses import replace
from typing import Dict, List, Optional

from defi_portfolio.errors import UpstreamFailure
from defi_portfolio.providers.base import IndexerProvider, PriceProvider
from defi_portfolio.services.networks import SUPPORTED_NETWORKS, NetworkRegistry
from defi_portfolio.types import RawBalance, TokenMetadata

WALLET = "0xd8da6bf26964af9d7eed9e03e53415d37aa96045"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
DUST = "0x0000000000000000000000000000000000000dEaD"


class FakeIndexer(IndexerProvider):
    name = "fake-indexer"

    def __init__(
        self,
        balances: List[RawBalance],
        metadata: Dict[str, TokenMetadata],
        failing: Optional[set] = None,
        enabled: bool = True,
    ):
        self.balances = balances
        self.metadata = metadata
        self.failing = {a.lower() for a in (failing or set())}
        self.enabled = enabled
        self.balance_calls: List[str] = []
        self.metadata_calls: List[str] = []
        self.network = None

    async def ready(self) -> bool:
        return self.enabled

    async def health_check(self):
        return {"status": "healthy"}

    async def get_token_balances(self, address: str) -> List[RawBalance]:
        self.balance_calls.append(address)
        return list(self.balances)

    async def get_token_metadata(self, contract_address: str) -> TokenMetadata:
        self.metadata_calls.append(contract_address)
        if contract_address.lower() in self.failing:
            raise UpstreamFailure("metadata lookup failed", provider=self.name)
        return self.metadata.get(contract_address.lower(), TokenMetadata())


class FakePrices(PriceProvider):
    name = "fake-prices"

    def __init__(self, prices: Dict[str, float], error: Optional[Exception] = None):
        self.prices = prices
        self.error = error
        self.calls: List[List[str]] = []

    async def ready(self) -> bool:
        return True

    async def health_check(self):
        return {"status": "healthy"}

    async def get_token_prices(self, token_addresses, vs_currency="usd"):
        self.calls.append(list(token_addresses))
        if self.error is not None:
            raise self.error
        return {a: p for a, p in self.prices.items() if a in token_addresses}


def make_registry(keys: Dict[str, str], default: str = "ethereum") -> NetworkRegistry:
    networks = [
        replace(network, api_key=keys.get(name, ""))
        for name, network in SUPPORTED_NETWORKS.items()
    ]
    return NetworkRegistry(networks, default=default)
