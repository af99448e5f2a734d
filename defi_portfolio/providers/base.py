from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ..types import RawBalance, TokenMetadata


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class IndexerProvider(Provider):
    """Provider for blockchain indexing data (balances, token metadata)"""

    @abstractmethod
    async def get_token_balances(self, address: str) -> List[RawBalance]:
        """Get every token balance reported for an address, zero balances included"""
        pass

    @abstractmethod
    async def get_token_metadata(self, contract_address: str) -> TokenMetadata:
        """Get decimals, name, symbol and logo for a token contract"""
        pass


class PriceProvider(Provider):
    """Provider for token price data"""

    @abstractmethod
    async def get_token_prices(self, token_addresses: List[str], vs_currency: str = "usd") -> Dict[str, float]:
        """Get current prices keyed by lowercased contract address"""
        pass
