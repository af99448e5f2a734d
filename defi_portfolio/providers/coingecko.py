import httpx
from typing import Any, Dict, List, Optional

from ..config import settings
from ..errors import UpstreamFailure
from .base import PriceProvider


class CoingeckoProvider(PriceProvider):
    """Coingecko API provider for token prices"""

    name = "coingecko"
    timeout_s = 15

    def __init__(
        self,
        platform: str = "ethereum",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[int] = None,
    ):
        self.platform = platform
        self.api_key = settings.coingecko_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.coingecko_base_url).rstrip("/")
        if timeout_s is not None:
            self.timeout_s = timeout_s

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key
        return headers

    async def ready(self) -> bool:
        return settings.enable_coingecko  # API key is optional for basic tier

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {
                "status": "unavailable",
                "reason": "Provider disabled"
            }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.base_url}/ping",
                    headers=self._build_headers(),
                    timeout=self.timeout_s
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def get_token_prices(self, token_addresses: List[str], vs_currency: str = "usd") -> Dict[str, float]:
        """Get current prices for multiple tokens by contract address.

        Returns a mapping of lowercased contract address to price. Addresses
        Coingecko does not list are simply absent from the result.
        """
        if not token_addresses:
            return {}

        # Coingecko expects comma-separated addresses
        params = {
            "contract_addresses": ",".join(token_addresses),
            "vs_currencies": vs_currency,
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.base_url}/simple/token_price/{self.platform}",
                    headers=self._build_headers(),
                    params=params,
                    timeout=self.timeout_s
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise UpstreamFailure(f"Coingecko request failed: {exc}", provider=self.name) from exc
        except ValueError as exc:
            raise UpstreamFailure("Coingecko returned invalid JSON", provider=self.name) from exc

        if not isinstance(data, dict):
            raise UpstreamFailure("Coingecko returned an unexpected payload", provider=self.name)

        prices: Dict[str, float] = {}
        for address, price_data in data.items():
            if isinstance(price_data, dict) and isinstance(price_data.get(vs_currency), (int, float)):
                prices[address.lower()] = float(price_data[vs_currency])

        return prices
