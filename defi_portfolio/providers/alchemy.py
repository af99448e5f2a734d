import httpx
import structlog
from pydantic import ValidationError
from typing import Any, Dict, List, Optional

from ..config import settings
from ..errors import UpstreamFailure
from ..logging_config import mask_alchemy_keys
from ..services.networks import NetworkConfig
from ..types import RawBalance, TokenMetadata
from .base import IndexerProvider

logger = structlog.stdlib.get_logger(__name__)


class AlchemyProvider(IndexerProvider):
    """Alchemy JSON-RPC provider for a single EVM network"""

    name = "alchemy"
    timeout_s = 30

    def __init__(self, network: NetworkConfig, timeout_s: Optional[int] = None):
        self.network = network
        self.api_key = network.api_key
        self.base_url = network.alchemy_url
        if timeout_s is not None:
            self.timeout_s = timeout_s

    async def ready(self) -> bool:
        return bool(self.api_key) and settings.enable_alchemy

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {
                "status": "unavailable",
                "reason": "API key not configured or provider disabled"
            }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.base_url,
                    json={"jsonrpc": "2.0", "id": 1, "method": "eth_chainId", "params": []},
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout_s
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def _rpc(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": 1
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.base_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout_s
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise UpstreamFailure(
                f"Alchemy request failed: {mask_alchemy_keys(str(exc))}",
                provider=self.name,
                details={"method": method, "chain": self.network.name},
            ) from exc
        except ValueError as exc:
            raise UpstreamFailure(f"Alchemy returned invalid JSON for {method}", provider=self.name) from exc

        if "error" in data:
            raise UpstreamFailure(
                f"Alchemy error: {data['error']}",
                provider=self.name,
                details={"method": method, "chain": self.network.name},
            )
        return data.get("result")

    async def get_token_balances(self, address: str) -> List[RawBalance]:
        """Get all ERC-20 token balances for address, zero balances included"""
        result = await self._rpc("alchemy_getTokenBalances", [address])

        try:
            entries = result["tokenBalances"]
            balances = [
                RawBalance(
                    contract_address=entry["contractAddress"],
                    token_balance_hex=entry.get("tokenBalance") or "0x",
                )
                for entry in entries
            ]
        except (TypeError, KeyError, ValidationError) as exc:
            raise UpstreamFailure("Alchemy returned a malformed token balance list", provider=self.name) from exc

        logger.debug("alchemy_token_balances", chain=self.network.name, count=len(balances))
        return balances

    async def get_token_metadata(self, contract_address: str) -> TokenMetadata:
        """Get metadata for a single token contract"""
        token_info = await self._rpc("alchemy_getTokenMetadata", [contract_address]) or {}

        decimals = token_info.get("decimals")
        if isinstance(decimals, str):
            try:
                decimals = int(decimals, 0)
            except ValueError:
                decimals = None

        return TokenMetadata(
            decimals=decimals,
            name=(token_info.get("name") or "").strip() or None,
            symbol=(token_info.get("symbol") or "").strip() or None,
            logo=token_info.get("logo") or None,
        )
