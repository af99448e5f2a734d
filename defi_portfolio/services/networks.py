"""
Network configuration for portfolio lookups.

The registry is built once from settings and handed to the aggregator, so the
request path never reads the environment.
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional

import structlog

from ..config import Settings
from ..errors import ConfigurationError
from .address import normalize_chain

logger = structlog.stdlib.get_logger(__name__)


@dataclass(frozen=True)
class NetworkConfig:
    """A supported EVM network and the credential used to query it."""
    name: str
    chain_id: int
    alchemy_slug: str
    is_testnet: bool = False
    # Coingecko only prices token identifiers from the primary network.
    prices_supported: bool = False
    coingecko_platform: Optional[str] = None
    api_key: str = ""

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    @property
    def alchemy_url(self) -> str:
        return f"https://{self.alchemy_slug}.g.alchemy.com/v2/{self.api_key}"


SUPPORTED_NETWORKS: Dict[str, NetworkConfig] = {
    "ethereum": NetworkConfig(
        name="ethereum",
        chain_id=1,
        alchemy_slug="eth-mainnet",
        prices_supported=True,
        coingecko_platform="ethereum",
    ),
    "polygon": NetworkConfig(name="polygon", chain_id=137, alchemy_slug="polygon-mainnet"),
    "optimism": NetworkConfig(name="optimism", chain_id=10, alchemy_slug="opt-mainnet"),
    "arbitrum": NetworkConfig(name="arbitrum", chain_id=42161, alchemy_slug="arb-mainnet"),
    "sepolia": NetworkConfig(name="sepolia", chain_id=11155111, alchemy_slug="eth-sepolia", is_testnet=True),
}


class NetworkRegistry:
    """Closed set of networks with credentials resolved up front."""

    def __init__(self, networks: Iterable[NetworkConfig], default: str = "ethereum"):
        self._networks: Dict[str, NetworkConfig] = {n.name: n for n in networks}
        if default not in self._networks:
            raise ValueError(f"Default network '{default}' is not a configured network")
        self.default = default

    @classmethod
    def from_settings(cls, settings: Settings) -> "NetworkRegistry":
        networks = [
            replace(network, api_key=settings.alchemy_key_for(name))
            for name, network in SUPPORTED_NETWORKS.items()
        ]
        default = normalize_chain(settings.default_chain) or "ethereum"
        return cls(networks, default=default)

    def __contains__(self, name: str) -> bool:
        return name in self._networks

    def get(self, name: str) -> Optional[NetworkConfig]:
        return self._networks.get(name)

    def all(self) -> List[NetworkConfig]:
        return list(self._networks.values())

    def resolve(self, chain: Optional[str]) -> NetworkConfig:
        """Map a requested chain onto a configured network.

        Unknown or missing chains fall back to the default network. Raises
        ``ConfigurationError`` when the resolved network has no credential.
        """

        canonical = normalize_chain(chain)
        network = self._networks.get(canonical) if canonical else None
        if network is None:
            network = self._networks[self.default]
            if chain:
                logger.info("chain_fallback", requested=chain, resolved=network.name)

        if not network.has_credential:
            raise ConfigurationError(
                "Missing Alchemy API key for this chain",
                details={"chain": network.name},
            )
        return network


__all__ = ["NetworkConfig", "NetworkRegistry", "SUPPORTED_NETWORKS"]
