"""
Balance aggregation: joins indexer balances, token metadata and USD quotes
into the enriched token list served by ``GET /balances``.
"""

import asyncio
from time import perf_counter
from typing import Callable, Dict, Iterable, List, Optional

import structlog

from ..errors import ConfigurationError, InvalidInput
from ..providers.alchemy import AlchemyProvider
from ..providers.base import IndexerProvider, PriceProvider
from ..providers.coingecko import CoingeckoProvider
from ..types import BalancesResponse, EnrichedToken, RawBalance, TokenMetadata
from .address import is_valid_evm_address, is_zero_balance, parse_hex_quantity
from .networks import NetworkConfig, NetworkRegistry

logger = structlog.stdlib.get_logger(__name__)

IndexerFactory = Callable[[NetworkConfig], IndexerProvider]
PriceFactory = Callable[[NetworkConfig], PriceProvider]


def default_price_factory(network: NetworkConfig, timeout_s: Optional[int] = None) -> PriceProvider:
    return CoingeckoProvider(platform=network.coingecko_platform or "ethereum", timeout_s=timeout_s)


def compute_balance(token_balance_hex: str, decimals: Optional[int]) -> float:
    """Scale a raw hex balance by ``10**decimals``; unscaled when decimals is missing or zero."""
    raw = parse_hex_quantity(token_balance_hex)
    if decimals:
        return raw / 10 ** decimals
    return float(raw)


def enrich_token(raw: RawBalance, metadata: TokenMetadata, usd_price: float) -> EnrichedToken:
    balance = compute_balance(raw.token_balance_hex, metadata.decimals)
    return EnrichedToken(
        contract_address=raw.contract_address,
        token_balance_hex=raw.token_balance_hex,
        decimals=metadata.decimals,
        name=metadata.name,
        symbol=metadata.symbol,
        logo=metadata.logo,
        balance=balance,
        usd_price=usd_price,
        usd_value=balance * usd_price,
    )


def drop_zero_balances(balances: Iterable[RawBalance]) -> List[RawBalance]:
    return [b for b in balances if not is_zero_balance(b.token_balance_hex)]


class BalanceAggregator:
    """Builds a wallet's enriched token list for one network.

    Metadata lookups fan out concurrently, bounded by ``max_concurrency``.
    A metadata or price lookup that fails degrades that token to empty
    metadata / no price instead of failing the whole request. Only the
    balance list call is fatal, since there is nothing to fall back to.
    """

    def __init__(
        self,
        registry: NetworkRegistry,
        indexer_factory: IndexerFactory = AlchemyProvider,
        price_factory: PriceFactory = default_price_factory,
        max_concurrency: int = 10,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.registry = registry
        self._indexer_factory = indexer_factory
        self._price_factory = price_factory
        self._max_concurrency = max_concurrency

    async def get_portfolio(self, address: Optional[str], chain: Optional[str] = None) -> BalancesResponse:
        if not address or not is_valid_evm_address(address.strip()):
            raise InvalidInput("Missing or invalid address", details={"address": address})
        address = address.strip()

        network = self.registry.resolve(chain)
        started = perf_counter()
        log = logger.bind(chain=network.name, address=address)

        indexer = self._indexer_factory(network)
        if not await indexer.ready():
            raise ConfigurationError(
                "Token balance provider is disabled",
                details={"chain": network.name, "provider": indexer.name},
            )
        raw_balances = await indexer.get_token_balances(address)
        held = drop_zero_balances(raw_balances)

        metadata = await self._fetch_metadata(indexer, held)
        prices = await self._fetch_prices(network, held)

        tokens = [
            enrich_token(
                raw,
                metadata.get(raw.contract_address.lower(), TokenMetadata()),
                prices.get(raw.contract_address.lower(), 0.0),
            )
            for raw in held
        ]

        log.info(
            "portfolio_aggregated",
            reported=len(raw_balances),
            held=len(tokens),
            priced=sum(1 for t in tokens if t.usd_price > 0),
            duration_ms=round((perf_counter() - started) * 1000, 1),
        )
        return BalancesResponse(address=address, chain=network.name, tokens=tokens)

    async def _fetch_metadata(
        self,
        indexer: IndexerProvider,
        balances: List[RawBalance],
    ) -> Dict[str, TokenMetadata]:
        # One lookup per distinct contract
        contracts: Dict[str, str] = {}
        for raw in balances:
            contracts.setdefault(raw.contract_address.lower(), raw.contract_address)
        if not contracts:
            return {}

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _fetch_one(contract: str) -> TokenMetadata:
            async with semaphore:
                return await indexer.get_token_metadata(contract)

        results = await asyncio.gather(
            *(_fetch_one(contract) for contract in contracts.values()),
            return_exceptions=True,
        )

        metadata: Dict[str, TokenMetadata] = {}
        for key, result in zip(contracts, results):
            if isinstance(result, Exception):
                logger.warning("token_metadata_unavailable", contract=key, error=str(result))
                metadata[key] = TokenMetadata()
            else:
                metadata[key] = result
        return metadata

    async def _fetch_prices(self, network: NetworkConfig, balances: List[RawBalance]) -> Dict[str, float]:
        if not balances:
            return {}
        if not network.prices_supported:
            logger.debug("price_lookup_skipped", chain=network.name)
            return {}

        provider = self._price_factory(network)
        if not await provider.ready():
            logger.warning("price_provider_unavailable", provider=provider.name)
            return {}

        addresses = list(dict.fromkeys(b.contract_address.lower() for b in balances))
        try:
            return await provider.get_token_prices(addresses)
        except Exception as exc:
            logger.warning("token_prices_unavailable", provider=provider.name, error=str(exc))
            return {}


__all__ = [
    "BalanceAggregator",
    "compute_balance",
    "drop_zero_balances",
    "enrich_token",
]
