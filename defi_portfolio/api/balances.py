from functools import lru_cache, partial
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..config import settings
from ..providers.alchemy import AlchemyProvider
from ..services.balances import BalanceAggregator, default_price_factory
from ..services.networks import NetworkRegistry
from ..types import BalancesResponse, ErrorResponse

router = APIRouter()


@lru_cache(maxsize=1)
def get_balance_aggregator() -> BalanceAggregator:
    """Aggregator wired from process settings; overridden in tests."""
    return BalanceAggregator(
        NetworkRegistry.from_settings(settings),
        indexer_factory=partial(AlchemyProvider, timeout_s=settings.request_timeout_seconds),
        price_factory=partial(default_price_factory, timeout_s=settings.request_timeout_seconds),
        max_concurrency=settings.max_concurrent_requests,
    )


@router.get(
    "/balances",
    response_model=BalancesResponse,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def get_balances(
    address: Optional[str] = Query(None, description="Wallet address to analyze"),
    chain: Optional[str] = Query(None, description="Blockchain network (defaults to ethereum)"),
    aggregator: BalanceAggregator = Depends(get_balance_aggregator),
) -> BalancesResponse:
    """Token holdings for a wallet with USD values.

    InvalidInput / ConfigurationError / UpstreamFailure propagate to the
    handlers registered in ``main``.
    """
    return await aggregator.get_portfolio(address, chain)
