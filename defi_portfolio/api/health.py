from fastapi import APIRouter, Depends
from typing import Dict, Any
from ..providers.alchemy import AlchemyProvider
from ..providers.coingecko import CoingeckoProvider
from ..services.balances import BalanceAggregator
from .balances import get_balance_aggregator

router = APIRouter()


@router.get("/healthz")
async def health_check(
    aggregator: BalanceAggregator = Depends(get_balance_aggregator),
) -> Dict[str, Any]:
    """Health check endpoint that verifies provider status"""

    provider_status: Dict[str, Dict[str, Any]] = {}

    # One Alchemy entry per configured network
    for network in aggregator.registry.all():
        alchemy = AlchemyProvider(network)
        provider_status[f"alchemy:{network.name}"] = await alchemy.health_check()

    provider_status["coingecko"] = await CoingeckoProvider().health_check()

    all_healthy = all(
        status["status"] in ["healthy", "unavailable"]
        for status in provider_status.values()
    )

    available_providers = sum(
        1 for status in provider_status.values()
        if status["status"] == "healthy"
    )

    return {
        "status": "healthy" if all_healthy and available_providers > 0 else "degraded",
        "providers": provider_status,
        "available_providers": available_providers,
        "total_providers": len(provider_status)
    }
