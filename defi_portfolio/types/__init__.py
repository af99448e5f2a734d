from .balances import (
    BalancesResponse,
    EnrichedToken,
    ErrorResponse,
    RawBalance,
    TokenMetadata,
)

__all__ = [
    "RawBalance",
    "TokenMetadata",
    "EnrichedToken",
    "BalancesResponse",
    "ErrorResponse",
]
