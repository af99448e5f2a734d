from .portfolio import (
    AggregatorFetcher,
    ChartSlice,
    HttpFetcher,
    PortfolioView,
    TableRow,
    ViewState,
)

__all__ = [
    "AggregatorFetcher",
    "ChartSlice",
    "HttpFetcher",
    "PortfolioView",
    "TableRow",
    "ViewState",
]
