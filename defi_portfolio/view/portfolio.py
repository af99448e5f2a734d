"""
Client-side portfolio state.

``PortfolioView`` follows the connected wallet address: every address change
triggers a fetch, and the token list is replaced wholesale when it lands.
Each fetch is stamped with a generation number so a slow response for an old
address can never overwrite state for a newer one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol

import httpx
import structlog

from ..errors import PortfolioError, UpstreamFailure
from ..services.balances import BalanceAggregator
from ..types import BalancesResponse, EnrichedToken

logger = structlog.stdlib.get_logger(__name__)

PLACEHOLDER = "-"


class ViewState(str, Enum):
    DISCONNECTED = "disconnected"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class PortfolioFetcher(Protocol):
    async def fetch(self, address: str, chain: Optional[str] = None) -> BalancesResponse:
        ...


class AggregatorFetcher:
    """Calls the aggregator in-process."""

    def __init__(self, aggregator: BalanceAggregator):
        self.aggregator = aggregator

    async def fetch(self, address: str, chain: Optional[str] = None) -> BalancesResponse:
        return await self.aggregator.get_portfolio(address, chain)


class HttpFetcher:
    """Calls ``GET /balances`` on a running API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout_s: int = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    async def fetch(self, address: str, chain: Optional[str] = None) -> BalancesResponse:
        params = {"address": address}
        if chain:
            params["chain"] = chain

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.base_url}/balances",
                    params=params,
                    timeout=self.timeout_s,
                )
        except httpx.HTTPError as exc:
            raise UpstreamFailure(f"Portfolio API unreachable: {exc}", provider="api") from exc

        if response.status_code != 200:
            try:
                message = response.json().get("error") or response.text
            except ValueError:
                message = response.text
            error = PortfolioError(message or f"Portfolio API returned {response.status_code}")
            error.status_code = response.status_code
            raise error

        return BalancesResponse.model_validate(response.json())


@dataclass
class ChartSlice:
    label: str
    value: float
    share: float


@dataclass
class TableRow:
    name: str
    symbol: str
    balance: str
    usd_price: str
    usd_value: str
    contract_address: str
    logo: Optional[str] = None


def token_label(token: EnrichedToken) -> str:
    return token.symbol or token.name or token.contract_address[:10]


def format_usd(value: Optional[float]) -> str:
    if value is None or value <= 0:
        return PLACEHOLDER
    return f"${value:,.2f}"


SMALLEST_SHOWN_BALANCE = 0.0001


def format_balance(value: float) -> str:
    if 0 < value < SMALLEST_SHOWN_BALANCE:
        return f"<{SMALLEST_SHOWN_BALANCE}"
    text = f"{value:,.4f}".rstrip("0").rstrip(".")
    return text or "0"


def total_value(tokens: List[EnrichedToken]) -> float:
    return sum(t.usd_value for t in tokens)


def sort_by_value(tokens: List[EnrichedToken]) -> List[EnrichedToken]:
    """Descending by USD value; ties keep their original order."""
    return sorted(tokens, key=lambda t: t.usd_value, reverse=True)


class PortfolioView:
    """Reactive view over one wallet's token list."""

    def __init__(self, fetcher: PortfolioFetcher, chain: Optional[str] = None):
        self.fetcher = fetcher
        self.chain = chain
        self.address: Optional[str] = None
        self.state = ViewState.DISCONNECTED
        self.tokens: List[EnrichedToken] = []
        self.error: Optional[str] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def set_address(self, address: Optional[str]) -> None:
        """React to a wallet connect, disconnect or account switch."""
        self._generation += 1
        previous = self.address
        self.address = address or None
        self.error = None

        # Never show another wallet's holdings while the new ones load
        if self.address != previous:
            self.tokens = []

        if not self.address:
            self.tokens = []
            self.state = ViewState.DISCONNECTED
            return

        await self._load(self.address, self._generation)

    async def retry(self) -> None:
        """Re-issue the fetch for the current address after a failure."""
        if self.state is not ViewState.ERROR or not self.address:
            return
        self._generation += 1
        self.error = None
        await self._load(self.address, self._generation)

    async def _load(self, address: str, generation: int) -> None:
        self.state = ViewState.LOADING
        try:
            result = await self.fetcher.fetch(address, self.chain)
        except Exception as exc:
            if generation != self._generation:
                logger.debug("stale_portfolio_error_dropped", address=address, generation=generation)
                return
            logger.warning("portfolio_fetch_failed", address=address, error=str(exc))
            self.tokens = []
            self.error = str(exc)
            self.state = ViewState.ERROR
            return

        if generation != self._generation:
            logger.debug("stale_portfolio_dropped", address=address, generation=generation)
            return

        self.tokens = list(result.tokens)
        self.state = ViewState.LOADED

    @property
    def total_value(self) -> float:
        return total_value(self.tokens)

    def chart_slices(self) -> List[ChartSlice]:
        """Distribution of value across tokens with a positive USD value."""
        priced = [t for t in self.tokens if t.usd_value > 0]
        total = total_value(priced)
        if total <= 0:
            return []
        return [
            ChartSlice(label=token_label(t), value=t.usd_value, share=t.usd_value / total)
            for t in priced
        ]

    def table_rows(self) -> List[TableRow]:
        return [
            TableRow(
                name=t.name or PLACEHOLDER,
                symbol=t.symbol or PLACEHOLDER,
                balance=format_balance(t.balance),
                usd_price=format_usd(t.usd_price),
                usd_value=format_usd(t.usd_value),
                contract_address=t.contract_address,
                logo=t.logo,
            )
            for t in sort_by_value(self.tokens)
        ]
