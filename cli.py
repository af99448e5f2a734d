#!/usr/bin/env python3
"""Simple CLI for viewing a wallet portfolio locally"""

import argparse
import asyncio
import sys
from typing import Optional

from defi_portfolio.api.balances import get_balance_aggregator
from defi_portfolio.logging_config import setup_logging
from defi_portfolio.view import AggregatorFetcher, HttpFetcher, PortfolioView, ViewState

BAR_WIDTH = 30


def print_portfolio(view: PortfolioView):
    """Pretty print the view: summary total, value distribution and holdings table"""
    if view.state is ViewState.ERROR:
        print(f"❌ Error: {view.error}")
        return
    if view.state is not ViewState.LOADED:
        print("❌ No portfolio data available")
        return

    print("\n📊 Portfolio")
    print("=" * 60)
    print(f"Connected: {view.address}")
    print(f"Total Portfolio Value: ${view.total_value:,.2f}")

    if not view.tokens:
        print("\nNo tokens found for this address.")
        return

    slices = view.chart_slices()
    if slices:
        print("\nDistribution:")
        print("-" * 60)
        for s in slices:
            bar = "█" * max(1, round(s.share * BAR_WIDTH))
            print(f"{s.label:<10} {bar:<{BAR_WIDTH}} {s.share * 100:5.1f}%")

    print("\nTokens:")
    print("-" * 60)
    print(f"{'Token':<20} {'Symbol':<8} {'Balance':>16} {'USD Price':>12} {'USD Value':>14}")
    for row in view.table_rows():
        print(f"{row.name[:20]:<20} {row.symbol[:8]:<8} {row.balance:>16} {row.usd_price:>12} {row.usd_value:>14}")
        print(f"    {row.contract_address}")


async def cli_portfolio(address: str, chain: Optional[str] = None, api_url: Optional[str] = None):
    """CLI command to get portfolio"""
    if api_url:
        fetcher = HttpFetcher(api_url)
    else:
        fetcher = AggregatorFetcher(get_balance_aggregator())

    view = PortfolioView(fetcher, chain=chain)
    print(f"🔍 Fetching portfolio for {address}...")
    await view.set_address(address)
    print_portfolio(view)
    return 1 if view.state is ViewState.ERROR else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DeFi Portfolio Tracker CLI")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run")
    subparsers = parser.add_subparsers(dest="command")

    portfolio_parser = subparsers.add_parser("portfolio", help="Show token holdings and USD value")
    portfolio_parser.add_argument("address", help="Wallet address")
    portfolio_parser.add_argument("--chain", default=None, help="Network (default: ethereum)")
    portfolio_parser.add_argument(
        "--api-url",
        default=None,
        help="Query a running API (e.g. http://localhost:8000) instead of calling providers directly",
    )

    return parser


async def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(log_level=args.log_level or "WARNING")

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "portfolio":
        return await cli_portfolio(args.address, args.chain, args.api_url)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
