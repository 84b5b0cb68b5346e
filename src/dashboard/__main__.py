"""
Console Dashboard

Renders one dashboard tab as text against a running analytics API.
Usage:
    python -m src.dashboard --tab temporal --start 2024-01-01 --end 2024-01-31 --stores 1,2
"""

import argparse
import asyncio
from datetime import date

from src.config import get_settings
from src.config.logging import configure_logging
from src.dashboard.client import AnalyticsClient
from src.dashboard.controller import DashboardController
from src.dashboard.state import DashboardState, Tab
from src.dashboard.views import render_text


def _id_list(value: str):
    return tuple(int(part) for part in value.split(",") if part.strip())


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Restaurant analytics console dashboard")
    parser.add_argument("--base-url", help="Analytics API base URL")
    parser.add_argument("--tab", choices=[t.value for t in Tab], default=Tab.OVERVIEW.value)
    parser.add_argument("--start", type=date.fromisoformat, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", type=date.fromisoformat, help="End date (YYYY-MM-DD)")
    parser.add_argument("--stores", type=_id_list, help="Comma-separated store ids")
    parser.add_argument("--channels", type=_id_list, help="Comma-separated channel ids")
    parser.add_argument("--limit", type=int, help="Number of products in the ranking")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, transport=None) -> str:
    settings = get_settings()
    state = DashboardState(
        today=date.today(),
        default_days=settings.reports.default_range_days,
        product_limit=settings.reports.product_limit,
    )
    state.edit(
        start_date=args.start,
        end_date=args.end,
        store_ids=args.stores,
        channel_ids=args.channels,
    )
    state.apply_filters()
    if args.limit:
        state.set_product_limit(args.limit)
        state.apply_product_limit()
    state.switch_tab(Tab(args.tab))

    async with AnalyticsClient(base_url=args.base_url, transport=transport) as client:
        controller = DashboardController(client, state)
        await controller.start()
        return render_text(controller.render())


def main(argv=None) -> None:
    configure_logging(log_format="text")
    print(asyncio.run(run(parse_args(argv))))


if __name__ == "__main__":
    main()
