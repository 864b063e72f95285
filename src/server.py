"""Protean Engine runner for the storefront domain.

In production (``PROTEAN_ENV=production``) events are processed
asynchronously; the Engine picks them up and runs the OrderSummary and
DailyOrderStats projectors.

Usage:
    python src/server.py
    python src/server.py --test-mode   # Drain pending events and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


def _get_domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


async def run(test_mode=False):
    engine = Engine(_get_domain(), test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="FreshCart storefront Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending events once and exit",
    )
    args = parser.parse_args()

    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
