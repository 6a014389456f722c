# flake8: noqa E402
# Run via uv for access to dev deps, e.g.:
# uv run scripts/provider_probe.py BTC ETH SUI
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure the src directory is importable when the script is invoked via uv/python directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import config
from services.price_service import build_default_sources


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Query every price provider independently and report outcomes.")
    parser.add_argument("symbols", nargs="+", help="Asset symbols to look up.")
    parser.add_argument("--verbose", action="store_true", help="Enable INFO logging from the sources.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    for rank, source in enumerate(build_default_sources(config()), start=1):
        outcome = source.fetch(args.symbols)
        missing = [symbol for symbol in args.symbols if symbol not in outcome.prices]
        print(f"[{rank}] {source.name}: {outcome.status.value}" + (f" ({outcome.reason})" if outcome.reason else ""))
        for symbol, quote in outcome.prices.items():
            print(f"    {symbol}: usd={quote.usd} 7d={quote.usd_7d_change}")
        if missing:
            print(f"    unresolved: {', '.join(missing)}")


if __name__ == "__main__":
    main()
