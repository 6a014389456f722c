from __future__ import annotations

import argparse
import json
import logging
from typing import Sequence

from services.price_service import build_default_service


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Resolve USD prices through the provider fallback chain.")
    parser.add_argument("symbols", nargs="+", help="Asset symbols, e.g. BTC ETH SUI.")
    parser.add_argument("--show-source", action="store_true", help="Include the provider that served each quote.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING).")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")

    service = build_default_service()
    quotes = service.resolve(args.symbols)

    output: dict[str, dict[str, object]] = {}
    for symbol, quote in quotes.items():
        entry: dict[str, object] = dict(quote.to_dict())
        if args.show_source:
            entry["source"] = quote.source
        output[symbol] = entry
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
