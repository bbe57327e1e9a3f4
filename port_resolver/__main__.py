"""Command-line port check.

Usage:
    python -m port_resolver "Hilo, HI"
    python -m port_resolver "Port of Seattle" --limit 3 --offline
    python -m port_resolver --clear-cache

Prints the local results and the unified (local + online) results as
JSON so the scorer and thresholds can be checked against real labels.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional, Sequence

from .config import configure_logging
from .container import get_container
from .domain.models import PortEntry
from .services import PortResolverService, PortsCacheService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="port_resolver",
        description="Resolve a free-text port label to coordinates.",
    )
    parser.add_argument("query", nargs="?", help="Port label, e.g. 'Hilo, HI'")
    parser.add_argument("--limit", type=int, default=5, help="Maximum results (default: 5)")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not query the online geocoder",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete the persisted ports cache before searching",
    )
    return parser


def _rows(entries: Sequence[PortEntry]) -> List[Dict[str, Any]]:
    return [e.to_dict() for e in entries]


async def run(args: argparse.Namespace) -> Dict[str, Any]:
    container = get_container()
    ports_cache = container.resolve(PortsCacheService)
    resolver = container.resolve(PortResolverService)

    output: Dict[str, Any] = {}
    if args.clear_cache:
        await ports_cache.clear()
        output["cacheCleared"] = True
    if not args.query:
        return output

    snapshot = await ports_cache.load()
    scored = resolver.search_ports_scored(args.query, snapshot, args.limit)
    output["query"] = args.query
    output["local"] = [
        {**s.entry.to_dict(), "score": round(s.score, 3)} for s in scored
    ]
    output["unified"] = _rows(
        await resolver.unified_port_search(
            args.query,
            snapshot,
            limit=args.limit,
            allow_online=not args.offline,
        )
    )
    return output


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.query and not args.clear_cache:
        parser.error("a query or --clear-cache is required")

    configure_logging()
    output = asyncio.run(run(args))
    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
