"""
cli.py

Usage:
    sitemeta <URL> [<URL> ...] [-o output.json] [--policy auto|api|client]

Resolves link-card metadata for each URL and writes it as JSON.
"""

import argparse
import json
import logging
import sys

from sitemeta.config import get_settings
from sitemeta.models import ResolutionPolicy
from sitemeta.services.metadata_fetcher import WebsiteParser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Resolve title, description and icon for URLs.")
    parser.add_argument("urls", nargs="+", help="The URLs to resolve")
    parser.add_argument("-o", "--output", help="Path to JSON output file (default: stdout)")
    parser.add_argument(
        "--policy",
        choices=[policy.value for policy in ResolutionPolicy],
        help="Which strategy to prefer",
    )
    parser.add_argument("--timeout-ms", type=int, help="Per-strategy timeout in milliseconds")
    parser.add_argument("--retries", type=int, help="Retry budget when every strategy fails")
    parser.add_argument(
        "--no-shortcut",
        action="store_true",
        help="Fetch known sites instead of using their curated metadata",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    resolver = WebsiteParser(settings=settings)
    records = resolver.resolve_many(
        args.urls,
        policy=args.policy,
        timeout_ms=args.timeout_ms,
        retry_budget=args.retries,
        known_site_shortcut=False if args.no_shortcut else None,
    )

    output = json.dumps([record.to_payload() for record in records], ensure_ascii=False, indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Metadata for {len(records)} URL(s) saved to {args.output}")
    else:
        print(output)
    return 1 if any(record.error for record in records) else 0


if __name__ == "__main__":
    sys.exit(main())
