"""
Command-line interface for the change-detection crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from sitewatch.config import DEFAULT_SNAPSHOT_DIR, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, CrawlConfig
from sitewatch.core import CrawlStats, PageResult, crawl
from sitewatch.errors import InvalidUrl, StoreIOError
from sitewatch.fingerprints import PageStatus


def print_summary(stats: CrawlStats) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Total pages crawled:    {stats.pages_crawled}\n")
    sys.stderr.write(f"New pages:              {stats.status_counts.get(PageStatus.NEW, 0)}\n")
    sys.stderr.write(f"Changed pages:          {stats.status_counts.get(PageStatus.CHANGED, 0)}\n")
    sys.stderr.write(f"Unchanged pages:        {stats.status_counts.get(PageStatus.UNCHANGED, 0)}\n")
    sys.stderr.write(f"Failed fetches:         {stats.status_counts.get(PageStatus.FETCH_FAILED, 0)}\n\n")

    if stats.error_counts:
        sys.stderr.write("Errors by type:\n")
        for error_type, count in sorted(stats.error_counts.items()):
            label = "Connection errors" if error_type == "connection_error" else f"HTTP {error_type}"
            sys.stderr.write(f"  {label}: {count}\n")
        sys.stderr.write("\n")

    if stats.changes_detected:
        sys.stderr.write("Changes detected.\n")
    else:
        sys.stderr.write("No changes detected across all pages.\n")


def results_to_json(results: List[PageResult], pretty: bool = False) -> str:
    payload = []
    for r in results:
        row = asdict(r)
        row["status"] = r.status.value
        payload.append(row)
    return json.dumps(payload, ensure_ascii=False, indent=2 if pretty else None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitewatch",
        description="Crawl a site from a seed URL and report which pages changed since the last run.",
    )
    parser.add_argument("seed_url", help="Seed URL; also limits the crawl scope (e.g. https://example.com/docs)")
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT,
        help=f"Per-page request timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--snapshot-dir", default=DEFAULT_SNAPSHOT_DIR,
        help=f"Directory holding page fingerprints between runs (default: {DEFAULT_SNAPSHOT_DIR})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--max-pages", type=int, help="Stop after this many pages (default: no limit)")
    parser.add_argument("--out", help="Write JSON results to this path, or '-' for stdout")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--quiet", action="store_true", help="Only print the summary")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the sitewatch CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = CrawlConfig(
            seed_url=args.seed_url,
            fetch_timeout=args.timeout,
            snapshot_dir=args.snapshot_dir,
            user_agent=args.user_agent,
            max_pages=args.max_pages,
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        results, stats = crawl(config, verbose=not args.quiet)
    except InvalidUrl as e:
        sys.stderr.write(f"Invalid seed URL: {e.reason}\n")
        return 1
    except StoreIOError as e:
        sys.stderr.write(f"\nAborting: {e}\n")
        return 1

    print_summary(stats)

    if args.out:
        json_text = results_to_json(results, pretty=args.pretty)
        if args.out == "-":
            print(json_text)
        else:
            output_path = Path(args.out)
            try:
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_text(json_text, encoding="utf-8")
            except OSError as e:
                sys.stderr.write(f"Could not write results to {output_path}: {e}\n")
                return 1
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
