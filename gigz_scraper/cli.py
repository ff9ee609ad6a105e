import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import HttpUrl, TypeAdapter, ValidationError

from gigz_scraper.config import Settings
from gigz_scraper.scrapers.broadway.scraper import run_broadway_scraper

_http_url_adapter = TypeAdapter(HttpUrl)


def http_url(value: str) -> HttpUrl:
    """argparse type for absolute http(s) URLs."""
    try:
        return _http_url_adapter.validate_python(value)
    except ValidationError as e:
        raise argparse.ArgumentTypeError(f"invalid URL '{value}': {e.errors()[0]['msg']}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gigz-scraper",
        description="Scrape The Broadway show calendar into a JSON list of events.",
    )
    parser.add_argument("--output", type=Path, default=None,
                        help="Where to write the events JSON (default: events.json).")
    parser.add_argument("--url", type=http_url, default=None, help="Show calendar URL to start from.")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    headless_group = parser.add_mutually_exclusive_group()
    headless_group.add_argument("--headless", dest="headless", action="store_true", default=None,
                                help="Run the browser without a window.")
    headless_group.add_argument("--headed", dest="headless", action="store_false",
                                help="Run the browser with a visible window.")
    return parser


def settings_from_args(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    app_settings = base or Settings()
    if args.headless is not None:
        app_settings.scraper_globals.default_headless_browser = args.headless
    if args.url is not None:
        app_settings.scrapers_specific.broadway.target_url = args.url
    if args.log_level:
        app_settings.log_level = args.log_level
    if args.output is not None:
        app_settings.file_outputs.events_output_file = args.output
    return app_settings


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    app_settings = settings_from_args(args)
    asyncio.run(run_broadway_scraper(settings=app_settings))
    return 0


if __name__ == "__main__":
    sys.exit(main())
