"""Convenience script for printing the current top headlines as JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure the src directory is on the Python path so the newsflow package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from newsflow.config import Settings  # noqa: E402  (import after path setup)
from newsflow.errors import NewsFlowError  # noqa: E402
from newsflow.services.credentials import CredentialResolver, ProviderKind  # noqa: E402
from newsflow.services.headlines import HeadlineFetcher  # noqa: E402


def main(argv: list[str] | None = None) -> None:
    """Fetch one page of headlines (or search results) using the default NewsAPI key."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--category", help="Headline category, e.g. technology")
    parser.add_argument("--query", help="Search every article instead of top headlines")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--page-size", type=int, default=10)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    settings = Settings.from_env()
    resolver = CredentialResolver(news_api_key=settings.news_api_key)
    fetcher = HeadlineFetcher(
        settings.news_api_base_url, country=settings.news_country, timeout=settings.news_timeout
    )

    try:
        api_key = resolver.resolve(None, ProviderKind.NEWS)
        if args.query:
            result = fetcher.search(api_key, args.query, args.page, args.page_size)
        else:
            result = fetcher.top_headlines(api_key, args.category, args.page, args.page_size)
    except NewsFlowError as exc:
        logging.error("Could not fetch headlines: %s", exc.message)
        sys.exit(1)

    logging.info("Fetched %d of %d articles", len(result.articles), result.total_results)
    print(json.dumps(result.model_dump(by_alias=True), indent=2))


if __name__ == "__main__":
    main()
