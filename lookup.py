#!/usr/bin/env python3
"""
LinkedIn Lookup - CLI

Fetch a LinkedIn people profile or company page as JSON. The formal API is
tried first; private profiles and API outages fall back to a Playwright
browser, and a profile's current company is looked up as well unless
--skip-company-scraping is given.

Usage:
    python lookup.py <LINKEDIN_URL> [OPTIONS]

Example:
    python lookup.py https://www.linkedin.com/in/johndoe/
    python lookup.py https://www.linkedin.com/company/acme/ --headless false
"""

import argparse
import asyncio
import json
import logging
import sys

from linkedin_lookup_pkg.config import LookupSettings
from linkedin_lookup_pkg.models import LookupRequest
from linkedin_lookup_pkg.orchestrator import LinkedInLookup
from linkedin_lookup_pkg.scraper_logging import init_logging


logger = logging.getLogger("lookup")


async def run_lookup(request: LookupRequest, settings: LookupSettings) -> dict:
    lookup = LinkedInLookup(settings)
    try:
        return await lookup.get_company_or_people_details(
            request.url,
            force_people_scraping=request.force_people_scraping,
            skip_company_scraping=request.skip_company_scraping,
        )
    finally:
        await lookup.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="LinkedIn Lookup - profile and company details via API with browser fallback",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s https://www.linkedin.com/in/johndoe/
  %(prog)s https://www.linkedin.com/in/johndoe/ --force-people-scraping
  %(prog)s https://www.linkedin.com/in/johndoe/ --skip-company-scraping -o johndoe.json
        """
    )
    parser.add_argument(
        "url",
        help="LinkedIn profile, company or school URL"
    )
    parser.add_argument(
        "--force-people-scraping",
        action="store_true",
        help="Scrape the profile page in the browser instead of calling the API"
    )
    parser.add_argument(
        "--skip-company-scraping",
        action="store_true",
        help="Do not follow the profile's current company"
    )
    parser.add_argument(
        "--headless",
        type=lambda x: x.lower() in ("true", "1", "yes"),
        default=None,
        help="Run browser in headless mode (default: SCRAPER_HEADLESS or true)"
    )
    parser.add_argument(
        "--cookies",
        help="Path to cookies.json file. If not specified, uses LINKEDIN_COOKIES_PATH"
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Output file path (JSON format). If not specified, prints to stdout"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)"
    )
    return parser


def main(argv=None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    init_logging(args.log_level)

    if not args.url.startswith("http"):
        args.url = f"https://{args.url}"
    if "linkedin.com" not in args.url:
        logger.error("URL must be a LinkedIn URL: %s", args.url)
        return 1

    request = LookupRequest(
        url=args.url,
        force_people_scraping=args.force_people_scraping,
        skip_company_scraping=args.skip_company_scraping,
        headless=args.headless,
    )
    settings = LookupSettings.from_env(headless=request.headless, cookies_file=args.cookies)

    try:
        result = asyncio.run(run_lookup(request, settings))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except Exception as e:
        logger.error("Fatal error: %s", e)
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2)
        logger.info("Results saved to: %s", args.output)
    else:
        print(json.dumps(result, indent=2))

    return 1 if "error" in result else 0


if __name__ == "__main__":
    sys.exit(main())
