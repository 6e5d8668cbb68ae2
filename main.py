#!/usr/bin/env python3
"""
Command-line entry point for the V2EX forum scraper.
Parses member profiles and topics and writes the JSON results.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from v2ex_scraper.client import V2exClient
from v2ex_scraper.config_manager import ConfigManager
from v2ex_scraper.exceptions import ScrapingError


def setup_logging(log_level: str = "INFO", log_file: str = None):
    """Configure console (and optional file) logging."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=log_format,
        datefmt=date_format,
        handlers=handlers,
    )

    # Suppress overly verbose external library logs
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="V2EX forum scraper - profiles, topics and replies as JSON"
    )
    parser.add_argument("--config", "-c", default=None, help="Path to a YAML configuration file")
    parser.add_argument("--base-url", default=None, help="Site root, e.g. https://global.v2ex.co")
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    parser.add_argument("--output", "-o", default=None, help="Write the JSON result to this file instead of stdout")
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config, INFO)"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    page = commands.add_parser("page", help="Parse a single member or topic URL")
    page.add_argument("url")

    user = commands.add_parser("user", help="Parse a member profile by username")
    user.add_argument("username")

    post = commands.add_parser("post", help="Parse a topic by id")
    post.add_argument("post_id")
    post.add_argument("--single-page", action="store_true", help="Only parse the first page of replies")

    users = commands.add_parser("users", help="Parse many member profiles")
    users.add_argument("usernames", nargs="+")
    users.add_argument("--delay", type=float, default=None, help="Seconds between users")
    users.add_argument("--retry-count", type=int, default=None, help="Retries per user after the first attempt")
    users.add_argument("--quiet", action="store_true", help="Do not log per-user progress")

    pages = commands.add_parser("pages", help="Parse many member or topic URLs")
    pages.add_argument("urls", nargs="+")
    pages.add_argument("--delay", type=float, default=None, help="Seconds between URLs")
    pages.add_argument("--retry-count", type=int, default=None, help="Retries per URL after the first attempt")
    pages.add_argument("--quiet", action="store_true", help="Do not log per-URL progress")

    return parser


def run_command(client: V2exClient, args):
    """Run the selected command and return a JSON-ready value."""
    if args.command == "page":
        return client.parse_page(args.url, timeout=args.timeout).to_dict()
    if args.command == "user":
        return client.parse_user_info(args.username, timeout=args.timeout).to_dict()
    if args.command == "post":
        return client.parse_post(args.post_id, timeout=args.timeout, use_multi_page=not args.single_page).to_dict()

    overrides = {}
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.delay is not None:
        overrides["delay"] = args.delay
    if args.retry_count is not None:
        overrides["retry_count"] = args.retry_count
    if args.quiet:
        overrides["show_progress"] = False
    options = client.batch_options(**overrides)

    if args.command == "users":
        outcomes = client.parse_multiple_users(args.usernames, options)
    else:
        outcomes = client.parse_multiple_pages(args.urls, options)
    return [outcome.to_dict() for outcome in outcomes]


def main(argv=None):
    """Main execution function."""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigManager(args.config)
    except ScrapingError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logging_config = config.get_logging_config()
    setup_logging(args.log_level or logging_config.get("level", "INFO"), logging_config.get("log_file"))
    logger = logging.getLogger(__name__)

    client = V2exClient(base_url=args.base_url, config=config)
    try:
        result = run_command(client, args)
        payload = json.dumps(result, ensure_ascii=False, indent=2)
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            logger.info(f"Results saved to: {args.output}")
        else:
            print(payload)
        return 0

    except KeyboardInterrupt:
        logger.info("Scraping interrupted by user")
        return 1

    except ScrapingError as e:
        logger.error(f"Scraping failed: {e}")
        return 1

    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
