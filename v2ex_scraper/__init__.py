"""
V2EX Forum Scraper

Extracts member profiles, topics and threaded replies from V2EX pages and
returns normalized, JSON-ready records, including any Solana addresses and
.sol domains mentioned in the text.

The module-level functions delegate to a default client built on first use.
"""

from typing import Iterable, List, Optional

from .client import V2exClient
from .exceptions import (
    ConfigurationError,
    ExtractionFailedError,
    PartialPageFailure,
    ScrapingError,
    TransportError,
    UnsupportedPageKind,
)
from .models import BatchOutcome, PageResult, PostResult, ProfileResult
from .normalizer import normalize_fragment
from .orchestrator import BatchOptions
from .recognizer import find_addresses, find_domains

__version__ = "1.0.0"

_default_client: Optional[V2exClient] = None


def get_default_client() -> V2exClient:
    global _default_client
    if _default_client is None:
        _default_client = V2exClient()
    return _default_client


def parse_page(url: str, timeout: Optional[float] = None) -> PageResult:
    return get_default_client().parse_page(url, timeout=timeout)


def parse_user_info(username: str, timeout: Optional[float] = None) -> ProfileResult:
    return get_default_client().parse_user_info(username, timeout=timeout)


def parse_post(post_id: str, timeout: Optional[float] = None, use_multi_page: bool = True) -> PostResult:
    return get_default_client().parse_post(post_id, timeout=timeout, use_multi_page=use_multi_page)


def parse_multi_page_post(post_id: str, timeout: Optional[float] = None) -> PostResult:
    return get_default_client().parse_multi_page_post(post_id, timeout=timeout)


def parse_multiple_pages(urls: Iterable[str], options: Optional[BatchOptions] = None) -> List[BatchOutcome]:
    return get_default_client().parse_multiple_pages(urls, options)


def parse_multiple_users(usernames: Iterable[str], options: Optional[BatchOptions] = None) -> List[BatchOutcome]:
    return get_default_client().parse_multiple_users(usernames, options)


def parse_multiple_users_by_urls(usernames: Iterable[str],
                                 options: Optional[BatchOptions] = None) -> List[BatchOutcome]:
    return get_default_client().parse_multiple_users_by_urls(usernames, options)


def set_base_url(base_url: str):
    get_default_client().set_base_url(base_url)


def get_base_url() -> str:
    return get_default_client().get_base_url()


__all__ = [
    "BatchOptions",
    "BatchOutcome",
    "ConfigurationError",
    "ExtractionFailedError",
    "PartialPageFailure",
    "PostResult",
    "ProfileResult",
    "ScrapingError",
    "TransportError",
    "UnsupportedPageKind",
    "V2exClient",
    "find_addresses",
    "find_domains",
    "get_base_url",
    "get_default_client",
    "normalize_fragment",
    "parse_multi_page_post",
    "parse_multiple_pages",
    "parse_multiple_users",
    "parse_multiple_users_by_urls",
    "parse_page",
    "parse_post",
    "parse_user_info",
    "set_base_url",
]
