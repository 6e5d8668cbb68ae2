"""
Multi-page topic crawling.
Detects pagination controls on the first page, fetches the remaining pages and
merges every page's replies into one ordered, deduplicated result.
"""

import dataclasses
import logging
import time
from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup

from .exceptions import PartialPageFailure
from .extractor import PageExtractor, parse_document
from .models import PageLink, Pagination, PostResult, PostStatistics, Reply


def detect_pagination(soup: BeautifulSoup) -> Pagination:
    """
    Read the page navigation controls of a topic page.

    Args:
        soup: Parsed first page of a topic

    Returns:
        Pagination; total_pages is the highest page number any control
        references, 1 when the page has no controls
    """
    pagination = Pagination()
    controls = soup.select('.page_normal, .page_current')
    if not controls:
        return pagination

    seen_pages = set()
    for control in controls:
        href = control.get('href')
        text = control.get_text().strip()
        if not href or not text.isdigit():
            continue
        page = int(text)
        if page in seen_pages:
            continue
        seen_pages.add(page)
        pagination.page_urls.append(PageLink(page=page, url=href if href.startswith('?') else f"?{href}"))

    current = soup.select_one('.page_current')
    if current is not None and current.get_text().strip().isdigit():
        pagination.current_page = int(current.get_text().strip())

    page_numbers = [link.page for link in pagination.page_urls] + [pagination.current_page]
    pagination.total_pages = max(page_numbers)
    pagination.has_multiple_pages = pagination.total_pages > 1
    return pagination


def merge_reply_pages(first_page: PostResult, page_replies: Dict[int, List[Reply]],
                      pagination: Pagination, failed_pages: Optional[List[int]] = None) -> PostResult:
    """
    Merge the replies of every fetched page into the first page's result.

    Args:
        first_page: Result assembled from page 1
        page_replies: Replies of pages 2..N keyed by page number
        pagination: Pagination detected on page 1
        failed_pages: Page numbers whose replies are missing

    Returns:
        A new PostResult; replies keep page order with repeated ids dropped
    """
    merged = []
    seen_ids = set()
    ordered = [first_page.replies] + [page_replies[page] for page in sorted(page_replies)]
    for replies in ordered:
        for reply in replies:
            if reply.id:
                if reply.id in seen_ids:
                    continue
                seen_ids.add(reply.id)
            merged.append(reply)

    user_ids = list(first_page.reply_user_ids)
    for reply in merged:
        if reply.author.id and reply.author.id not in user_ids:
            user_ids.append(reply.author.id)

    return dataclasses.replace(
        first_page,
        replies=merged,
        reply_user_ids=user_ids,
        statistics=PostStatistics.from_replies(
            merged,
            total_pages=pagination.total_pages,
            failed_pages=sorted(failed_pages or []),
        ),
        pagination=pagination,
    )


class TopicPaginator:
    """
    Crawls every page of a topic, one page at a time, with a fixed pause
    between page fetches.
    """

    def __init__(self, fetch: Callable[..., str], extractor: Optional[PageExtractor] = None,
                 page_delay: float = 1.0, sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            fetch: Transport callable, fetch(url, timeout=...) -> body text
            extractor: Page assembler shared with single-page parsing
            page_delay: Seconds to wait between page fetches
            sleep: Wait function, replaceable in tests
        """
        self.fetch = fetch
        self.extractor = extractor or PageExtractor()
        self.page_delay = page_delay
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)

    def crawl(self, topic_url: str, timeout: Optional[float] = None) -> PostResult:
        """
        Fetch and merge all pages of a topic.

        A failure on page 1 propagates; a failure on any later page is logged
        and that page's replies are left out.

        Args:
            topic_url: URL of the topic's first page (no query string)
            timeout: Per-fetch deadline forwarded to the transport

        Returns:
            Merged PostResult with pagination attached
        """
        self.logger.info(f"Fetching page 1: {topic_url}")
        soup = parse_document(self.fetch(topic_url, timeout=timeout))
        first_page = self.extractor.extract_post(soup, topic_url)
        pagination = detect_pagination(soup)
        self.logger.info(f"Detected {pagination.total_pages} page(s) for {topic_url}")

        page_replies = {}
        failed_pages = []
        for page in range(2, pagination.total_pages + 1):
            if self.page_delay > 0:
                self.sleep(self.page_delay)
            try:
                page_replies[page] = self._fetch_page_replies(topic_url, page, timeout)
            except PartialPageFailure as e:
                self.logger.warning(str(e))
                failed_pages.append(e.page)

        result = merge_reply_pages(first_page, page_replies, pagination, failed_pages)
        self.logger.info(
            f"Crawled {topic_url}: {result.statistics.reply_count} replies across "
            f"{pagination.total_pages} page(s), {len(result.reply_user_ids)} distinct repliers"
            + (f", {len(failed_pages)} page(s) failed" if failed_pages else "")
        )
        return result

    def _fetch_page_replies(self, topic_url: str, page: int, timeout: Optional[float]) -> List[Reply]:
        page_url = f"{topic_url}?p={page}"
        self.logger.info(f"Fetching page {page}: {page_url}")
        try:
            soup = parse_document(self.fetch(page_url, timeout=timeout))
            return self.extractor.extract_replies(soup)
        except Exception as e:
            raise PartialPageFailure(page, e) from e
