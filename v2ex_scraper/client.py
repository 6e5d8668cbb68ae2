"""
Caller-facing client for V2EX member and topic pages.
Wires configuration, transport, page assembly, pagination and batch runs together.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional

from .config_manager import ConfigManager
from .exceptions import ExtractionFailedError
from .extractor import PROFILE_PAGE, PageExtractor, classify_page, parse_document
from .models import BatchOutcome, PageResult, PostResult, ProfileResult
from .orchestrator import BatchOptions, BatchOrchestrator
from .paginator import TopicPaginator
from .scraper import Scraper

# Raised by selectors and field helpers when a document has an unexpected shape
_ASSEMBLY_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


class V2exClient:
    """
    Parses V2EX profile and topic pages into typed results.

    The base URL is held per client; changing it only affects URLs built
    afterwards.
    """

    def __init__(self, base_url: Optional[str] = None, config: Optional[ConfigManager] = None,
                 scraper: Optional[Scraper] = None, sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            base_url: Site root, overrides client.base_url from the config
            config: Loaded configuration (defaults when omitted)
            scraper: Transport; anything with fetch(url, timeout=None) -> str
            sleep: Wait function used for every pause, replaceable in tests
        """
        self.logger = logging.getLogger(__name__)
        self.config_manager = config or ConfigManager()
        self.client_config = self.config_manager.get_client_config()
        self.politeness_config = self.config_manager.get_politeness_config()
        self.batch_config = self.config_manager.get_batch_config()

        self._base_url = (base_url or self.client_config['base_url']).rstrip('/')
        self.scraper = scraper or Scraper(self.client_config, self.politeness_config)
        self.sleep = sleep
        self.extractor = PageExtractor()
        self.orchestrator = BatchOrchestrator(sleep=sleep)

    @property
    def base_url(self) -> str:
        return self._base_url

    @base_url.setter
    def base_url(self, value: str):
        self._base_url = value.rstrip('/')
        self.logger.info(f"Base URL updated to: {self._base_url}")

    def set_base_url(self, base_url: str):
        self.base_url = base_url

    def get_base_url(self) -> str:
        return self.base_url

    def _timeout(self, timeout: Optional[float]) -> float:
        return timeout if timeout is not None else self.politeness_config['timeout']

    def parse_page(self, url: str, timeout: Optional[float] = None) -> PageResult:
        """
        Fetch one member or topic page and assemble its result.

        Args:
            url: Member (/member/<name>) or topic (/t/<id>) URL
            timeout: Per-fetch deadline in seconds

        Returns:
            ProfileResult or PostResult

        Raises:
            UnsupportedPageKind: Before any fetch, if the URL is neither page type
            TransportError: If the fetch fails
            ExtractionFailedError: If the document cannot be assembled
        """
        kind = classify_page(url)
        soup = parse_document(self.scraper.fetch(url, timeout=self._timeout(timeout)))

        try:
            if kind == PROFILE_PAGE:
                return self.extractor.extract_profile(soup, url, self.base_url)
            return self.extractor.extract_post(soup, url)
        except _ASSEMBLY_ERRORS as e:
            raise ExtractionFailedError(f"Could not assemble {url}: {e}") from e

    def create_user_urls(self, usernames: Iterable[str]) -> List[str]:
        return [f"{self.base_url}/member/{username}" for username in usernames]

    def parse_user_info(self, username: str, timeout: Optional[float] = None) -> ProfileResult:
        """Parse the profile page of one member."""
        return self.parse_page(f"{self.base_url}/member/{username}", timeout=timeout)

    def parse_post(self, post_id: str, timeout: Optional[float] = None, use_multi_page: bool = True) -> PostResult:
        """
        Parse a topic by id.

        Args:
            post_id: Topic id
            timeout: Per-fetch deadline in seconds
            use_multi_page: Crawl and merge every page (default) or only the first
        """
        if use_multi_page:
            return self.parse_multi_page_post(post_id, timeout=timeout)
        return self.parse_page(f"{self.base_url}/t/{post_id}", timeout=timeout)

    def parse_multi_page_post(self, post_id: str, timeout: Optional[float] = None) -> PostResult:
        """Crawl every page of a topic and merge the replies."""
        paginator = TopicPaginator(
            fetch=self.scraper.fetch,
            extractor=self.extractor,
            page_delay=self.politeness_config['page_delay'],
            sleep=self.sleep,
        )
        topic_url = f"{self.base_url}/t/{post_id}"
        try:
            return paginator.crawl(topic_url, timeout=self._timeout(timeout))
        except _ASSEMBLY_ERRORS as e:
            raise ExtractionFailedError(f"Could not assemble {topic_url}: {e}") from e

    def batch_options(self, **overrides) -> BatchOptions:
        """Batch options from the configuration with keyword overrides."""
        return BatchOptions.from_config(self.politeness_config, self.batch_config, **overrides)

    def parse_multiple_pages(self, urls: Iterable[str], options: Optional[BatchOptions] = None) -> List[BatchOutcome]:
        """Parse many member/topic URLs; failures become outcomes instead of exceptions."""
        options = options or self.batch_options()
        return self.orchestrator.run(
            urls,
            lambda url: self.parse_page(url, timeout=options.timeout),
            options,
        )

    def parse_multiple_users(self, usernames: Iterable[str], options: Optional[BatchOptions] = None) -> List[BatchOutcome]:
        """Parse many member profiles by username."""
        options = options or self.batch_options()
        return self.orchestrator.run(
            usernames,
            lambda username: self.parse_user_info(username, timeout=options.timeout),
            options,
        )

    def parse_multiple_users_by_urls(self, usernames: Iterable[str],
                                     options: Optional[BatchOptions] = None) -> List[BatchOutcome]:
        """Parse many member profiles, reporting outcomes by profile URL."""
        return self.parse_multiple_pages(self.create_user_urls(usernames), options)

    def close(self):
        self.scraper.close()
