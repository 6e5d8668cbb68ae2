"""
Network-facing transport for the scraper.
Handles HTTP requests with browser-like headers and maps failures to TransportError.
"""

import logging
from typing import Dict, Optional

import requests

from .exceptions import TransportError


class Scraper:
    """
    Thin HTTP transport: one GET per call, bounded by a timeout.
    Retries and pacing are decided by the callers, not here.
    """

    def __init__(self, client_config: Optional[Dict] = None, politeness_config: Optional[Dict] = None):
        """Initialize the session from the client and politeness settings."""
        self.client_config = client_config or {}
        self.politeness_config = politeness_config or {}
        self.session = requests.Session()
        self.logger = logging.getLogger(__name__)
        self.default_timeout = self.politeness_config.get('timeout', 10)

        self._setup_session()

    def _setup_session(self):
        """Configure the requests session with realistic browser headers."""
        self.session.headers.update({
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
            'Accept-Language': self.client_config.get('accept_language', 'zh-CN,zh;q=0.9,en;q=0.8'),
            'Cache-Control': 'max-age=0',
            'Sec-Fetch-Dest': 'document',
            'Sec-Fetch-Mode': 'navigate',
            'Sec-Fetch-Site': 'same-origin',
            'Sec-Fetch-User': '?1',
            'Upgrade-Insecure-Requests': '1',
        })
        user_agent = self.client_config.get('user_agent')
        if user_agent:
            self.session.headers['User-Agent'] = user_agent

    def fetch(self, url: str, timeout: Optional[float] = None) -> str:
        """
        Fetch a URL and return the response body as text.

        Args:
            url: The URL to fetch
            timeout: Per-request deadline in seconds (defaults to politeness.timeout)

        Returns:
            Response body text

        Raises:
            TransportError: On timeout, connection failure or an HTTP error status
        """
        timeout = timeout if timeout is not None else self.default_timeout

        try:
            self.logger.debug(f"Fetching: {url} (timeout={timeout}s)")
            response = self.session.get(url, timeout=timeout)
        except requests.exceptions.Timeout as e:
            self.logger.warning(f"Timed out after {timeout}s fetching {url}")
            raise TransportError(f"Timed out after {timeout}s fetching {url}") from e
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Network error fetching {url}: {e}")
            raise TransportError(f"Failed to fetch {url}: {e}") from e

        if response.status_code >= 400:
            self.logger.warning(f"HTTP {response.status_code} for {url}")
            raise TransportError(f"HTTP {response.status_code} fetching {url}")

        if not response.encoding:
            response.encoding = response.apparent_encoding or 'utf-8'

        self.logger.debug(f"Fetched {url} ({len(response.content)} bytes), encoding: {response.encoding}")
        return response.text

    def close(self):
        """Clean up resources."""
        self.session.close()
