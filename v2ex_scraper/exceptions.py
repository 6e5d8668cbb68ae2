"""
Custom exception classes for granular error handling throughout the scraper.
"""


class ScrapingError(Exception):
    """Base exception for all scraping-related errors."""
    pass


class ConfigurationError(ScrapingError):
    """Raised when there are issues with configuration files or settings."""
    pass


class UnsupportedPageKind(ScrapingError):
    """Raised when a URL is neither a member profile nor a topic page."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Unsupported page type for {url}: expected a member page (/member/) or a topic page (/t/)"
        )


class TransportError(ScrapingError):
    """Raised for network-related issues (timeouts, connection failures, HTTP errors)."""
    pass


class ExtractionFailedError(ScrapingError):
    """Raised when a fetched document cannot be assembled into a result."""
    pass


class PartialPageFailure(ScrapingError):
    """Raised when one page of a multi-page topic could not be fetched or parsed."""

    def __init__(self, page: int, cause: Exception):
        self.page = page
        self.cause = cause
        super().__init__(f"Failed to fetch page {page}: {cause}")
