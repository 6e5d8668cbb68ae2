"""
Solana address and .sol domain recognition for normalized forum text.

Addresses are plain base58 runs embedded in free text, so a naive match would
also pick up link paths, query strings and transaction signatures. Candidates
therefore go through a transaction-link pre-filter, a boundary-aware scan and
a URL-context filter before they are reported.
"""

import logging
import re
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

BASE58_CHARS = '1-9A-HJ-NP-Za-km-z'
MIN_ADDRESS_LENGTH = 32
MAX_ADDRESS_LENGTH = 44
URL_CONTEXT_WINDOW = 200

_ADDRESS_RE = re.compile(
    rf'(?<![{BASE58_CHARS}])([{BASE58_CHARS}]{{{MIN_ADDRESS_LENGTH},{MAX_ADDRESS_LENGTH}}})(?![{BASE58_CHARS}])'
)
_BASE58_ONLY_RE = re.compile(rf'^[{BASE58_CHARS}]+$')
_DIGITS_ONLY_RE = re.compile(r'^\d+$')

_TRANSACTION_LINK_PATTERNS = (
    re.compile(r'https?://\S*/(?:tx|transaction|confirmTransaction)/\S*', re.IGNORECASE),
    re.compile(r'https?://\S*/txs/\S*', re.IGNORECASE),
)

_URL_CONTEXT_PATTERNS = (
    re.compile(r'https?://', re.IGNORECASE),
    re.compile(r'www\.', re.IGNORECASE),
    re.compile(r'\.(?:com|org|net|io|co|me|tv|app|xyz|sol|scan|explorer)', re.IGNORECASE),
    re.compile(r'/tx/', re.IGNORECASE),
    re.compile(r'/address/', re.IGNORECASE),
)
_LINK_PREFIXES = ('/tx/', 'tx/', '/address/', 'address/')

_DOMAIN_RE = re.compile(r'(?<!\S)([A-Za-z0-9_-]+\.sol)(?=\s|$)')
_DOMAIN_LABEL_RE = re.compile(r'^[A-Za-z0-9_-]+$')

_SCRIPT_ADDRESS_RE = re.compile(r'const address = "([A-Za-z0-9]{32,44})"')


def _dedupe(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def remove_transaction_links(text: Optional[str]) -> str:
    """Replace explorer links that point at transactions with a single space."""
    if not text:
        return ''
    sanitized = text
    for pattern in _TRANSACTION_LINK_PATTERNS:
        sanitized = pattern.sub(' ', sanitized)
    return sanitized


def is_valid_address(candidate: Optional[str]) -> bool:
    """Syntactic check only: length, alphabet and not purely numeric."""
    if not candidate or not isinstance(candidate, str):
        return False
    if not MIN_ADDRESS_LENGTH <= len(candidate) <= MAX_ADDRESS_LENGTH:
        return False
    if not _BASE58_ONLY_RE.match(candidate):
        return False
    if _DIGITS_ONLY_RE.match(candidate):
        return False
    return True


def is_part_of_url(text: str, start: int, length: int) -> bool:
    """
    Check whether the candidate at text[start:start + length] sits inside a URL.

    Args:
        text: Full (pre-filtered) text the candidate was found in
        start: Index of the first candidate character
        length: Candidate length

    Returns:
        True if the surrounding context looks like a link
    """
    if text[:start].endswith(_LINK_PREFIXES):
        return True

    before = text[max(0, start - URL_CONTEXT_WINDOW):start]
    after = text[start + length:start + length + URL_CONTEXT_WINDOW]
    for window in (before, after):
        if any(pattern.search(window) for pattern in _URL_CONTEXT_PATTERNS):
            return True
    return False


def find_addresses(text: Optional[str]) -> List[str]:
    """
    Find Solana addresses in normalized text.

    Args:
        text: Normalized text, may be None or empty

    Returns:
        Unique addresses in first-occurrence order
    """
    if not text or not isinstance(text, str):
        return []

    sanitized = remove_transaction_links(text)
    addresses = []
    for match in _ADDRESS_RE.finditer(sanitized):
        candidate = match.group(1)
        if not is_valid_address(candidate):
            continue
        if is_part_of_url(sanitized, match.start(1), len(candidate)):
            continue
        addresses.append(candidate)

    addresses = _dedupe(addresses)
    if addresses:
        logger.debug(f"Found {len(addresses)} Solana addresses: {addresses}")
    return addresses


def find_domains(text: Optional[str]) -> List[str]:
    """
    Find .sol domains bounded by whitespace or the text edges.

    Args:
        text: Normalized text, may be None or empty

    Returns:
        Unique domains in first-occurrence order
    """
    if not text or not isinstance(text, str):
        return []

    domains = []
    for match in _DOMAIN_RE.finditer(text):
        domain = match.group(1)
        label = domain[:-len('.sol')]
        if label and _DOMAIN_LABEL_RE.match(label):
            domains.append(domain)

    domains = _dedupe(domains)
    if domains:
        logger.debug(f"Found {len(domains)} .sol domains: {domains}")
    return domains


def extract_wallet_info(script_text: Optional[str], page_text: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Pick the wallet address and domain a member page advertises.

    A `const address = "..."` declaration in the page scripts wins over
    anything recognized in the visible page text.

    Args:
        script_text: Concatenated text of the page's <script> elements
        page_text: Visible text of the page

    Returns:
        (address, domain), each None when nothing was recognized
    """
    address = None
    if script_text:
        match = _SCRIPT_ADDRESS_RE.search(script_text)
        if match:
            address = match.group(1)

    if address is None:
        addresses = find_addresses(page_text)
        if addresses:
            address = addresses[0]

    domains = find_domains(page_text)
    return address, (domains[0] if domains else None)
