"""
URL helpers for the context tree.
Identity is a string-level pre-pass, not full URL canonicalization.
"""

import logging
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """
    Strip exactly one trailing slash.

    No case folding, no query/fragment stripping, no scheme defaulting:
    "https://a.com/" and "https://a.com" are the same node, "https://A.com"
    is not.
    """
    return url[:-1] if url.endswith("/") else url


def extract_domain(url: str) -> str:
    """
    Get the domain key (scheme://host) used for attachment decisions.

    A URL that parses always gets scheme://host, even when either part is
    empty: "about:blank" is "about://" and "a.com/1" is "://". Only a URL
    that fails to parse uses the raw string as its key, so it matches no
    well-formed URL.

    Args:
        url: Already-normalized URL

    Returns:
        Domain key
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname or ""
    except ValueError as e:
        logger.warning(f"Could not parse URL for domain extraction '{url}': {e}")
        return url

    return f"{parts.scheme}://{host}"


def same_domain(first_url: str, second_url: str) -> bool:
    """Check whether two normalized URLs share a domain key."""
    return extract_domain(first_url) == extract_domain(second_url)
