"""Repository URL helpers: extraction from web pages, filtering, resolution."""

import re
from urllib.parse import urlsplit

import httpx

from stars.config import GITHUB_HOST
from stars.exceptions import InvalidTargetError, ServerError, ValidationError
from stars.logging import get_logger

logger = get_logger("urls")

# First path segments that are GitHub pages rather than owners
RESERVED_SEGMENTS = frozenset({"trending", "site", "privacy", "terms"})

_URL_RE = re.compile(r"https?://[^\s<>\"'`(){}\[\]|\\^]+", re.IGNORECASE)
_TRAILING = ".,;:!?"


def repository_path(url: str) -> tuple[str, str]:
    """
    Resolve a repository URL to (owner, name).

    Raises:
        InvalidTargetError: If the path is not exactly two non-empty segments
    """
    parts = urlsplit(str(url)).path.strip("/").split("/")
    if len(parts) != 2 or not all(parts):
        raise InvalidTargetError(str(url))
    return parts[0], parts[1]


def extract_urls(text: str) -> list[str]:
    """Find every http(s) URL in a block of text, without duplicates."""
    found = (match.group(0).rstrip(_TRAILING) for match in _URL_RE.finditer(text))
    return list(dict.fromkeys(found))


def is_repository_url(url: str, host: str = GITHUB_HOST) -> bool:
    parsed = urlsplit(url)
    parts = parsed.path.strip("/").split("/")
    return (
        parsed.hostname == host
        and len(parts) == 2
        and all(parts)
        and not RESERVED_SEGMENTS.intersection(parts)
    )


def filter_github_urls(urls: list[str], host: str = GITHUB_HOST) -> list[str]:
    """Keep only owner/name repository URLs on the given GitHub host."""
    return [url for url in urls if is_repository_url(url, host)]


def fetch_urls(page_url: str, client: httpx.Client | None = None) -> list[str]:
    """
    Download a web page and return every URL it mentions.

    Raises:
        ValidationError: If page_url is not an http(s) URL, or the page
            has no URLs
        ServerError: If the page cannot be downloaded
    """
    if urlsplit(page_url).scheme not in ("http", "https"):
        raise ValidationError("INVALID_URL", f"invalid URL {page_url}")

    owns_client = client is None
    client = client or httpx.Client(follow_redirects=True, timeout=30.0)
    try:
        response = client.get(page_url)
    except httpx.RequestError as e:
        raise ServerError("CONNECTION_ERROR", f"could not fetch {page_url}: {e}") from e
    finally:
        if owns_client:
            client.close()

    if response.status_code != 200:
        raise ServerError(
            f"HTTP_{response.status_code}",
            f"received unsuccessful response from {page_url}",
        )

    urls = extract_urls(response.text)
    if not urls:
        raise ValidationError("NO_URLS", f"no URLs found at {page_url}")

    logger.info("Discovered %d URLs at %s", len(urls), page_url)
    return urls
