"""
Link Preview Service - Open Graph Metadata for News Links

Fetches an external page and extracts the title, description and image the
news cards show next to each article link.

Key Features:
- Metadata lookup order: Open Graph, then Twitter cards, then plain meta tags
  and <title>
- Whitespace in title/description collapsed to single spaces
- Image URLs stripped of query string and fragment, resolved against the page
- Failures never propagate: the caller gets an empty preview for the URL

Caching:
LinkPreviewCache is an explicit object owned by the caller (the FastAPI app
keeps one on app.state). Entries expire after ttl_seconds; expiry is checked
when an entry is read and expired entries are removed then; storing an entry
also prunes expired ones and, with max_entries set, evicts the oldest entries
of a full cache. There is no background sweep. Fallback previews are never
cached, so a failed fetch is retried on the next request.
"""

import logging
import random
import re
import time
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from forecast_dashboard.models.schemas import LinkPreview

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_CACHE_TTL_SECONDS: int = 300
DEFAULT_CACHE_MAX_ENTRIES: int = 1000
DEFAULT_TIMEOUT_SECONDS: float = 15.0

USER_AGENTS = [
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36',
    'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36',
]

BROWSER_HEADERS: Dict[str, str] = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
    'Sec-Fetch-Dest': 'document',
    'Sec-Fetch-Mode': 'navigate',
    'Sec-Fetch-Site': 'none',
    'Cache-Control': 'max-age=0',
}

# (attribute, value) pairs of <meta> tags, in lookup order
TITLE_SELECTORS = [
    ('property', 'og:title'),
    ('name', 'twitter:title'),
    ('name', 'title'),
]
DESCRIPTION_SELECTORS = [
    ('property', 'og:description'),
    ('name', 'twitter:description'),
    ('name', 'description'),
    ('property', 'description'),
]
IMAGE_SELECTORS = [
    ('property', 'og:image'),
    ('name', 'twitter:image'),
    ('name', 'twitter:image:src'),
    ('property', 'twitter:image'),
]

WHITESPACE_PATTERN = re.compile(r'\s+')


# =============================================================================
# CACHE
# =============================================================================

class LinkPreviewCache:
    """
    Time-based cache of link previews keyed by URL.

    Expired entries are removed when read and whenever a new entry is stored.
    With max_entries set, storing into a full cache evicts the oldest entries.

    Example:
        >>> cache = LinkPreviewCache(ttl_seconds=300)
        >>> cache.set(url, preview)
        >>> cache.get(url)  # preview until 300 seconds have passed, then None
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        max_entries: Optional[int] = DEFAULT_CACHE_MAX_ENTRIES,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # Insertion order is storage order; set() re-inserts refreshed URLs
        self._entries: Dict[str, Tuple[LinkPreview, float]] = {}

    def get(self, url: str) -> Optional[LinkPreview]:
        entry = self._entries.get(url)
        if entry is None:
            return None
        preview, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[url]
            return None
        return preview

    def set(self, url: str, preview: LinkPreview) -> None:
        now = self._clock()
        self._entries.pop(url, None)
        self.prune(now)
        if self.max_entries is not None:
            while self._entries and len(self._entries) >= self.max_entries:
                del self._entries[next(iter(self._entries))]
        self._entries[url] = (preview, now)

    def prune(self, now: Optional[float] = None) -> int:
        """Remove expired entries; returns how many were removed."""
        now = self._clock() if now is None else now
        expired = [url for url, (_, stored_at) in self._entries.items() if now - stored_at >= self.ttl_seconds]
        for url in expired:
            del self._entries[url]
        if expired:
            logger.debug(f"Pruned {len(expired)} expired link previews")
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# =============================================================================
# EXTRACTION
# =============================================================================

def is_valid_url(url: Optional[str]) -> bool:
    """True for absolute http(s) URLs."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def clean_text(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    cleaned = WHITESPACE_PATTERN.sub(' ', value).strip()
    return cleaned or None


def clean_image_url(image: Optional[str], page_url: str) -> Optional[str]:
    """Image URL without query/fragment, made absolute against page_url."""
    if not image:
        return None
    stripped = image.split('?')[0].split('#')[0].strip()
    if not stripped:
        return None
    try:
        return urljoin(page_url, stripped)
    except ValueError:
        return None


def _first_meta(soup: BeautifulSoup, selectors) -> Optional[str]:
    for attribute, value in selectors:
        tag = soup.find('meta', attrs={attribute: value})
        if tag is not None and tag.get('content'):
            return tag['content']
    return None


def extract_preview(html: str, url: str) -> LinkPreview:
    """
    Build a LinkPreview from a page's HTML.

    Args:
        html: Page markup.
        url: Page URL; relative image URLs are resolved against it.
    """
    soup = BeautifulSoup(html, 'html.parser')

    title = _first_meta(soup, TITLE_SELECTORS)
    if not title and soup.title is not None:
        title = soup.title.get_text()

    return LinkPreview(
        url=url,
        title=clean_text(title),
        description=clean_text(_first_meta(soup, DESCRIPTION_SELECTORS)),
        image=clean_image_url(_first_meta(soup, IMAGE_SELECTORS), url),
    )


def fetch_link_preview(
    url: str,
    cache: Optional[LinkPreviewCache] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> LinkPreview:
    """
    Preview of `url`, from the cache when fresh.

    Args:
        url: Absolute http(s) URL of the page.
        cache: Cache to read and fill; None disables caching.
        timeout: HTTP timeout in seconds.

    Returns:
        The extracted preview, or LinkPreview(url=url) with empty metadata
        when the page cannot be fetched or parsed.
    """
    if cache is not None:
        cached = cache.get(url)
        if cached is not None:
            return cached

    headers = dict(BROWSER_HEADERS)
    headers['User-Agent'] = random.choice(USER_AGENTS)

    try:
        response = requests.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
        preview = extract_preview(response.text, url)
    except Exception as e:
        logger.error(f"Error fetching link preview for {url}: {e}")
        return LinkPreview(url=url)

    if cache is not None:
        cache.set(url, preview)
    return preview
