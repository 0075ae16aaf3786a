"""
Image Search Integration

Finds an image URL for a free-text query, used to fill image slots of a
generated content map.

Usage:
    from slidemap.modules.image_search import ImageSearch

    search = ImageSearch()
    url = search.find_url("solar panels")
    payload = search.fetch_image("solar panels")  # always a data URI

Environment Variables:
    GOOGLE_API_KEY, GOOGLE_CX: Google Custom Search (image search engine)
    PEXELS_API_KEY: API key for Pexels (https://www.pexels.com/api/)
"""

import logging
import os
import threading
from typing import Dict, List, Optional
from urllib.parse import urljoin

import requests

from .. import config
from .asset_resolver import PLACEHOLDER_IMAGE, AssetResolver

logger = logging.getLogger(__name__)


# =============================================================================
# API Providers
# =============================================================================

class GoogleImageProvider:
    """Google Custom Search JSON API, image search mode."""

    name = "google"
    BASE_URL = "https://www.googleapis.com/customsearch/v1"

    def __init__(self, api_key: str, cx: str, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.cx = cx
        self.session = session or requests.Session()

    def search(self, query: str) -> Optional[str]:
        """
        Return the link of the first image hit, or None.

        Args:
            query: Search keywords
        """
        params = {
            "key": self.api_key,
            "cx": self.cx,
            "searchType": "image",
            "num": 1,
            "q": query,
        }
        try:
            response = self.session.get(self.BASE_URL, params=params, timeout=config.IMAGE_SEARCH_TIMEOUT)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Google image search error: {e}")
            return None

        items = data.get("items") or []
        if not items:
            return None
        return items[0].get("link")


class PexelsProvider:
    """Pexels API provider."""

    name = "pexels"
    BASE_URL = "https://api.pexels.com/v1/"

    def __init__(self, api_key: str, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.headers = {"Authorization": api_key}
        self.session = session or requests.Session()

    def search(self, query: str, size: str = "large") -> Optional[str]:
        """
        Return the first photo URL for a query, or None.

        Args:
            query: Search keywords
            size: Pexels `src` variant to return
        """
        try:
            response = self.session.get(
                urljoin(self.BASE_URL, "search"),
                headers=self.headers,
                params={"query": query, "per_page": 1},
                timeout=config.IMAGE_SEARCH_TIMEOUT
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Pexels API error: {e}")
            return None

        photos = data.get("photos") or []
        if not photos:
            return None
        src = photos[0].get("src") or {}
        return src.get(size) or src.get("original")


# =============================================================================
# Unified Search
# =============================================================================

class ImageSearch:
    """
    Image search across the configured providers.

    Results (including misses) are cached per query for the lifetime of
    the instance.
    """

    def __init__(
        self,
        providers: Optional[List] = None,
        resolver: Optional[AssetResolver] = None
    ):
        """
        Initialize image search.

        Args:
            providers: Explicit providers; built from environment keys when omitted
            resolver: Asset resolver used by fetch_image
        """
        self.providers = providers if providers is not None else self._providers_from_env()
        self.resolver = resolver or AssetResolver()
        self._cache: Dict[str, Optional[str]] = {}
        self._lock = threading.Lock()

        if not self.providers:
            logger.warning(
                "No image search providers configured. "
                "Set GOOGLE_API_KEY and GOOGLE_CX, or PEXELS_API_KEY."
            )

    @staticmethod
    def _providers_from_env() -> List:
        providers = []
        google_key = os.getenv("GOOGLE_API_KEY")
        google_cx = os.getenv("GOOGLE_CX")
        if google_key and google_cx:
            providers.append(GoogleImageProvider(google_key, google_cx))
            logger.info("Google image provider initialized")
        pexels_key = os.getenv("PEXELS_API_KEY")
        if pexels_key:
            providers.append(PexelsProvider(pexels_key))
            logger.info("Pexels provider initialized")
        return providers

    @property
    def is_available(self) -> bool:
        """Check if any provider is available."""
        return len(self.providers) > 0

    def find_url(self, query: str) -> Optional[str]:
        """
        First image URL any provider returns for the query.

        Returns:
            URL, or None for an empty query or no hit
        """
        if not query or not query.strip():
            return None
        query = query.strip()

        with self._lock:
            if query in self._cache:
                logger.debug(f"Image search cache hit: {query}")
                return self._cache[query]

        url = None
        for provider in self.providers:
            url = provider.search(query)
            if url:
                logger.info(f"Found image for '{query}' via {provider.name}")
                break

        with self._lock:
            self._cache[query] = url
        return url

    def fetch_image(self, query: str) -> str:
        """Search and download an image as an inline payload; never fails."""
        url = self.find_url(query)
        if not url:
            return PLACEHOLDER_IMAGE
        return self.resolver.resolve(url)
