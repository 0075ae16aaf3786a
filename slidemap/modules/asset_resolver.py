"""
Asset Resolver Module

Turns an image reference (remote http(s) URL or inline data URI) into an
inline `data:<type>;base64,...` payload that can be embedded in a deck.

Resolution never raises: any failure yields a 1x1 transparent PNG and a
log record, so one broken image cannot abort deck generation. Anything that
is neither inline nor http(s) is rejected without touching the filesystem.
Downloads are bounded by a byte cap and an overall deadline.

Usage:
    resolver = AssetResolver()
    payload = resolver.resolve("https://example.com/cat.jpg")
    payloads = resolver.resolve_many([url1, url2, url3])  # input order kept
"""

import base64
import binascii
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Tuple

import requests

from .. import config

logger = logging.getLogger(__name__)

INLINE_PREFIX = "data:"
DEFAULT_CONTENT_TYPE = "image/png"
CHUNK_SIZE = 64 * 1024

# 1x1 transparent PNG
PLACEHOLDER_IMAGE = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/x8AAwMCAO8X1hQAAAAASUVORK5CYII="
)


def is_inline(reference: str) -> bool:
    """True for self-describing inline payloads."""
    return isinstance(reference, str) and reference.startswith(INLINE_PREFIX)


def is_remote(reference: str) -> bool:
    return isinstance(reference, str) and reference.lower().startswith(("http://", "https://"))


def encode_data_uri(data: bytes, content_type: Optional[str] = None) -> str:
    """Encode binary content as an inline data URI."""
    content_type = content_type or DEFAULT_CONTENT_TYPE
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """
    Split a data URI into (content_type, bytes).

    Raises:
        ValueError: if the payload is not a base64 data URI
    """
    if not is_inline(uri) or "," not in uri:
        raise ValueError("not a data URI")
    header, payload = uri[len(INLINE_PREFIX):].split(",", 1)
    parts = header.split(";")
    if "base64" not in parts[1:]:
        raise ValueError("only base64 data URIs are supported")
    content_type = parts[0] or DEFAULT_CONTENT_TYPE
    try:
        return content_type, base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 payload: {e}") from e


def sniff_content_type(data: bytes) -> str:
    """Detect an image type from its header bytes."""
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if data[:2] == b"\xff\xd8":
        return "image/jpeg"
    if data[:4] == b"GIF8":
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:2] == b"BM":
        return "image/bmp"
    return DEFAULT_CONTENT_TYPE


class AssetResolver:
    """Resolves image references to inline payloads, fail-soft."""

    def __init__(
        self,
        timeout: float = None,
        max_workers: int = None,
        session: Optional[requests.Session] = None,
        cache: Optional[Dict[str, str]] = None,
        max_bytes: int = None
    ):
        """
        Initialize the resolver.

        Args:
            timeout: Overall download deadline in seconds (config default)
            max_workers: Thread pool size for resolve_many
            session: Optional requests session (for connection reuse or tests)
            cache: Optional shared cache {reference: payload}
            max_bytes: Largest accepted image body
        """
        self.timeout = timeout if timeout is not None else config.IMAGE_FETCH_TIMEOUT
        self.max_workers = max_workers or config.IMAGE_FETCH_WORKERS
        self.max_bytes = max_bytes or config.IMAGE_MAX_BYTES
        self.session = session or requests.Session()
        self._cache: Dict[str, str] = cache if cache is not None else {}
        self._lock = threading.Lock()
        self.failures = 0

    def resolve(self, reference: str) -> str:
        """
        Resolve one reference to an inline payload.

        Args:
            reference: data URI or http(s) URL

        Returns:
            A data URI; PLACEHOLDER_IMAGE on any failure
        """
        if is_inline(reference):
            return reference
        if not isinstance(reference, str) or not reference.strip():
            return self._fail(reference, "empty reference")

        reference = reference.strip()
        if not is_remote(reference):
            return self._fail(reference, "not an http(s) URL or data URI")

        with self._lock:
            cached = self._cache.get(reference)
        if cached is not None:
            logger.debug(f"Using cached image: {reference}")
            return cached

        payload = self._fetch(reference)
        if payload is None:
            return PLACEHOLDER_IMAGE

        with self._lock:
            self._cache[reference] = payload
        return payload

    def resolve_many(self, references: List[str]) -> List[str]:
        """
        Resolve several references in parallel.

        Returns:
            Payloads in the same order as `references`
        """
        if not references:
            return []
        if len(references) == 1:
            return [self.resolve(references[0])]

        results: List[Optional[str]] = [None] * len(references)
        workers = min(self.max_workers, len(references))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(self.resolve, ref): i
                for i, ref in enumerate(references)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except Exception as e:
                    # resolve() is fail-soft; this only guards against bugs
                    logger.error(f"Image {index} failed unexpectedly: {e}")
                    results[index] = PLACEHOLDER_IMAGE

        return results

    def _fetch(self, url: str) -> Optional[str]:
        deadline = time.monotonic() + self.timeout
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
            try:
                response.raise_for_status()
                data = self._read_body(response, deadline)
                headers = response.headers
            finally:
                response.close()
        except (requests.RequestException, ValueError) as e:
            self._fail(url, e)
            return None

        if not data:
            self._fail(url, "empty response body")
            return None

        content_type = headers.get("Content-Type", "").split(";", 1)[0].strip()
        content_type = content_type or sniff_content_type(data)
        logger.info(f"Fetched image: {url} ({len(data)} bytes, {content_type})")
        return encode_data_uri(data, content_type)

    def _read_body(self, response, deadline: float) -> bytes:
        """
        Read a streamed body within the byte cap and the overall deadline.

        Raises:
            ValueError: if the body is too large or arrives too slowly
        """
        chunks = []
        size = 0
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            size += len(chunk)
            if size > self.max_bytes:
                raise ValueError(f"image larger than {self.max_bytes} bytes")
            if time.monotonic() > deadline:
                raise ValueError(f"download exceeded {self.timeout}s")
            chunks.append(chunk)
        return b"".join(chunks)

    def _fail(self, reference, reason) -> str:
        with self._lock:
            self.failures += 1
        logger.error(f"Failed to load image {reference!r}: {reason}")
        return PLACEHOLDER_IMAGE
