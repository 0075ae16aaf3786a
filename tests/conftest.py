from __future__ import annotations

import io
import time
from typing import Any, Callable, Dict, Iterator, List, Optional

import pytest
import requests
from PIL import Image

from slidemap.modules.asset_resolver import AssetResolver, encode_data_uri


def _make_png() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


PNG_BYTES = _make_png()


class FakeResponse:
    def __init__(
        self,
        content: bytes = b"",
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
        payload: Any = None,
        chunk_size: int = 0,
        chunk_delay: float = 0.0,
    ) -> None:
        self.content = content
        self.status_code = status_code
        self.headers = headers or {}
        self._payload = payload
        self._chunk_size = chunk_size
        self._chunk_delay = chunk_delay
        self.closed = False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        step = self._chunk_size or chunk_size
        for start in range(0, len(self.content), step):
            if self._chunk_delay:
                time.sleep(self._chunk_delay)
            yield self.content[start:start + step]

    def close(self) -> None:
        self.closed = True

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeSession:
    """Routes GET/POST by URL to canned responses or callables; records calls."""

    def __init__(self, routes: Optional[Dict[str, Any]] = None) -> None:
        self.routes = routes or {}
        self.calls: List[Dict[str, Any]] = []

    def _respond(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(url, **kwargs)
        return route

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._respond(url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._respond(url, **kwargs)


def png_response(delay: float = 0.0, content: bytes = PNG_BYTES) -> Callable[..., FakeResponse]:
    def respond(url: str, **kwargs: Any) -> FakeResponse:
        if delay:
            time.sleep(delay)
        return FakeResponse(content=content, headers={"Content-Type": "image/png"})
    return respond


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def png_data_uri() -> str:
    return encode_data_uri(PNG_BYTES, "image/png")


@pytest.fixture
def offline_resolver() -> AssetResolver:
    """Resolver whose every HTTP request fails."""
    return AssetResolver(session=FakeSession(), max_workers=4)


@pytest.fixture
def sample_template() -> Dict[str, Any]:
    return {
        "name": "Test",
        "style": {"bgColor": "F0F0F0", "textColor": "112233", "fontFamily": "Verdana", "fontSize": 18},
        "layouts": [
            {
                "type": "title",
                "title": {"x": 0.5, "y": 2, "w": 9, "h": 1, "fontSize": 36, "bold": True},
                "subtitle": {"x": 0.5, "y": 3.1, "w": 9, "h": 0.6},
            },
            {
                "type": "bulleted-list",
                "title": {"x": 0.5, "y": 0.3, "w": 9, "h": 0.7},
                "bullets": {"x": 0.5, "y": 1.2, "w": 9, "h": 4},
            },
            {
                "type": "chart",
                "fontSize": 11,
                "title": {"x": 0.5, "y": 0.3, "w": 9, "h": 0.7},
                "chart": {"x": 1, "y": 1.2, "w": 8, "h": 4},
            },
            {
                "type": "table",
                "borderColor": "336699",
                "title": {"x": 0.5, "y": 0.3, "w": 9, "h": 0.7},
            },
            {
                "type": "comparison",
                "title": {"x": 0.5, "y": 0.3, "w": 9, "h": 0.7},
                "leftTitle": {"x": 0.5, "y": 1.2, "w": 4, "h": 0.6},
                "leftDescription": {"x": 0.5, "y": 1.9, "w": 4, "h": 3},
                "rightTitle": {"x": 5, "y": 1.2, "w": 4, "h": 0.6},
                "rightDescription": {"x": 5, "y": 1.9, "w": 4, "h": 3},
            },
            {
                "type": "three-images-with-description",
                "title": {"x": 0.5, "y": 0.3, "w": 9, "h": 0.7},
                "images": [
                    {"x": 0.5, "y": 1.2, "w": 2.8, "h": 2.4},
                    {"x": 3.6, "y": 1.2, "w": 2.8, "h": 2.4},
                ],
                "description": {"x": 0.5, "y": 3.9, "w": 9, "h": 1.2},
            },
            {
                "type": "image",
                "title": {"x": 0.5, "y": 0.3, "w": 9, "h": 0.7},
                "imageUrl": {"x": 1.5, "y": 1.1, "w": 7, "h": 3.6},
                "caption": {"x": 1.5, "y": 4.8, "w": 7, "h": 0.5},
            },
        ],
    }


@pytest.fixture
def make_session() -> Callable[..., FakeSession]:
    return FakeSession


@pytest.fixture
def make_response() -> Callable[..., FakeResponse]:
    return FakeResponse


@pytest.fixture
def make_png_response() -> Callable[..., Callable[..., FakeResponse]]:
    return png_response
