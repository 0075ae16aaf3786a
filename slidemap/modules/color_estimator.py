"""
Dominant-Color Estimator

Derives a background gradient from a template's cover image: the three
most frequent pixel colours, ignoring near-black and near-white pixels.
"""

import io
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

from PIL import Image

logger = logging.getLogger(__name__)

# R+G+B brightness bounds; pixels outside are ignored
MIN_BRIGHTNESS = 50
MAX_BRIGHTNESS = 660
TOP_COLORS = 3

RGB = Tuple[int, int, int]


@dataclass
class Gradient:
    """Ordered dominant colours; empty means the white fallback."""
    colors: List[RGB] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return not self.colors

    def css(self) -> str:
        if not self.colors:
            return "white"
        stops = ", ".join(f"rgb({r},{g},{b})" for r, g, b in self.colors)
        return f"linear-gradient(to bottom right, {stops})"

    def hex_colors(self) -> List[str]:
        return [f"{r:02X}{g:02X}{b:02X}" for r, g, b in self.colors]


def estimate_gradient(pixels: Iterable[Sequence[int]]) -> Gradient:
    """
    Rank pixel colours by frequency.

    Args:
        pixels: RGB or RGBA tuples (alpha is ignored)

    Returns:
        Gradient of up to three colours, most frequent first; equally
        frequent colours keep first-encounter order
    """
    counts: Counter = Counter()
    for pixel in pixels:
        r, g, b = pixel[0], pixel[1], pixel[2]
        brightness = r + g + b
        if brightness < MIN_BRIGHTNESS or brightness > MAX_BRIGHTNESS:
            continue
        counts[(r, g, b)] += 1

    return Gradient(colors=[color for color, _ in counts.most_common(TOP_COLORS)])


def estimate_image_gradient(source: Union[str, Path, bytes, Image.Image]) -> Gradient:
    """
    Estimate the gradient of an image file, raw bytes or PIL image.

    An unreadable image yields the white fallback.
    """
    try:
        if isinstance(source, Image.Image):
            img = source
        elif isinstance(source, bytes):
            img = Image.open(io.BytesIO(source))
        else:
            img = Image.open(source)
        rgb = img.convert("RGB")
    except Exception as e:
        logger.warning(f"Could not read image for colour estimate: {e}")
        return Gradient()

    gradient = estimate_gradient(rgb.getdata())
    logger.debug(f"Estimated gradient: {gradient.css()}")
    return gradient
