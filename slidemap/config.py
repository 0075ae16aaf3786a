"""
Central configuration for slidemap.

This module provides the settings shared by the rendering pipeline and
its collaborators: package paths, the slide canvas, image fetch limits
and the .env loader used for API keys.
"""
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# Base paths
PACKAGE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_DIR.parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"
OUTPUT_DIR = Path.cwd() / "output"
ENV_FILE = PROJECT_ROOT / ".env"


def load_env_file(env_path: Path = ENV_FILE) -> bool:
    """
    Load environment variables from a .env file.

    Existing environment variables are never overridden.

    Returns:
        True if a file was read.
    """
    if not env_path.exists():
        logger.debug(f".env file not found at: {env_path}")
        return False

    logger.info(f"Loading API keys from: {env_path}")
    with open(env_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                # Only set if not empty and not already set
                if value and not os.environ.get(key):
                    os.environ[key] = value
    return True


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


# Slide canvas (16:9, in inches)
SLIDE_WIDTH_INCHES = 10.0
SLIDE_HEIGHT_INCHES = 5.625

# Image fetching
IMAGE_FETCH_TIMEOUT = _env_float("SLIDEMAP_IMAGE_TIMEOUT", 15.0)  # seconds
IMAGE_FETCH_WORKERS = _env_int("SLIDEMAP_IMAGE_WORKERS", 4)
IMAGE_MAX_BYTES = _env_int("SLIDEMAP_IMAGE_MAX_BYTES", 10 * 1024 * 1024)
IMAGE_SEARCH_TIMEOUT = 10.0

# Content generation
MAX_OUTLINE_ITEMS = _env_int("SLIDEMAP_MAX_OUTLINE_ITEMS", 5)
DEFAULT_PROVIDER = os.environ.get("SLIDEMAP_LLM_PROVIDER", "cohere")

# Export
DEFAULT_FILE_NAME = "Generated_Presentation"
FILE_EXTENSION = ".pptx"


def print_config_status():
    """Print configuration status for debugging."""
    print("=" * 60)
    print("slidemap Configuration")
    print("=" * 60)
    print(f"Package Dir:   {PACKAGE_DIR}")
    print(f"Templates Dir: {TEMPLATES_DIR} (exists: {TEMPLATES_DIR.exists()})")
    print(f"Output Dir:    {OUTPUT_DIR}")
    print(f".env File:     {ENV_FILE} (exists: {ENV_FILE.exists()})")
    print("-" * 60)
    print(f"Canvas: {SLIDE_WIDTH_INCHES} x {SLIDE_HEIGHT_INCHES} in")
    print(f"Image Timeout: {IMAGE_FETCH_TIMEOUT}s")
    print(f"Image Workers: {IMAGE_FETCH_WORKERS}")
    print(f"Image Max Bytes: {IMAGE_MAX_BYTES}")
    print(f"Max Outline Items: {MAX_OUTLINE_ITEMS}")
    print(f"LLM Provider: {DEFAULT_PROVIDER}")
    print("=" * 60)


if __name__ == "__main__":
    print_config_status()
