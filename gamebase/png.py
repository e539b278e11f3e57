"""Loading and saving of RGBA PNG images."""

from __future__ import annotations

import enum
from typing import Tuple

import numpy as np
from PIL import Image


class Origin(enum.Enum):
    """Which image row comes first in a pixel array."""

    LOWER_LEFT = "lower_left"
    UPPER_LEFT = "upper_left"


def _to_rgba(img: Image.Image) -> np.ndarray:
    if img.mode == "I" or img.mode.startswith("I;16"):
        # 16-bit grey: keep the high byte, as stripping to 8 bits does.
        wide = np.asarray(img).astype(np.int64)
        gray = np.clip(wide >> 8, 0, 255).astype(np.uint8)
        alpha = np.full_like(gray, 0xFF)
        return np.stack([gray, gray, gray, alpha], axis=-1)
    return np.array(img.convert("RGBA"), dtype=np.uint8)


def load_png(filename, origin: Origin) -> Tuple[Tuple[int, int], np.ndarray]:
    """Load a PNG file as 8-bit RGBA.

    Returns ``((width, height), pixels)`` where ``pixels`` has shape
    ``(height, width, 4)``; with ``Origin.LOWER_LEFT`` the bottom row of the
    image comes first. Raises OSError if the file cannot be opened and
    ValueError if it does not hold a readable PNG image.
    """
    try:
        handle = open(filename, "rb")
    except OSError as exc:
        raise OSError(f"Failed to open PNG image file '{filename}'.") from exc

    with handle:
        try:
            with Image.open(handle) as img:
                is_png = img.format == "PNG"
                if is_png:
                    img.load()
                    pixels = _to_rgba(img)
        except (OSError, SyntaxError, ValueError) as exc:
            raise ValueError(f"Failed to read PNG image from '{filename}'.") from exc
    if not is_png:
        raise ValueError(f"Failed to read PNG image from '{filename}'.")

    if origin is Origin.LOWER_LEFT:
        pixels = pixels[::-1]
    height, width = pixels.shape[:2]
    return (width, height), np.ascontiguousarray(pixels)


def save_png(filename, size, pixels, origin: Origin) -> None:
    """Save ``width * height`` RGBA pixels to a PNG file.

    ``pixels`` may be flat or shaped ``(height, width, 4)``; with
    ``Origin.LOWER_LEFT`` its first row is the bottom of the image.
    """
    width, height = size
    data = np.asarray(pixels, dtype=np.uint8)
    if data.size != width * height * 4:
        raise ValueError(
            f"expected {width}x{height} RGBA pixels, got {data.size} values"
        )
    rows = data.reshape(height, width, 4)
    if origin is Origin.LOWER_LEFT:
        rows = rows[::-1]
    Image.fromarray(np.ascontiguousarray(rows)).save(filename, format="PNG")