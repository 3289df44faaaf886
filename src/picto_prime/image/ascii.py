"""Convert pictures to digit strings and back to digit pictures.

A picture becomes a grid of digits by sampling its luminance and picking a
digit from a light-to-dark palette. The default palette ``7772299408`` runs
from sparse-looking digits (7, 2) to dense ones (0, 8).
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import numpy as np

DEFAULT_PIXELS = "7772299408"

# Terminal cells are roughly twice as tall as they are wide.
CELL_ASPECT = 2.0


def _apply_contrast(gray: np.ndarray, contrast: float) -> np.ndarray:
    """Stretch grey levels around the midpoint; contrast is in [-1, 1]."""
    if not -1.0 <= contrast <= 1.0:
        raise ValueError(f"contrast must be between -1.0 and 1.0, got {contrast}")
    if contrast == 1.0:
        return np.where(gray >= 127.5, 255.0, 0.0)
    factor = (1.0 + contrast) / (1.0 - contrast)
    return np.clip((gray - 127.5) * factor + 127.5, 0.0, 255.0)


def luminance_to_digits(
    gray: np.ndarray,
    pixels: str = DEFAULT_PIXELS,
) -> List[str]:
    """Map a 2D luminance array (0 = black) to rows of palette digits.

    Args:
        gray: 2D array of grey levels in [0, 255].
        pixels: Palette ordered light to dark.

    Returns:
        One string per image row.
    """
    if not pixels or not pixels.isdigit():
        raise ValueError(f"pixels must be a non-empty digit string, got {pixels!r}")
    gray = np.asarray(gray, dtype=np.float64)
    if gray.ndim != 2:
        raise ValueError(f"expected a 2D array, got shape {gray.shape}")

    darkness = 1.0 - gray / 255.0
    indices = np.minimum((darkness * len(pixels)).astype(np.int64), len(pixels) - 1)
    palette = np.array(list(pixels))
    return [''.join(row) for row in palette[indices]]


def image_to_digits(
    path: str | Path,
    pixels: str = DEFAULT_PIXELS,
    width: int = 32,
    contrast: float = 0.1,
) -> str:
    """Render an image file as a block of digits.

    Args:
        path: Image file readable by Pillow.
        pixels: Palette ordered light to dark.
        width: Number of digits per row.
        contrast: Extra contrast between -1.0 and 1.0.

    Returns:
        Rows of digits joined by newlines.
    """
    from PIL import Image

    if width < 1:
        raise ValueError(f"width must be >= 1, got {width}")

    with Image.open(path) as im:
        gray = im.convert("L")
        height = max(1, round(width * gray.height / gray.width / CELL_ASPECT))
        gray = gray.resize((width, height), Image.LANCZOS)
        data = np.asarray(gray, dtype=np.float64)

    data = _apply_contrast(data, contrast)
    return "\n".join(luminance_to_digits(data, pixels))


def format_digit_picture(digits: str, width: int) -> str:
    """Wrap a digit string into rows of ``width`` characters."""
    if width < 1:
        raise ValueError(f"width must be >= 1, got {width}")
    return "\n".join(digits[i:i + width] for i in range(0, len(digits), width))
