"""Plain-text PPM (P3) export for rendered images.

The file layout is:

    P3
    <width> <height>
    255
    R G B R G B ...        <- top row (y = height - 1)
    ...
    R G B R G B ...        <- bottom row (y = 0)

Each channel is quantized as int(256 * clamp(c, 0, 0.999)), which maps
[0, 1) onto 0..255 in equal-width buckets.

Example:
    >>> from weekend_raytracer.export.ppm import write_ppm
    >>> write_ppm(image, "image.ppm")
"""

from __future__ import annotations

import os

import numpy as np
import numpy.typing as npt

from weekend_raytracer.core.image import Image

# Largest channel value before quantization
MAX_CHANNEL_VALUE = 0.999

PPM_MAX_VALUE = 255


def image_to_uint8(image: Image) -> npt.NDArray[np.uint8]:
    """Quantize an image to 8-bit channels in top-to-bottom row order.

    Args:
        image: The image to convert. Values outside [0, 0.999] are clamped.

    Returns:
        Array of shape (height, width, 3), dtype uint8, whose first row is
        the top of the picture.
    """
    clamped = np.clip(image.pixels, 0.0, MAX_CHANNEL_VALUE)
    # NaN survives np.clip; treat it as black
    clamped = np.nan_to_num(clamped, nan=0.0)
    quantized = (256.0 * clamped).astype(np.uint8)
    return np.flipud(quantized)


def format_ppm(image: Image) -> str:
    """Render an image as the text of a P3 PPM file."""
    rows = image_to_uint8(image)
    lines = ["P3", f"{image.width} {image.height}", str(PPM_MAX_VALUE)]
    for row in rows:
        lines.append(" ".join(f"{r} {g} {b}" for r, g, b in row))
    return "\n".join(lines) + "\n"


def write_ppm(image: Image, filepath: str | os.PathLike) -> None:
    """Write an image to a P3 PPM file.

    Args:
        image: The image to save.
        filepath: Output file path (conventionally ending in .ppm).

    Raises:
        OSError: If the file cannot be written.
    """
    with open(filepath, "w", encoding="ascii") as f:
        f.write(format_ppm(image))
