"""Host-side RGB image buffer.

The image is a NumPy float32 array of shape (height, width, 3). Row y = 0 is
the bottom row of the picture, matching the camera's t coordinate, so the
renderer can write pixel (x, y) directly into pixels[y, x]. Exporters are
responsible for flipping rows into top-to-bottom order.
"""

from dataclasses import dataclass, field

import numpy as np


@dataclass
class Image:
    """A width x height grid of linear RGB colors.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        pixels: Float32 array of shape (height, width, 3). Allocated and
            zero-filled on construction.
    """

    width: int
    height: int
    pixels: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        self.pixels = np.zeros((self.height, self.width, 3), dtype=np.float32)

    @property
    def shape(self) -> tuple[int, int]:
        """(height, width) of the pixel grid."""
        return self.height, self.width

    def get_pixel(self, x: int, y: int) -> tuple[float, float, float]:
        """Get the color at column x, row y (y = 0 is the bottom row)."""
        r, g, b = self.pixels[y, x]
        return float(r), float(g), float(b)

    def set_pixel(self, x: int, y: int, color: tuple[float, float, float]) -> None:
        """Set the color at column x, row y."""
        self.pixels[y, x] = color

    def fill(self, color: tuple[float, float, float]) -> None:
        """Set every pixel to the same color."""
        self.pixels[:, :] = color
