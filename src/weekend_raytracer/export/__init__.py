"""Image export."""

from .ppm import format_ppm, image_to_uint8, write_ppm

__all__ = ["image_to_uint8", "format_ppm", "write_ppm"]
