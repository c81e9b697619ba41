"""
Quantized RGB color histogram extraction.

Each channel keeps only its top `depth` bits, and the three quantized
values are packed into one bucket index:

    index = (r_q << 2*depth) + (g_q << depth) + b_q

so a histogram has 2 ** (3 * depth) buckets (512 at the default depth
of 3). Counts are divided by the pixel count, giving a probability
distribution over quantized colors that histogram intersection can
compare directly.
"""

import os
import logging
from dataclasses import dataclass

import numpy as np

from .preprocessing import (
    EmptyImageError,
    HistogramError,
    ImageDecodeError,
    channel_bit_width,
    load_image,
    to_rgb,
)

logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 3
MAX_DEPTH = 8

__all__ = [
    "DEFAULT_DEPTH",
    "MAX_DEPTH",
    "EmptyImageError",
    "Histogram",
    "HistogramError",
    "ImageDecodeError",
    "bucket_count",
    "compute_histogram",
    "extract_histogram",
]


def bucket_count(depth: int) -> int:
    """Number of histogram buckets for a per-channel bit depth."""
    return 1 << (3 * depth)


@dataclass(frozen=True, eq=False)
class Histogram:
    """Normalized color histogram of one image."""

    name: str
    depth: int
    buckets: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "buckets", np.array(self.buckets, dtype=np.float64))
        if len(self.buckets) != bucket_count(self.depth):
            raise ValueError(
                f"Histogram {self.name!r} has {len(self.buckets)} buckets, "
                f"expected {bucket_count(self.depth)} for depth {self.depth}"
            )
        self.buckets.setflags(write=False)

    def __len__(self) -> int:
        return len(self.buckets)


def compute_histogram(image_np: np.ndarray,
                      name: str,
                      depth: int = DEFAULT_DEPTH) -> Histogram:
    """
    Build a normalized color histogram from a decoded raster.

    Args:
        image_np: RGB (or grayscale) uint8/uint16 image.
        name: Identifier stored on the histogram.
        depth: Bits kept per channel.

    Returns:
        Histogram with 2 ** (3 * depth) float64 buckets summing to 1.0.

    Raises:
        EmptyImageError: If the image has no pixels.
        ValueError: If depth exceeds the image's bit width or is < 1.
    """
    rgb = to_rgb(image_np)
    bits = channel_bit_width(rgb)
    if not 1 <= depth <= bits:
        raise ValueError(f"depth must be in [1, {bits}], got {depth}")

    total_pixels = rgb.shape[0] * rgb.shape[1]
    if total_pixels == 0:
        raise EmptyImageError(f"Image {name!r} has no pixels")

    shift = bits - depth
    quantized = (rgb >> shift).astype(np.int64)
    index = (
        (quantized[:, :, 0] << (2 * depth))
        + (quantized[:, :, 1] << depth)
        + quantized[:, :, 2]
    )

    counts = np.bincount(index.ravel(), minlength=bucket_count(depth))
    buckets = counts.astype(np.float64) / total_pixels

    return Histogram(name=name, depth=depth, buckets=buckets)


def extract_histogram(image_path: str, depth: int = DEFAULT_DEPTH) -> Histogram:
    """
    Decode an image file and compute its histogram.

    The histogram is named after the file's base name.

    Raises:
        ImageDecodeError: If the file cannot be read or decoded.
        EmptyImageError: If the decoded image has no pixels.
    """
    image = load_image(image_path)
    histogram = compute_histogram(image, os.path.basename(image_path), depth)
    logger.debug(f"Histogram computed for {histogram.name}: {image.shape[1]}x{image.shape[0]}")
    return histogram
