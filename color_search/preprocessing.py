"""
Image decoding and normalization for histogram extraction.

Decodes image files with OpenCV into RGB rasters and exposes the
per-channel bit width, so the extractor can quantize 8-bit and 16-bit
images alike.
"""

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# Keep 16-bit PNG/TIFF samples instead of letting OpenCV squash them to 8 bits
DECODE_FLAGS = cv2.IMREAD_ANYDEPTH | cv2.IMREAD_COLOR

_BIT_WIDTHS = {
    np.dtype(np.uint8): 8,
    np.dtype(np.uint16): 16,
}


class HistogramError(Exception):
    """Base class for per-image failures while building a histogram."""


class ImageDecodeError(HistogramError):
    """The file could not be read or is not a decodable image."""


class EmptyImageError(HistogramError):
    """The decoded image has no pixels."""


def load_image(path: str) -> np.ndarray:
    """
    Read and decode an image file into an RGB array.

    The bytes are read with numpy and decoded in memory, so an unreadable
    path and a corrupt file are both reported as ImageDecodeError.

    Args:
        path: Image file path.

    Returns:
        RGB array of shape (H, W, 3), dtype uint8 or uint16.

    Raises:
        ImageDecodeError: If the file cannot be opened or decoded, or its
            samples are not 8- or 16-bit integers.
    """
    try:
        buffer = np.fromfile(path, dtype=np.uint8)
    except OSError as e:
        raise ImageDecodeError(f"Could not read {path}: {e}") from e

    if buffer.size == 0:
        raise ImageDecodeError(f"Empty file: {path}")

    try:
        image = cv2.imdecode(buffer, DECODE_FLAGS)
    except cv2.error as e:
        raise ImageDecodeError(f"Could not decode {path}: {e}") from e

    if image is None:
        raise ImageDecodeError(f"Unsupported or corrupt image: {path}")

    # Float TIFF/EXR/HDR decode fine but have no integer bit width to quantize
    if image.dtype not in _BIT_WIDTHS:
        raise ImageDecodeError(
            f"Unsupported sample type {image.dtype} in {path}; expected uint8 or uint16"
        )

    return to_rgb(image, bgr=True)


def to_rgb(image_np: np.ndarray, bgr: bool = False) -> np.ndarray:
    """
    Bring a raster into (H, W, 3) RGB layout.

    Grayscale images are expanded to three equal channels and alpha is
    dropped. Set bgr=True for arrays that came straight from OpenCV.
    """
    if image_np.ndim == 2:
        return np.repeat(image_np[:, :, np.newaxis], 3, axis=2)

    if image_np.ndim != 3:
        raise ValueError(f"Expected a 2-D or 3-D image array, got {image_np.ndim}-D")

    channels = image_np.shape[2]
    if channels == 1:
        return np.repeat(image_np, 3, axis=2)
    if channels == 4:
        image_np = image_np[:, :, :3]
    elif channels != 3:
        raise ValueError(f"Unsupported channel count: {channels}")

    if bgr:
        image_np = image_np[:, :, ::-1]
    return image_np


def channel_bit_width(image_np: np.ndarray) -> int:
    """Number of bits per channel sample (8 or 16)."""
    try:
        return _BIT_WIDTHS[image_np.dtype]
    except KeyError:
        raise ValueError(
            f"Unsupported image dtype {image_np.dtype}; expected uint8 or uint16"
        ) from None
