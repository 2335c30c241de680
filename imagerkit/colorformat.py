"""Conversion of RGB images to planar and semi-planar YUV 4:2:0 layouts.

The colour matrix is BT.601 with limited ("studio") range: luma spans
16..235 and chroma 16..240 centred on 128.
"""

from __future__ import annotations

import numpy as np
from PIL import Image

__all__ = ["ensure_even_resolution", "to_nv12", "to_yuv420p"]


def ensure_even_resolution(image: Image.Image) -> Image.Image:
    """Return a copy of ``image`` cropped at the right and bottom to even dimensions."""
    width, height = image.size
    even_width = width - (width % 2)
    even_height = height - (height % 2)
    if (even_width, even_height) == (width, height):
        return image.copy()
    return image.crop((0, 0, even_width, even_height))


def _rgb_to_planes(image: Image.Image) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return full-resolution luma and 2x2-averaged chroma planes as uint8 arrays."""
    width, height = image.size
    rgb = np.asarray(image.convert("RGB"), dtype=np.float64).reshape(height, width, 3)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    luma = 16.0 + 219.0 * (0.299 * r + 0.587 * g + 0.114 * b) / 255.0
    cb = 128.0 + 224.0 * (-0.168736 * r - 0.331264 * g + 0.5 * b) / 255.0
    cr = 128.0 + 224.0 * (0.5 * r - 0.418688 * g - 0.081312 * b) / 255.0

    def subsample(plane: np.ndarray) -> np.ndarray:
        return plane.reshape(height // 2, 2, width // 2, 2).mean(axis=(1, 3))

    def to_u8(plane: np.ndarray) -> np.ndarray:
        return np.clip(np.rint(plane), 0, 255).astype(np.uint8)

    return to_u8(luma), to_u8(subsample(cb)), to_u8(subsample(cr))


def to_nv12(image: Image.Image) -> tuple[bytes, int, int]:
    """Convert ``image`` to NV12: a luma plane followed by interleaved U/V samples.

    Odd dimensions are cropped to even ones first. Returns the raw bytes with
    the width and height actually encoded.
    """
    image = ensure_even_resolution(image)
    width, height = image.size
    y, u, v = _rgb_to_planes(image)
    interleaved = np.stack([u, v], axis=-1)
    data = y.tobytes() + interleaved.tobytes()
    expected = 3 * width * height // 2
    if len(data) != expected:
        raise ValueError(f"NV12 buffer has {len(data)} bytes, expected {expected}")
    return data, width, height


def to_yuv420p(image: Image.Image) -> tuple[tuple[bytes, bytes, bytes], int, int]:
    """Convert ``image`` to planar YUV 4:2:0, returning ``((y, u, v), width, height)``."""
    nv12, width, height = to_nv12(image)
    y_size = width * height
    uv_planar = width * height // 4
    y = nv12[:y_size]
    chroma = nv12[y_size:]
    if len(chroma) != 2 * uv_planar:
        raise ValueError("interleaved chroma plane has an unexpected size")
    u = chroma[0::2]
    v = chroma[1::2]
    return (y, u, v), width, height