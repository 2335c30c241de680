"""Progressive, entropy-optimised baseline JPEG encoding."""

from __future__ import annotations

import io

from PIL import Image

__all__ = ["encode"]


def _clamp_quality(quality: int) -> int:
    if quality < 0:
        raise ValueError("quality must not be negative")
    # The reference encoder treats anything at or below zero as 1 and caps at 100.
    return min(max(int(quality), 1), 100)


def encode(image: Image.Image, quality: int) -> bytes:
    """Encode ``image`` as a progressive RGB JPEG at the given quality (0-100).

    Quality values of 0 are treated as 1 and values above 100 as 100.
    """
    quality = _clamp_quality(quality)
    width, height = image.size
    if width == 0 or height == 0:
        raise ValueError("cannot encode an empty image")
    rgb = image.convert("RGB")
    buffer = io.BytesIO()
    rgb.save(
        buffer,
        format="JPEG",
        quality=quality,
        optimize=True,
        progressive=True,
        subsampling="4:2:0",
    )
    return buffer.getvalue()