"""Raw YUV 4:2:0 picture buffers and in-memory frame sequences."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

from imagerkit.colorformat import to_yuv420p

__all__ = ["VideoBuffer", "Yuv420P", "open_dir_sorted_paths"]

MAX_DIMENSION = 16383


def open_dir_sorted_paths(path: str | os.PathLike) -> list[Path]:
    """List the files in ``path`` whose names start with digits, ordered by that number.

    Files whose names do not begin with a digit are left out.
    """
    indexed = []
    for entry in Path(path).iterdir():
        if not entry.is_file():
            continue
        digits = ""
        for ch in entry.name:
            if not ("0" <= ch <= "9"):
                break
            digits += ch
        if digits:
            indexed.append((int(digits), entry.name, entry))
    indexed.sort(key=lambda item: (item[0], item[1]))
    return [entry for _, _, entry in indexed]


@dataclass
class Yuv420P:
    """A planar YUV 4:2:0 picture stored as one contiguous Y, U, V buffer."""

    width: int
    height: int
    data: bytes

    @classmethod
    def from_image(cls, image: Image.Image) -> "Yuv420P":
        width, height = image.size
        if width >= MAX_DIMENSION or height >= MAX_DIMENSION:
            raise ValueError(f"image dimensions must be below {MAX_DIMENSION}")
        if width % 2 or height % 2:
            raise ValueError("image dimensions must be even")
        (y, u, v), width, height = to_yuv420p(image)
        result = cls(width, height, y + u + v)
        if not result.has_expected_size():
            raise ValueError("converted picture has an unexpected size")
        return result

    @classmethod
    def open_image(cls, path: str | os.PathLike) -> "Yuv420P":
        with Image.open(path) as image:
            image.load()
            return cls.from_image(image)

    @classmethod
    def open_yuv(cls, path: str | os.PathLike, width: int, height: int) -> "Yuv420P":
        result = cls(width, height, Path(path).read_bytes())
        if not result.has_expected_size():
            raise ValueError(
                f"raw file size {len(result.data)} does not match a "
                f"{width}x{height} yuv420p picture"
            )
        return result

    def luma_size(self) -> int:
        return self.width * self.height

    def chroma_size(self) -> int:
        return self.width * self.height // 4

    def has_expected_size(self) -> bool:
        return len(self.data) == self.luma_size() + 2 * self.chroma_size()

    def _check_size(self) -> None:
        if not self.has_expected_size():
            raise ValueError("picture buffer does not match its dimensions")

    def y(self) -> bytes:
        self._check_size()
        return self.data[: self.luma_size()]

    def u(self) -> bytes:
        self._check_size()
        start = self.luma_size()
        return self.data[start : start + self.chroma_size()]

    def v(self) -> bytes:
        self._check_size()
        start = self.luma_size() + self.chroma_size()
        return self.data[start : start + self.chroma_size()]

    def dimensions(self) -> tuple[int, int]:
        return (self.width, self.height)

    def save(self, path: str | os.PathLike) -> None:
        """Write the raw planes to ``path``."""
        Path(path).write_bytes(self.data)

    def to_rgba_image(self) -> Image.Image:
        """Convert back to an opaque RGBA image."""
        self._check_size()
        w, h = self.width, self.height
        luma = np.frombuffer(self.y(), dtype=np.uint8).reshape(h, w).astype(np.float64)
        cb = np.frombuffer(self.u(), dtype=np.uint8).reshape(h // 2, w // 2)
        cr = np.frombuffer(self.v(), dtype=np.uint8).reshape(h // 2, w // 2)
        cb = cb.repeat(2, axis=0).repeat(2, axis=1).astype(np.float64) - 128.0
        cr = cr.repeat(2, axis=0).repeat(2, axis=1).astype(np.float64) - 128.0

        scaled_luma = (luma - 16.0) * 255.0 / 219.0
        chroma_scale = 255.0 / 224.0
        r = scaled_luma + chroma_scale * 1.402 * cr
        g = scaled_luma - chroma_scale * (0.344136 * cb + 0.714136 * cr)
        b = scaled_luma + chroma_scale * 1.772 * cb

        rgba = np.empty((h, w, 4), dtype=np.uint8)
        for channel, plane in enumerate((r, g, b)):
            rgba[..., channel] = np.clip(np.rint(plane), 0, 255).astype(np.uint8)
        rgba[..., 3] = 255
        return Image.fromarray(rgba)


class VideoBuffer:
    """An immutable sequence of frames read through a movable cursor."""

    def __init__(self, width: int, height: int, frames, cursor: int = 0):
        self.width = width
        self.height = height
        self._frames = tuple(frames)
        self._cursor = cursor

    def __repr__(self) -> str:
        return (
            f"VideoBuffer(width={self.width}, height={self.height}, "
            f"frames={len(self._frames)}, cursor={self._cursor})"
        )

    @classmethod
    def singleton(cls, frame: Yuv420P) -> "VideoBuffer":
        return cls(frame.width, frame.height, [frame])

    @classmethod
    def open_image_dir(cls, dir_path: str | os.PathLike) -> "VideoBuffer":
        """Load every numbered image in ``dir_path`` as a frame, in numeric order."""
        dir_path = Path(dir_path)
        if not dir_path.exists():
            raise FileNotFoundError(dir_path)
        frames = [Yuv420P.open_image(p) for p in open_dir_sorted_paths(dir_path)]
        if not frames:
            raise ValueError(f"no numbered image files in {dir_path}")
        return cls(frames[0].width, frames[0].height, frames)

    def dimensions(self) -> tuple[int, int]:
        return (self.width, self.height)

    def frames(self) -> tuple[Yuv420P, ...]:
        return self._frames

    def next_frame(self) -> Yuv420P | None:
        """Return the frame at the cursor and advance, or ``None`` at the end."""
        if self._cursor >= len(self._frames):
            return None
        frame = self._frames[self._cursor]
        self._cursor += 1
        return frame

    def set_cursor(self, cursor_pos: int) -> None:
        self._cursor = cursor_pos

    def position(self) -> int:
        return self._cursor

    def fresh_cursor(self) -> "VideoBuffer":
        """Return a buffer sharing these frames with its own cursor at the same position."""
        return VideoBuffer(self.width, self.height, self._frames, self._cursor)