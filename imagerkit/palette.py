"""Random colour palettes and region filters for labelled images.

Label images are two-dimensional integer numpy arrays, and RGB images are
``(height, width, 3)`` arrays of ``uint8``.
"""

from __future__ import annotations

import enum
import math
import random
from dataclasses import dataclass, field
from typing import Callable, Iterable

import numpy as np

__all__ = [
    "Color",
    "ColorPalette",
    "PaletteType",
    "filter_luma_regions",
    "filter_rgb_regions",
    "generate_palette",
    "hsv_to_rgb",
    "random_color_map",
    "remove_larger_regions",
    "set_region",
    "to_pretty_rgb_palette",
]


@dataclass(frozen=True)
class Color:
    """An RGB colour with components ranging from 0.0 to 1.0."""

    red: float
    green: float
    blue: float

    def to_array(self) -> tuple[float, float, float]:
        return (self.red, self.green, self.blue)

    def to_rgb8(self) -> tuple[int, int, int]:
        """Scale the components to bytes, truncating toward zero."""
        return (int(self.red * 255.0), int(self.green * 255.0), int(self.blue * 255.0))


class PaletteType(enum.Enum):
    RANDOM = "random"
    PASTEL = "pastel"
    DARK = "dark"


@dataclass
class ColorPalette:
    """An ordered collection of colours."""

    colors: list[Color] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return iter(self.colors)

    def __getitem__(self, index: int) -> Color:
        return self.colors[index]


def _in_range(x: float, begin: float, end: float) -> bool:
    return begin <= x < end


def hsv_to_rgb(hue: float, saturation: float, value: float) -> Color:
    """Convert a hue in degrees plus saturation and value to an RGB colour."""
    chroma = value * saturation
    hue2 = hue / 60.0
    tmp = chroma * (1.0 - abs(math.fmod(hue2, 2.0) - 1.0))
    if _in_range(hue2, 0.0, 1.0):
        r, g, b = chroma, tmp, 0.0
    elif _in_range(hue2, 1.0, 2.0):
        r, g, b = tmp, chroma, 0.0
    elif _in_range(hue2, 2.0, 3.0):
        r, g, b = 0.0, chroma, tmp
    elif _in_range(hue2, 3.0, 4.0):
        r, g, b = 0.0, tmp, chroma
    elif _in_range(hue2, 4.0, 5.0):
        r, g, b = tmp, 0.0, chroma
    elif _in_range(hue2, 5.0, 6.0):
        r, g, b = chroma, 0.0, tmp
    else:
        r, g, b = 0.0, 0.0, 0.0
    m = value - chroma
    return Color(r + m, g + m, b + m)


def _next_random(hue, iteration, divergence):
    f = abs(math.tan(iteration * 55.0))
    div = max(divergence, 15.0)
    hue = abs(hue + div + f) % 360.0
    saturation = max(abs(math.sin(iteration * 0.35)), 0.4)
    value = abs(math.cos((6.33 * iteration) * 0.5))
    value = min(max(value, 0.2), 0.85)
    return hue, saturation, value


def _next_pastel(hue, iteration, divergence):
    f = abs(math.cos(iteration * 25.0))
    div = max(divergence, 15.0)
    hue = abs(hue + div + f) % 360.0
    saturation = abs(math.cos(iteration * 0.35) / 5.0)
    value = 0.5 + abs(math.cos(iteration) / 2.0)
    return hue, saturation, value


def _next_dark(hue, iteration, divergence):
    f = abs(math.cos(iteration * 43.0))
    div = max(divergence, 15.0)
    hue = abs(hue + div + f) % 360.0
    saturation = 0.32 + abs(math.sin(iteration * 0.75) / 2.0)
    value = 0.1 + abs(math.cos(iteration) / 6.0)
    return hue, saturation, value


_STARTING_RANGES = {
    PaletteType.RANDOM: ((0.5, 1.0), (0.3, 1.0)),
    PaletteType.PASTEL: ((0.1, 0.4), (0.7, 1.0)),
    PaletteType.DARK: ((0.5, 1.0), (0.0, 0.4)),
}

_STEPPERS = {
    PaletteType.RANDOM: _next_random,
    PaletteType.PASTEL: _next_pastel,
    PaletteType.DARK: _next_dark,
}


def generate_palette(
    count: int,
    palette_type: PaletteType = PaletteType.RANDOM,
    adjacent_colors: bool = False,
    rng: random.Random | None = None,
) -> ColorPalette:
    """Generate ``count`` visually distinct colours of the given kind."""
    if count < 0:
        raise ValueError("palette size must not be negative")
    rng = rng if rng is not None else random.Random()
    palette_type = PaletteType(palette_type)
    (sat_lo, sat_hi), (val_lo, val_hi) = _STARTING_RANGES[palette_type]
    hue = rng.uniform(0.0, 360.0)
    saturation = rng.uniform(sat_lo, sat_hi)
    value = rng.uniform(val_lo, val_hi)

    divergence = 25.0 if adjacent_colors else 80.0
    divergence -= count / 2.6
    step = _STEPPERS[palette_type]

    colors = []
    for iteration in range(count):
        colors.append(hsv_to_rgb(hue, saturation, value))
        hue, saturation, value = step(hue, float(iteration), divergence)
    return ColorPalette(colors)


def random_color_map(
    keys: Iterable[int],
    max_value: int | None = None,
    rng: random.Random | None = None,
) -> dict[int, tuple[int, int, int]]:
    """Give each key a random RGB colour; 0 maps to black and ``max_value`` to white."""
    unique_keys = list(dict.fromkeys(int(k) for k in keys))
    palette = generate_palette(len(unique_keys), PaletteType.RANDOM, False, rng)
    output: dict[int, tuple[int, int, int]] = {}
    for key, color in zip(unique_keys, palette):
        if key == 0:
            output[key] = (0, 0, 0)
        elif max_value is not None and key == max_value:
            output[key] = (255, 255, 255)
        else:
            output[key] = color.to_rgb8()
    return output


def _require_labels(image: np.ndarray) -> np.ndarray:
    image = np.asarray(image)
    if image.ndim != 2:
        raise ValueError("expected a two-dimensional label image")
    return image


def _require_rgb(image: np.ndarray) -> np.ndarray:
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError("expected an RGB image of shape (height, width, 3)")
    return image


def to_pretty_rgb_palette(
    image: np.ndarray,
    max_value: int | None = None,
    rng: random.Random | None = None,
) -> np.ndarray:
    """Render a label image as RGB with a random colour per label.

    When ``max_value`` is omitted, the largest value of the image's integer
    type is used.
    """
    image = _require_labels(image)
    if max_value is None and np.issubdtype(image.dtype, np.integer):
        max_value = int(np.iinfo(image.dtype).max)
    values, inverse = np.unique(image, return_inverse=True)
    colors = random_color_map(values.tolist(), max_value, rng)
    table = np.array([colors[int(v)] for v in values], dtype=np.uint8).reshape(-1, 3)
    return table[inverse.reshape(-1)].reshape(image.shape + (3,))


def _repeat_counts(flat: np.ndarray, axis: int | None = None):
    # Counts start at zero on a value's first sighting, so each is one less
    # than the number of pixels sharing the value.
    values, inverse, counts = np.unique(
        flat, axis=axis, return_inverse=True, return_counts=True
    )
    return values, inverse.reshape(-1), counts - 1


def filter_rgb_regions(image: np.ndarray, min_occurrence: int) -> np.ndarray:
    """Blacken colours whose repeat count is below ``min_occurrence``."""
    image = _require_rgb(image)
    output = image.copy()
    flat = output.reshape(-1, 3)
    if flat.size == 0:
        return output
    _, inverse, counts = _repeat_counts(flat, axis=0)
    flat[counts[inverse] < min_occurrence] = 0
    return output


def filter_luma_regions(image: np.ndarray, min_occurrence: int) -> np.ndarray:
    """Zero out labels whose repeat count is below ``min_occurrence``."""
    return set_region(image, 0, lambda _value, count: count < min_occurrence)


def remove_larger_regions(image: np.ndarray, max_occurrence: int) -> np.ndarray:
    """Zero out labels whose repeat count exceeds ``max_occurrence``."""
    return set_region(image, 0, lambda _value, count: count > max_occurrence)


def set_region(
    image: np.ndarray,
    new_value: int,
    pred: Callable[[int, int], bool],
) -> np.ndarray:
    """Replace every label for which ``pred(label, repeat_count)`` holds."""
    image = _require_labels(image)
    output = image.copy()
    if output.size == 0:
        return output
    values, inverse, counts = _repeat_counts(output.reshape(-1))
    selected = np.array(
        [bool(pred(v, int(c))) for v, c in zip(values.tolist(), counts)], dtype=bool
    )
    flat = output.reshape(-1)
    flat[selected[inverse]] = new_value
    return output