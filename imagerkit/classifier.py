"""Coarse complexity classification of images from edge and region statistics."""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass

import numpy as np
from PIL import Image
from scipy import ndimage

from imagerkit.palette import random_color_map

__all__ = [
    "Class",
    "DebugImages",
    "Meta",
    "Report",
    "canny",
    "classify_meta",
    "get_report",
    "is_white_dominant",
]

ANALYSIS_SIZE = 700
CANNY_SIGMA = 1.4


class Class(enum.Enum):
    """Complexity classes, from low (L0) to high (H2) detail."""

    L0 = "l0"
    L1 = "l1"
    L2 = "l2"
    M1 = "m1"
    H1 = "h1"
    H2 = "h2"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> "Class":
        """Parse a class name, ignoring case."""
        try:
            return cls(text.lower())
        except ValueError:
            raise ValueError(f"invalid class name: {text!r}") from None


@dataclass(frozen=True)
class Meta:
    edges_sum: int
    regions_sum: int
    component_count: int
    white_count: int


@dataclass
class DebugImages:
    grayscale: np.ndarray
    edges: np.ndarray
    regions: np.ndarray


@dataclass
class Report:
    debug_images: DebugImages
    meta: Meta
    class_: Class
    white_backdrop: bool


def classify_meta(meta: Meta) -> Class:
    """Pick a class from the measured statistics."""
    if meta.edges_sum >= 110_000 and meta.regions_sum <= 12_000 and meta.component_count < 90:
        return Class.H2
    if meta.edges_sum >= 70_000 and meta.regions_sum <= 12_000 and meta.component_count < 90:
        return Class.H1
    if meta.edges_sum >= 60_000 and meta.regions_sum <= 90_000:
        return Class.M1
    if meta.edges_sum >= 20_000 and meta.regions_sum <= 200_000:
        return Class.L2
    if meta.component_count > 20:
        return Class.L2
    if meta.component_count <= 6:
        return Class.L0
    return Class.L1


def _luma_array(image: Image.Image) -> np.ndarray:
    """Rec. 709 luma of an image as a uint8 array, using integer weights."""
    rgb = np.asarray(image.convert("RGB"), dtype=np.int64)
    weighted = 2126 * rgb[..., 0] + 7152 * rgb[..., 1] + 722 * rgb[..., 2]
    return (weighted // 10000).astype(np.uint8)


def _gray_array(image) -> np.ndarray:
    if isinstance(image, Image.Image):
        return _luma_array(image)
    array = np.asarray(image)
    if array.ndim != 2:
        raise ValueError("expected a two-dimensional grayscale image")
    return array


def _resize(image: Image.Image) -> Image.Image:
    return image.convert("RGB").resize(
        (ANALYSIS_SIZE, ANALYSIS_SIZE), Image.Resampling.BICUBIC
    )


def _contrast(gray: np.ndarray, contrast: float) -> np.ndarray:
    percent = ((100.0 + contrast) / 100.0) ** 2
    scaled = ((gray.astype(np.float64) / 255.0 - 0.5) * percent + 0.5) * 255.0
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


def _label_equal_regions(values: np.ndarray, connectivity: int) -> np.ndarray:
    """Label connected runs of equal non-zero values, numbered in raster order."""
    structure = ndimage.generate_binary_structure(2, 1 if connectivity == 4 else 2)
    labels = np.zeros(values.shape, dtype=np.int64)
    total = 0
    for value in np.unique(values):
        if value == 0:
            continue
        found, count = ndimage.label(values == value, structure=structure)
        mask = found > 0
        labels[mask] = found[mask] + total
        total += count
    if total == 0:
        return labels
    uniq, first = np.unique(labels.ravel(), return_index=True)
    nonzero = uniq != 0
    order = np.argsort(first[nonzero], kind="stable")
    mapping = np.zeros(total + 1, dtype=np.int64)
    mapping[uniq[nonzero][order]] = np.arange(1, order.size + 1)
    return mapping[labels]


def canny(image, low_threshold: float, high_threshold: float) -> np.ndarray:
    """Canny edge detection; edge pixels are 255 and all others 0."""
    if high_threshold < low_threshold:
        raise ValueError("high threshold must not be below the low threshold")
    gray = _gray_array(image).astype(np.float64)
    height, width = gray.shape
    output = np.zeros((height, width), dtype=np.uint8)
    if height < 3 or width < 3:
        return output

    blurred = ndimage.gaussian_filter(gray, sigma=CANNY_SIGMA, mode="nearest")
    blurred = np.clip(np.rint(blurred), 0, 255)
    gx = ndimage.sobel(blurred, axis=1, mode="nearest")
    gy = ndimage.sobel(blurred, axis=0, mode="nearest")
    magnitude = np.hypot(gx, gy)
    angle = np.degrees(np.arctan2(gy, gx))
    angle[angle < 0] += 180.0

    def shifted(dy: int, dx: int) -> np.ndarray:
        return magnitude[1 + dy : height - 1 + dy, 1 + dx : width - 1 + dx]

    centre = magnitude[1:-1, 1:-1]
    a = angle[1:-1, 1:-1]
    conditions = [
        (a >= 157.5) | (a < 22.5),
        (a >= 22.5) & (a < 67.5),
        (a >= 67.5) & (a < 112.5),
    ]
    first = np.select(conditions, [shifted(0, -1), shifted(1, 1), shifted(-1, 0)], shifted(1, -1))
    second = np.select(conditions, [shifted(0, 1), shifted(-1, -1), shifted(1, 0)], shifted(-1, 1))
    suppressed = np.zeros_like(magnitude)
    suppressed[1:-1, 1:-1] = np.where((centre >= first) & (centre >= second), centre, 0.0)

    weak = suppressed >= low_threshold
    strong = suppressed >= high_threshold
    labels, count = ndimage.label(weak, structure=np.ones((3, 3), dtype=bool))
    if count == 0:
        return output
    keep = np.zeros(count + 1, dtype=bool)
    keep[np.unique(labels[strong])] = True
    keep[0] = False
    output[keep[labels]] = 255
    return output


def is_white_dominant(image: Image.Image) -> bool:
    """Whether large bright regions cover a substantial part of the image."""
    gray = _luma_array(_resize(image))
    media = _contrast(gray, 5.0)
    labels = _label_equal_regions(media, connectivity=4)
    sizes = np.bincount(labels.ravel())
    kept = (labels != 0) & (media >= 240) & (sizes[labels] >= 15_000)
    return int(kept.sum()) > 130_100


def get_report(image: Image.Image, rng: random.Random | None = None) -> Report:
    """Measure edges and regions of ``image`` and classify it."""
    white_backdrop = is_white_dominant(image)
    grayscale = _luma_array(_resize(image))
    white_count = int((grayscale >= 220).sum())

    edges = canny(grayscale, 10.0, 20.0)
    edges_sum = int((edges == 255).sum())

    structure = np.ones((13, 13), dtype=bool)
    closed = ndimage.binary_dilation(edges == 255, structure=structure)
    closed = ndimage.binary_erosion(closed, structure=structure, border_value=1)
    regions = ~closed

    labels, component_count = ndimage.label(regions, structure=np.ones((3, 3), dtype=bool))
    sizes = np.bincount(labels.ravel())[1:]
    regions_sum = int(sizes.max()) - 1 if sizes.size else 0

    values, inverse = np.unique(labels, return_inverse=True)
    colors = random_color_map(values.tolist(), None, rng)
    table = np.array([colors[int(v)] for v in values], dtype=np.uint8).reshape(-1, 3)
    regions_image = table[inverse.reshape(-1)].reshape(labels.shape + (3,))

    meta = Meta(
        edges_sum=edges_sum,
        regions_sum=regions_sum,
        component_count=int(component_count),
        white_count=white_count,
    )
    return Report(
        debug_images=DebugImages(grayscale=grayscale, edges=edges, regions=regions_image),
        meta=meta,
        class_=classify_meta(meta),
        white_backdrop=white_backdrop,
    )