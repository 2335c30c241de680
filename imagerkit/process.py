"""Feature layers built from labelled images, and a batch preprocessing step."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

from imagerkit.classifier import _luma_array, canny

__all__ = ["DenseLayer", "GradientLayer", "NoisyLayer", "evaluate", "run"]

EVAL_SIZE = 600


def _labels(labels) -> np.ndarray:
    array = np.asarray(labels)
    if array.ndim != 2:
        raise ValueError("expected a two-dimensional label image")
    return array


@dataclass
class NoisyLayer:
    """A grayscale image marking the centre point of every label in white."""

    image: Image.Image

    @classmethod
    def from_labels(cls, labels) -> "NoisyLayer":
        labels = _labels(labels)
        height, width = labels.shape
        output = np.zeros((height, width), dtype=np.uint8)
        if labels.size:
            _, inverse = np.unique(labels.ravel(), return_inverse=True)
            inverse = inverse.reshape(-1)
            ys, xs = np.indices((height, width))
            counts = np.bincount(inverse)
            sum_x = np.rint(np.bincount(inverse, weights=xs.ravel())).astype(np.int64)
            sum_y = np.rint(np.bincount(inverse, weights=ys.ravel())).astype(np.int64)
            output[sum_y // counts, sum_x // counts] = 255
        return cls(Image.fromarray(output, mode="L"))


@dataclass
class DenseLayer:
    """A grayscale image that is white wherever a label covers more than four pixels."""

    image: Image.Image

    @classmethod
    def from_labels(cls, labels) -> "DenseLayer":
        labels = _labels(labels)
        output = np.zeros(labels.shape, dtype=np.uint8)
        if labels.size:
            _, inverse, counts = np.unique(
                labels.ravel(), return_inverse=True, return_counts=True
            )
            dense = counts[inverse.reshape(-1)] > 4
            output.reshape(-1)[dense] = 255
        return cls(Image.fromarray(output, mode="L"))


@dataclass
class GradientLayer:
    """Canny edges of a grayscale image."""

    image: Image.Image

    @classmethod
    def from_grayscale(cls, image) -> "GradientLayer":
        return cls(Image.fromarray(canny(image, 10.0, 20.0), mode="L"))


def evaluate(image: Image.Image) -> Image.Image:
    """Resize to 600x600 and reduce to grayscale."""
    resized = image.convert("RGB").resize((EVAL_SIZE, EVAL_SIZE), Image.Resampling.LANCZOS)
    return Image.fromarray(_luma_array(resized), mode="L")


def run(
    input_dir: str | os.PathLike = "assets/samples/focus",
    output_dir: str | os.PathLike = "assets/output",
) -> list[Path]:
    """Evaluate every JPEG and PNG under ``input_dir`` and save PNGs to ``output_dir``."""
    input_dir = Path(input_dir)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    sources = [
        *sorted(input_dir.glob("**/*.jpeg")),
        *sorted(input_dir.glob("**/*.png")),
    ]
    written = []
    for source in sources:
        if not source.is_file():
            continue
        target = (output_dir / source.name).with_suffix(".png")
        with Image.open(source) as image:
            evaluate(image).save(target, format="PNG")
        written.append(target)
    return written