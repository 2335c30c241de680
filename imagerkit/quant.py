"""Colour-count reduction with k-means refinement and indexed PNG output."""

from __future__ import annotations

import io
import math

import numpy as np
from PIL import Image

__all__ = ["compress", "reduce_palette"]

_CHUNK = 65536


def _nearest(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid for every point (squared Euclidean)."""
    result = np.empty(len(points), dtype=np.int64)
    for start in range(0, len(points), _CHUNK):
        block = points[start : start + _CHUNK]
        diff = block[:, None, :] - centroids[None, :, :]
        result[start : start + _CHUNK] = np.argmin((diff * diff).sum(axis=2), axis=1)
    return result


def _mean(colors: np.ndarray, weights: np.ndarray, idx: np.ndarray) -> np.ndarray:
    return np.average(colors[idx], axis=0, weights=weights[idx])


def _error(colors: np.ndarray, weights: np.ndarray, idx: np.ndarray) -> float:
    diff = colors[idx] - _mean(colors, weights, idx)
    return float((weights[idx] * (diff * diff).sum(axis=1)).sum())


def _split_worst(clusters, colors, weights) -> bool:
    """Split the cluster with the largest error in place; False when none can split."""
    errors = [_error(colors, weights, idx) for idx in clusters]
    worst = int(np.argmax(errors))
    if errors[worst] <= 0.0:
        return False
    idx = clusters[worst]
    members = colors[idx]
    mean = _mean(colors, weights, idx)
    variance = np.average((members - mean) ** 2, axis=0, weights=weights[idx])
    axis = int(np.argmax(variance))
    low = members[:, axis] <= mean[axis]
    left, right = idx[low], idx[~low]
    if left.size == 0 or right.size == 0:
        return False
    clusters[worst : worst + 1] = [left, right]
    return True


def _kmeans(centroids, colors, weights, iterations) -> np.ndarray:
    centroids = centroids.copy()
    for _ in range(iterations):
        assignment = _nearest(colors, centroids)
        for k in range(len(centroids)):
            members = np.flatnonzero(assignment == k)
            if members.size:
                centroids[k] = _mean(colors, weights, members)
    return centroids


def _clusters_from(centroids, colors):
    assignment = _nearest(colors, centroids)
    groups = (np.flatnonzero(assignment == k) for k in range(len(centroids)))
    return [g for g in groups if g.size]


def _build_palette(colors: np.ndarray, weights: np.ndarray, num_colors: int) -> np.ndarray:
    kmeans_step = max(1, int(math.floor(math.sqrt(num_colors) + 0.5)))
    clusters = [np.arange(len(colors))]
    for _ in range(num_colors):
        if len(clusters) >= num_colors or not _split_worst(clusters, colors, weights):
            break
        if len(clusters) % kmeans_step == 0:
            centroids = np.array([_mean(colors, weights, idx) for idx in clusters])
            clusters = _clusters_from(_kmeans(centroids, colors, weights, 4), colors)
    centroids = np.array([_mean(colors, weights, idx) for idx in clusters])
    centroids = _kmeans(centroids, colors, weights, 16)
    used = np.unique(_nearest(colors, centroids))
    return centroids[used]


def _encode_indexed(palette: np.ndarray, indices: np.ndarray) -> bytes:
    height, width = indices.shape
    image = Image.frombytes("P", (width, height), indices.astype(np.uint8).tobytes())
    image.putpalette(palette[:, :3].tobytes())
    options = {}
    alphas = palette[:, 3]
    if (alphas < 255).any():
        options["transparency"] = alphas.tobytes()
    buffer = io.BytesIO()
    image.save(buffer, format="PNG", **options)
    return buffer.getvalue()


def compress(image: Image.Image, num_colors: int) -> bytes:
    """Reduce ``image`` to at most ``num_colors`` RGBA colours and encode an indexed PNG."""
    if not 1 <= num_colors <= 256:
        raise ValueError("num_colors must be between 1 and 256")
    width, height = image.size
    if width == 0 or height == 0:
        raise ValueError("cannot quantize an empty image")
    rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8).reshape(-1, 4)
    unique, inverse, counts = np.unique(
        rgba, axis=0, return_inverse=True, return_counts=True
    )
    colors = unique.astype(np.float64)
    palette = _build_palette(colors, counts.astype(np.float64), num_colors)
    assignment = _nearest(colors, palette)
    indices = assignment[inverse.reshape(-1)].reshape(height, width)
    palette8 = np.clip(np.rint(palette), 0, 255).astype(np.uint8)
    return _encode_indexed(palette8, indices)


def reduce_palette(image: Image.Image, num_colors: int) -> Image.Image:
    """Return ``image`` with its colours reduced, decoded back to RGBA."""
    data = compress(image, num_colors)
    with Image.open(io.BytesIO(data)) as decoded:
        decoded.load()
        return decoded.convert("RGBA")