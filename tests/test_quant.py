import io

import numpy as np
import pytest
from PIL import Image

from imagerkit.quant import compress, reduce_palette

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _gradient_image(width=40, height=30):
    xs = np.linspace(0, 255, width, dtype=np.float64)
    ys = np.linspace(0, 255, height, dtype=np.float64)
    r = np.tile(xs, (height, 1))
    g = np.tile(ys[:, None], (1, width))
    b = (r + g) / 2
    data = np.stack([r, g, b], axis=-1).astype(np.uint8)
    return Image.fromarray(data, mode="RGB")


def _three_colour_image():
    image = Image.new("RGB", (6, 4), (255, 0, 0))
    for x in range(2, 4):
        for y in range(4):
            image.putpixel((x, y), (0, 255, 0))
    for x in range(4, 6):
        for y in range(4):
            image.putpixel((x, y), (0, 0, 255))
    return image


def test_output_is_indexed_png():
    data = compress(_gradient_image(), 16)
    assert data[:8] == PNG_SIGNATURE
    with Image.open(io.BytesIO(data)) as decoded:
        assert decoded.mode == "P"
        assert decoded.size == (40, 30)


@pytest.mark.parametrize("num_colors", [1, 4, 16, 64])
def test_colour_count_is_bounded(num_colors):
    reduced = reduce_palette(_gradient_image(), num_colors)
    assert len(reduced.getcolors(maxcolors=1 << 16)) <= num_colors


def test_dimensions_are_preserved():
    reduced = reduce_palette(_gradient_image(17, 9), 8)
    assert reduced.size == (17, 9)
    assert reduced.mode == "RGBA"


def test_few_colours_are_reproduced_exactly():
    image = _three_colour_image()
    reduced = reduce_palette(image, 8)
    assert reduced.getpixel((0, 0)) == (255, 0, 0, 255)
    assert reduced.getpixel((2, 1)) == (0, 255, 0, 255)
    assert reduced.getpixel((5, 3)) == (0, 0, 255, 255)


def test_alpha_is_preserved():
    image = Image.new("RGBA", (4, 4), (255, 0, 0, 255))
    for y in range(4):
        image.putpixel((0, y), (0, 0, 255, 0))
    reduced = reduce_palette(image, 4)
    assert reduced.getpixel((0, 2)) == (0, 0, 255, 0)
    assert reduced.getpixel((3, 2)) == (255, 0, 0, 255)


def test_single_colour_keeps_that_colour():
    image = Image.new("RGB", (5, 5), (10, 20, 30))
    reduced = reduce_palette(image, 1)
    assert reduced.getcolors() == [(25, (10, 20, 30, 255))]


def test_more_colours_reduce_error():
    image = _gradient_image()
    source = np.asarray(image.convert("RGBA"), dtype=np.float64)

    def error(n):
        reduced = np.asarray(reduce_palette(image, n), dtype=np.float64)
        return float(((reduced - source) ** 2).mean())

    assert error(64) < error(2)


@pytest.mark.parametrize("num_colors", [0, 257])
def test_out_of_range_colour_count_is_rejected(num_colors):
    with pytest.raises(ValueError):
        compress(_gradient_image(), num_colors)