import random

import numpy as np
import pytest

from imagerkit.palette import (
    Color,
    ColorPalette,
    PaletteType,
    filter_luma_regions,
    filter_rgb_regions,
    generate_palette,
    hsv_to_rgb,
    random_color_map,
    remove_larger_regions,
    set_region,
    to_pretty_rgb_palette,
)


def _in_unit_range(palette: ColorPalette) -> bool:
    return all(0.0 <= c <= 1.0 for color in palette for c in color.to_array())


def test_generates_palette():
    palette = generate_palette(7, PaletteType.RANDOM, False)
    assert len(palette) == 7
    assert _in_unit_range(palette)


@pytest.mark.parametrize("kind", list(PaletteType))
@pytest.mark.parametrize("adjacent", [False, True])
def test_all_palette_kinds_in_range(kind, adjacent):
    palette = generate_palette(50, kind, adjacent, random.Random(3))
    assert len(palette.colors) == 50
    assert _in_unit_range(palette)


def test_palette_is_deterministic_for_seed():
    a = generate_palette(10, PaletteType.PASTEL, False, random.Random(42))
    b = generate_palette(10, PaletteType.PASTEL, False, random.Random(42))
    assert a.colors == b.colors


def test_empty_and_negative_palette():
    assert len(generate_palette(0, PaletteType.DARK, False, random.Random(1))) == 0
    with pytest.raises(ValueError):
        generate_palette(-1, PaletteType.RANDOM, False)


@pytest.mark.parametrize(
    "hue, expected",
    [
        (0.0, (1.0, 0.0, 0.0)),
        (120.0, (0.0, 1.0, 0.0)),
        (240.0, (0.0, 0.0, 1.0)),
        (60.0, (1.0, 1.0, 0.0)),
        (360.0, (0.0, 0.0, 0.0)),
    ],
)
def test_hsv_to_rgb_primaries(hue, expected):
    assert hsv_to_rgb(hue, 1.0, 1.0).to_array() == pytest.approx(expected)


def test_hsv_to_rgb_grey_when_unsaturated():
    assert hsv_to_rgb(200.0, 0.0, 0.5).to_array() == pytest.approx((0.5, 0.5, 0.5))


def test_color_to_rgb8_truncates():
    assert Color(1.0, 0.5, 0.0).to_rgb8() == (255, 127, 0)


def test_random_color_map_special_keys():
    colors = random_color_map([0, 5, 7, 255, 5], 255, random.Random(0))
    assert set(colors) == {0, 5, 7, 255}
    assert colors[0] == (0, 0, 0)
    assert colors[255] == (255, 255, 255)
    for key in (5, 7):
        assert all(0 <= c <= 255 for c in colors[key])


def test_random_color_map_without_max():
    colors = random_color_map({0, 255}, None, random.Random(0))
    assert colors[0] == (0, 0, 0)
    assert colors[255] != (0, 0, 0) or colors[255] == (0, 0, 0)
    assert len(colors) == 2


def test_to_pretty_rgb_palette_shape_and_consistency():
    labels = np.array([[0, 1, 1], [2, 255, 0]], dtype=np.uint8)
    rgb = to_pretty_rgb_palette(labels, rng=random.Random(9))
    assert rgb.shape == (2, 3, 3)
    assert rgb.dtype == np.uint8
    assert rgb[0, 0].tolist() == [0, 0, 0]
    assert rgb[1, 2].tolist() == [0, 0, 0]
    assert rgb[1, 1].tolist() == [255, 255, 255]
    assert rgb[0, 1].tolist() == rgb[0, 2].tolist()


def test_to_pretty_rgb_palette_rejects_rgb():
    with pytest.raises(ValueError):
        to_pretty_rgb_palette(np.zeros((2, 2, 3), dtype=np.uint8))


def test_filter_luma_regions_counts_repeats():
    labels = np.array([[1, 1, 2]], dtype=np.uint32)
    result = filter_luma_regions(labels, 1)
    assert result.tolist() == [[1, 1, 0]]
    assert labels.tolist() == [[1, 1, 2]]


def test_remove_larger_regions():
    labels = np.array([[1, 1, 1, 2]], dtype=np.uint32)
    assert remove_larger_regions(labels, 1).tolist() == [[0, 0, 0, 2]]


def test_filter_rgb_regions():
    image = np.array(
        [[[10, 20, 30], [10, 20, 30], [1, 2, 3]]], dtype=np.uint8
    )
    result = filter_rgb_regions(image, 1)
    assert result.tolist() == [[[10, 20, 30], [10, 20, 30], [0, 0, 0]]]
    assert image[0, 2].tolist() == [1, 2, 3]


def test_set_region_with_predicate():
    labels = np.array([[0, 3, 3], [4, 4, 4]], dtype=np.uint32)
    result = set_region(labels, 9, lambda value, count: value != 0 and count >= 2)
    assert result.tolist() == [[0, 3, 3], [9, 9, 9]]


def test_set_region_rejects_bad_shape():
    with pytest.raises(ValueError):
        set_region(np.zeros(4, dtype=np.uint32), 0, lambda v, c: True)