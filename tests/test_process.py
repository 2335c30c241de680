import numpy as np
import pytest
from PIL import Image

from imagerkit.classifier import canny
from imagerkit.process import DenseLayer, GradientLayer, NoisyLayer, evaluate, run


def test_noisy_layer_single_label_marks_centre():
    labels = np.full((3, 3), 7, dtype=np.uint32)
    out = np.asarray(NoisyLayer.from_labels(labels).image)
    expected = np.zeros((3, 3), dtype=np.uint8)
    expected[1, 1] = 255
    assert np.array_equal(out, expected)


def test_noisy_layer_one_point_per_label():
    labels = np.zeros((10, 10), dtype=np.uint32)
    labels[:, 5:] = 1
    labels[7:, :] = 2
    out = np.asarray(NoisyLayer.from_labels(labels).image)
    assert out.shape == (10, 10)
    assert int((out == 255).sum()) == 3
    assert set(np.unique(out).tolist()) == {0, 255}


def test_noisy_layer_rejects_non_2d():
    with pytest.raises(ValueError):
        NoisyLayer.from_labels(np.zeros((2, 2, 2), dtype=np.uint32))


def test_dense_layer_threshold():
    labels = np.array([[1, 1, 2], [1, 1, 2], [2, 2, 2]], dtype=np.uint32)
    out = np.asarray(DenseLayer.from_labels(labels).image)
    assert np.array_equal(out, np.where(labels == 2, 255, 0).astype(np.uint8))


def test_gradient_layer_uniform_is_empty():
    gray = np.full((20, 20), 90, dtype=np.uint8)
    assert not np.asarray(GradientLayer.from_grayscale(gray).image).any()


def test_gradient_layer_matches_canny():
    gray = np.zeros((24, 24), dtype=np.uint8)
    gray[8:16, 8:16] = 200
    layer = np.asarray(GradientLayer.from_grayscale(gray).image)
    assert np.array_equal(layer, canny(gray, 10.0, 20.0))
    assert layer.any()


def test_evaluate_size_and_mode():
    out = evaluate(Image.new("RGB", (37, 21), (255, 255, 255)))
    assert out.size == (600, 600)
    assert out.mode == "L"
    assert (np.asarray(out) == 255).all()


def test_run_writes_png_outputs(tmp_path):
    source = tmp_path / "in"
    nested = source / "nested"
    nested.mkdir(parents=True)
    Image.new("RGB", (16, 16), (10, 200, 30)).save(source / "a.jpeg", format="JPEG")
    Image.new("RGB", (8, 12), (0, 0, 0)).save(nested / "b.png", format="PNG")
    (source / "c.txt").write_text("ignored")
    target = tmp_path / "out"

    written = run(source, target)

    assert sorted(p.name for p in written) == ["a.png", "b.png"]
    assert sorted(p.name for p in target.iterdir()) == ["a.png", "b.png"]
    with Image.open(target / "b.png") as result:
        assert result.size == (600, 600)
        assert result.mode == "L"