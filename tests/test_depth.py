"""Tests for depth extraction and the raw grayscale bypass."""

import numpy as np
import pytest
from PIL import Image

from relief2stl.depth import DepthConfig, extract_depth, to_grayscale


def _gradient_image(width, height):
    x = np.linspace(0, 255, width, dtype=np.float64)
    y = np.linspace(0, 255, height, dtype=np.float64)[:, None]
    r = np.broadcast_to(x, (height, width))
    g = np.broadcast_to(y, (height, width))
    b = (r + g) / 2
    return np.stack([r, g, b], axis=-1).astype(np.uint8)


def test_uniform_white_quantizes_to_top_level():
    """255 survives gamma, blur and smoothstep, then floors to 252 with 36 levels."""
    img = Image.new("RGB", (640, 480), (255, 255, 255))
    hf = extract_depth(img)
    assert (hf.width, hf.height) == (320, 240)
    assert np.all(hf.to_array() == 252)


def test_invert_flips_uniform_field():
    img = Image.new("RGB", (64, 64), (255, 255, 255))
    hf = extract_depth(img, DepthConfig(invert=True))
    assert np.all(hf.to_array() == 3)

    black = extract_depth(Image.new("RGB", (64, 64), (0, 0, 0)), DepthConfig(invert=True))
    assert np.all(black.to_array() == 255)


@pytest.mark.parametrize("size", [(640, 480), (300, 1000), (123, 77), (1000, 10), (50, 50)])
@pytest.mark.parametrize("detail", [0.25, 1.0, 1.5])
def test_dimensions_and_range(size, detail):
    """Long edge lands on 320 * detail (±1); aspect ratio is kept; samples in [0, 255]."""
    w, h = size
    hf = extract_depth(_gradient_image(w, h), DepthConfig(detail_level=detail))
    target = 320 * detail

    assert abs(max(hf.width, hf.height) - target) <= 1
    assert abs(hf.height * w / h - hf.width) <= 1 or abs(hf.width * h / w - hf.height) <= 1
    arr = hf.to_array()
    assert arr.dtype == np.uint8
    assert arr.min() >= 0 and arr.max() <= 255


def test_output_is_quantized():
    hf = extract_depth(_gradient_image(200, 150), DepthConfig(levels=36))
    assert np.all(hf.to_array() % 7 == 0)


def test_extraction_is_deterministic():
    img = _gradient_image(97, 61)
    assert extract_depth(img) == extract_depth(img)


def test_brighter_is_higher():
    hf = extract_depth(_gradient_image(400, 40), DepthConfig(tone_curve=False))
    row = hf.to_array()[hf.height // 2].astype(int)
    assert row[-2] > row[1]


def test_sixteen_bit_source():
    """16-bit samples are read at full precision and reduced to 8 bits."""
    img16 = np.full((90, 120, 3), 65535, dtype=np.uint16)
    hf = extract_depth(img16)
    assert (hf.width, hf.height) == (320, 240)
    assert np.all(hf.to_array() == 252)


def test_zero_area_image_clamps_to_one_pixel():
    hf = extract_depth(np.zeros((0, 5, 3), dtype=np.uint8))
    assert (hf.width, hf.height) == (1, 1)
    assert hf.at(0, 0) == 0
    inverted = extract_depth(np.zeros((0, 5, 3), dtype=np.uint8), DepthConfig(invert=True))
    assert inverted.at(0, 0) == 255


def test_config_validation():
    with pytest.raises(ValueError):
        DepthConfig(detail_level=0)
    with pytest.raises(ValueError):
        DepthConfig(levels=0)
    with pytest.raises(ValueError):
        DepthConfig(levels=257)


def test_to_grayscale_is_raw_luma():
    """No resampling, blur, quantization or inversion."""
    arr = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255]],
                    [[10, 10, 10], [128, 128, 128], [255, 255, 255]]], dtype=np.uint8)
    hf = to_grayscale(arr)
    assert (hf.width, hf.height) == (3, 2)
    assert hf.to_array().tolist() == [[76, 150, 29], [10, 128, 255]]


def test_to_grayscale_keeps_source_resolution():
    hf = to_grayscale(Image.new("RGB", (1234, 17), (90, 90, 90)))
    assert (hf.width, hf.height) == (1234, 17)
    assert np.all(hf.to_array() == 90)


@pytest.mark.parametrize("dtype", ["<u2", ">u2"])
def test_sixteen_bit_byte_order(dtype):
    """40000 in either byte order reduces to 40000 >> 8."""
    hf = to_grayscale(np.full((4, 4, 3), 40000, dtype=dtype))
    assert np.all(hf.to_array() == 156)
