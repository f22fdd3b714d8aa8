"""Tests for the integer-exact depth pipeline stages."""

import numpy as np
import pytest
from PIL import Image

from relief2stl import filters


def test_luma_weights_and_rounding():
    """Rec.601 integer luma with +500 rounding bias."""
    r = np.array([[255, 0, 0, 255]])
    g = np.array([[0, 255, 0, 255]])
    b = np.array([[0, 0, 255, 255]])
    assert filters.luma(r, g, b).tolist() == [[76, 150, 29, 255]]


def test_luma_sixteen_bit_is_shifted():
    """16-bit luma is reduced to 8 bits by dropping the low byte."""
    v = np.array([[65535, 25600, 255]])
    assert filters.luma(v, v, v, bits=16).tolist() == [[255, 100, 0]]


def test_rgb_planes_premultiplies_alpha():
    """Transparent pixels read as black."""
    arr = np.array([[[200, 200, 200, 0], [200, 100, 50, 255]]], dtype=np.uint8)
    r, g, b, bits = filters.rgb_planes(arr)
    assert bits == 8
    assert (r.tolist(), g.tolist(), b.tolist()) == ([[0, 200]], [[0, 100]], [[0, 50]])


def test_rgb_planes_from_pil_modes():
    """Grayscale, RGB and 16-bit PIL images decode to matching planes."""
    r, g, b, bits = filters.rgb_planes(Image.new("L", (2, 1), 40))
    assert bits == 8 and r.tolist() == g.tolist() == b.tolist() == [[40, 40]]

    r, _, _, bits = filters.rgb_planes(Image.new("I;16", (2, 1), 1000))
    assert bits == 16 and r.tolist() == [[1000, 1000]]


def test_gamma_lut_values():
    lut = filters.gamma_lut(1.5)
    assert lut.dtype == np.uint8 and len(lut) == 256
    assert (lut[0], lut[64], lut[100], lut[128], lut[200], lut[255]) == (0, 32, 63, 91, 177, 255)
    assert np.all(np.diff(lut.astype(int)) >= 0)


def test_smoothstep_lut_values():
    lut = filters.smoothstep_lut()
    assert (lut[0], lut[64], lut[100], lut[128], lut[200], lut[255]) == (0, 40, 87, 128, 225, 255)


def test_target_size_preserves_aspect():
    assert filters.target_size(640, 480, 320) == (320, 240)
    assert filters.target_size(480, 640, 320) == (240, 320)
    assert filters.target_size(1000, 10, 320) == (320, 3)
    assert filters.target_size(100, 100, 480) == (480, 480)
    assert filters.target_size(5000, 1, 320) == (320, 1)
    assert filters.target_size(0, 10, 320) == (1, 1)


def test_resample_constant_plane_stays_constant():
    plane = np.full((50, 80), 200, dtype=np.uint8)
    out = filters.resample(plane, (40, 25))
    assert out.shape == (25, 40)
    assert np.all(out == 200)


def test_blur_interior_and_border():
    """Interior uses the 1-2-1 kernel / 16 (floored); the border is untouched."""
    plane = np.zeros((4, 4), dtype=np.uint8)
    plane[1, 1] = 16
    plane[0, 0] = 160
    out = filters.blur3x3(plane)

    assert out[0, 0] == 160
    assert out[0, 1] == 0 and out[3, 3] == 0
    # (1,1): 4*16 + 1*160 = 224 → 14
    assert out[1, 1] == 14
    # (1,2): 2*16 = 32 → 2 ; (2,2): 16 → 1 ; (2,1): 2*16 → 2
    assert out[1, 2] == 2
    assert out[2, 2] == 1
    assert out[2, 1] == 2


def test_blur_small_planes_pass_through():
    plane = np.array([[10, 200], [30, 40]], dtype=np.uint8)
    assert np.array_equal(filters.blur3x3(plane), plane)


def test_quantize_floors_to_step():
    plane = np.array([0, 6, 7, 13, 14, 128, 255], dtype=np.uint8)
    assert filters.quantize(plane, 36).tolist() == [0, 0, 7, 7, 14, 126, 252]


def test_quantize_is_idempotent():
    rng = np.random.default_rng(7)
    plane = rng.integers(0, 256, size=(30, 30)).astype(np.uint8)
    for levels in (2, 10, 36, 100, 256):
        once = filters.quantize(plane, levels)
        assert np.array_equal(filters.quantize(once, levels), once)


def test_quantize_rejects_bad_levels():
    with pytest.raises(ValueError):
        filters.quantize(np.zeros(3, dtype=np.uint8), 0)


def test_invert_is_self_inverse():
    plane = np.arange(256, dtype=np.uint8)
    inverted = filters.invert(plane)
    assert inverted[0] == 255 and inverted[255] == 0
    assert np.array_equal(filters.invert(inverted), plane)
