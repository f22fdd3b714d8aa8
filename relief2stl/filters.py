"""
Numeric building blocks of the depth pipeline.

Every function here is pure and integer-exact: divisions floor unless
noted, LUT entries round half up, so the same input always yields the
same output bytes.
"""

import math

import numpy as np
from PIL import Image

# 3×3 approximately-Gaussian kernel, normalised by its sum (16).
BLUR_KERNEL = np.array([[1, 2, 1],
                        [2, 4, 2],
                        [1, 2, 1]], dtype=np.int64)
BLUR_DIVISOR = int(BLUR_KERNEL.sum())

_SIXTEEN_BIT_MODES = ("I;16", "I;16L", "I;16B", "I;16N", "I")


# ──────────────────────────────────────────────────────────────────────────────
# Source decoding
# ──────────────────────────────────────────────────────────────────────────────

def rgb_planes(image):
    """
    Split a raster image into integer R, G, B planes at full source precision.

    Accepts a PIL image or a numpy array shaped (H, W), (H, W, 3) or
    (H, W, 4) of uint8 / uint16.  Images with an alpha channel are
    premultiplied (composited onto black) first.

    Returns
    -------
    r, g, b : np.ndarray  int64 (H, W)
    bits    : int         8 or 16
    """
    if isinstance(image, Image.Image):
        if image.mode in _SIXTEEN_BIT_MODES:
            gray = np.clip(np.asarray(image).astype(np.int64), 0, 65535)
            return gray, gray, gray, 16
        if image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info:
            arr = np.asarray(image.convert("RGBA"))
        else:
            arr = np.asarray(image.convert("RGB"))
    else:
        arr = np.asarray(image)

    bits = 16 if arr.dtype.kind == "u" and arr.dtype.itemsize == 2 else 8
    max_val = (1 << bits) - 1
    arr = arr.astype(np.int64)

    if arr.ndim == 2:
        return arr, arr, arr, bits
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"[depth] Unsupported image array shape {arr.shape}")

    r, g, b = arr[:, :, 0], arr[:, :, 1], arr[:, :, 2]
    if arr.shape[2] == 4:
        a = arr[:, :, 3]
        r, g, b = r * a // max_val, g * a // max_val, b * a // max_val
    return r, g, b, bits


def luma(r: np.ndarray, g: np.ndarray, b: np.ndarray, bits: int = 8) -> np.ndarray:
    """Rec.601 luma with integer rounding, reduced to 8 bits."""
    y = (299 * r + 587 * g + 114 * b + 500) // 1000
    if bits > 8:
        y = y >> (bits - 8)
    return np.clip(y, 0, 255).astype(np.uint8)


# ──────────────────────────────────────────────────────────────────────────────
# Lookup tables
# ──────────────────────────────────────────────────────────────────────────────

def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def gamma_lut(gamma: float = 1.5) -> np.ndarray:
    """lut[i] = round((i/255)^gamma * 255); gamma > 1 darkens midtones."""
    x = np.arange(256, dtype=np.float64) / 255.0
    return _round_half_up(np.power(x, gamma) * 255.0)


def smoothstep_lut() -> np.ndarray:
    """lut[i] = round(x²(3 − 2x) * 255), x = i/255."""
    x = np.arange(256, dtype=np.float64) / 255.0
    return _round_half_up(x * x * (3.0 - 2.0 * x) * 255.0)


def apply_lut(plane: np.ndarray, lut: np.ndarray) -> np.ndarray:
    return lut[plane]


# ──────────────────────────────────────────────────────────────────────────────
# Geometry
# ──────────────────────────────────────────────────────────────────────────────

def target_size(width: int, height: int, target: float) -> tuple:
    """
    Scale (width, height) so the longer edge lands on ``target`` while
    keeping the aspect ratio.  Both results are at least 1.
    """
    target = max(1.0, float(target))
    if width <= 0 or height <= 0:
        return 1, 1
    ratio = min(target / width, target / height)
    new_w = max(1, int(math.floor(width * ratio + 0.5)))
    new_h = max(1, int(math.floor(height * ratio + 0.5)))
    return new_w, new_h


def resample(plane: np.ndarray, size: tuple) -> np.ndarray:
    """Catmull-Rom (Pillow BICUBIC, a = -0.5) resample of an 8-bit plane to (w, h)."""
    h, w = plane.shape
    if (w, h) == tuple(size):
        return plane.copy()
    img = Image.fromarray(np.ascontiguousarray(plane, dtype=np.uint8))
    return np.asarray(img.resize(tuple(size), Image.BICUBIC), dtype=np.uint8)


# ──────────────────────────────────────────────────────────────────────────────
# Convolution / tone / levels
# ──────────────────────────────────────────────────────────────────────────────

def blur3x3(plane: np.ndarray) -> np.ndarray:
    """
    Integer 3×3 Gaussian blur of the interior pixels.

    Rows 0 and h-1 and columns 0 and w-1 keep their input values; planes
    smaller than 3×3 have no interior and are returned unchanged.
    """
    out = plane.astype(np.uint8).copy()
    h, w = plane.shape
    if h < 3 or w < 3:
        return out

    src = plane.astype(np.int64)
    acc = np.zeros((h - 2, w - 2), dtype=np.int64)
    for ky in range(3):
        for kx in range(3):
            acc += BLUR_KERNEL[ky, kx] * src[ky:ky + h - 2, kx:kx + w - 2]
    out[1:-1, 1:-1] = (acc // BLUR_DIVISOR).astype(np.uint8)
    return out


def quantize(plane: np.ndarray, levels: int = 36) -> np.ndarray:
    """Floor every sample to a multiple of 256 // levels."""
    if not 1 <= levels <= 256:
        raise ValueError(f"[depth] levels must be in 1..256 (got {levels})")
    step = max(1, 256 // levels)
    return ((plane.astype(np.int64) // step) * step).astype(np.uint8)


def invert(plane: np.ndarray) -> np.ndarray:
    return (255 - plane.astype(np.int64)).astype(np.uint8)
