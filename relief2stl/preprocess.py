"""
Subject preprocessing ahead of depth extraction.

Turns an arbitrary input into a square, subject-centred RGB image on a
black background:

  1. RGBA conversion, remembering whether the alpha channel already
     carries a cut-out
  2. shrink so the longest edge is at most ``max_size``
  3. background removal (only when there was no usable alpha)
  4. alpha bounding box of the subject
  5. square crop centred on that box
  6. premultiplied alpha, so transparent fringes fade to black
"""

import numpy as np
from PIL import Image

from .errors import PreprocessError
from .rembg import BackgroundRemover, PassthroughRemover


def has_useful_alpha(image: Image.Image) -> bool:
    """True when any pixel is not fully opaque."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    alpha = np.asarray(image)[:, :, 3]
    return bool(np.any(alpha != 255))


def resize_within_max(image: Image.Image, max_size: int) -> Image.Image:
    w, h = image.size
    longest = max(w, h)
    if longest <= max_size:
        return image
    scale = max_size / longest
    new_w, new_h = max(1, int(w * scale)), max(1, int(h * scale))
    print(f"[preprocess] Resizing {w} × {h} → {new_w} × {new_h}")
    return image.resize((new_w, new_h), Image.LANCZOS)


def alpha_bbox(image: Image.Image, threshold: float = 0.8) -> tuple:
    """
    Bounding box (left, top, right, bottom) – right/bottom exclusive – of
    the pixels whose alpha exceeds ``threshold * 255``.
    """
    alpha = np.asarray(image.convert("RGBA"))[:, :, 3]
    th = int(threshold * 255)
    ys, xs = np.nonzero(alpha > th)
    if len(xs) == 0:
        raise PreprocessError("No foreground found in the alpha channel",
                              {"threshold": threshold, "size": image.size})
    return int(xs.min()), int(ys.min()), int(xs.max()) + 1, int(ys.max()) + 1


def crop_square(image: Image.Image, bbox: tuple) -> Image.Image:
    """Square crop centred on bbox, side = longest bbox edge, clipped to the image."""
    left, top, right, bottom = bbox
    cx = (left + right) // 2
    cy = (top + bottom) // 2
    half = max(right - left, bottom - top) // 2

    w, h = image.size
    box = (max(0, cx - half), max(0, cy - half), min(w, cx + half), min(h, cy + half))
    return image.crop(box)


def premultiply(image: Image.Image) -> Image.Image:
    """Scale RGB by alpha (c * a/255, truncated) and drop the alpha channel."""
    rgba = np.asarray(image.convert("RGBA")).astype(np.float64)
    a = rgba[:, :, 3:4] / 255.0
    rgb = (rgba[:, :, :3] * a).astype(np.uint8)
    return Image.fromarray(rgb)


class Preprocessor:
    """
    remover         : called once per image that has no usable alpha
    max_size        : longest-edge limit before removal (px)
    alpha_threshold : fraction of full opacity that counts as subject
    """

    def __init__(self, remover: BackgroundRemover = None,
                 max_size: int = 1024, alpha_threshold: float = 0.8):
        self.remover = remover or PassthroughRemover()
        self.max_size = max_size
        self.alpha_threshold = alpha_threshold

    def preprocess(self, image: Image.Image) -> Image.Image:
        src = image.convert("RGBA")
        has_alpha = has_useful_alpha(src)
        src = resize_within_max(src, self.max_size)

        if has_alpha:
            print("[preprocess] Using existing alpha channel")
            out = src
        else:
            print(f"[preprocess] No alpha – calling {type(self.remover).__name__}")
            out = self.remover.remove(src).convert("RGBA")

        bbox = alpha_bbox(out, self.alpha_threshold)
        out = crop_square(out, bbox)
        print(f"[preprocess] Subject bbox {bbox}  →  crop {out.size[0]} × {out.size[1]}")
        return premultiply(out)
