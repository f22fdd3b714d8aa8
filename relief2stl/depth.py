"""
Depth-map extraction: colour image → quantized HeightField.

Brightness stands in for depth.  The canonical pipeline is

    luma → gamma → resample → 3×3 blur → smoothstep → level quantize → invert

and every stage is integer-exact (see filters.py), so two runs on the
same image produce identical depth maps.
"""

from dataclasses import dataclass

import numpy as np

from . import filters
from .heightfield import HeightField


@dataclass
class DepthConfig:
    """
    detail_level    : scales base_resolution (the long-edge target, px)
    invert          : bright areas become low instead of high
    base_resolution : long-edge target at detail_level = 1.0
    levels          : number of discrete relief steps
    gamma           : exponent of the gamma LUT (> 1 darkens midtones)
    tone_curve      : apply the smoothstep LUT after blurring
    """
    detail_level: float = 1.0
    invert: bool = False
    base_resolution: int = 320
    levels: int = 36
    gamma: float = 1.5
    tone_curve: bool = True

    def __post_init__(self):
        if not self.detail_level > 0:
            raise ValueError(f"[depth] detail_level must be > 0 (got {self.detail_level})")
        if self.base_resolution < 1:
            raise ValueError(f"[depth] base_resolution must be >= 1 (got {self.base_resolution})")
        if not 1 <= self.levels <= 256:
            raise ValueError(f"[depth] levels must be in 1..256 (got {self.levels})")
        if not self.gamma > 0:
            raise ValueError(f"[depth] gamma must be > 0 (got {self.gamma})")

    @property
    def target(self) -> float:
        return max(1.0, self.base_resolution * self.detail_level)


def to_grayscale(image) -> HeightField:
    """
    Raw luma at source resolution – no resampling, blur, tone curve,
    quantization or inversion.  Used when depth extraction is skipped.
    """
    r, g, b, bits = filters.rgb_planes(image)
    if r.size == 0:
        return HeightField(1, 1, [0])
    return HeightField.from_array(filters.luma(r, g, b, bits))


def extract_depth(image, cfg: DepthConfig = None) -> HeightField:
    """
    Convert a raster image into a quantized height field.

    Parameters
    ----------
    image : PIL.Image.Image or np.ndarray  (H, W[, 3|4]) uint8/uint16
    cfg   : DepthConfig (defaults when omitted)

    Returns
    -------
    HeightField whose longer edge is cfg.target (± rounding), aspect kept.
    """
    cfg = cfg or DepthConfig()
    r, g, b, bits = filters.rgb_planes(image)
    src_h, src_w = r.shape[:2]

    if src_w == 0 or src_h == 0:
        print(f"[depth] Empty source image ({src_w} × {src_h}), emitting a 1 × 1 field")
        return HeightField(1, 1, [255 if cfg.invert else 0])

    new_w, new_h = filters.target_size(src_w, src_h, cfg.target)
    print(f"[depth] Source {src_w} × {src_h} px ({bits}-bit)  →  field {new_w} × {new_h}")

    plane = filters.luma(r, g, b, bits)
    plane = filters.apply_lut(plane, filters.gamma_lut(cfg.gamma))
    plane = filters.resample(plane, (new_w, new_h))
    plane = filters.blur3x3(plane)
    if cfg.tone_curve:
        plane = filters.apply_lut(plane, filters.smoothstep_lut())
    plane = filters.quantize(plane, cfg.levels)
    if cfg.invert:
        plane = filters.invert(plane)

    print(f"[depth] levels={cfg.levels}  gamma={cfg.gamma}  tone_curve={cfg.tone_curve}  "
          f"invert={cfg.invert}  range=[{int(plane.min())}, {int(plane.max())}]")
    return HeightField.from_array(np.ascontiguousarray(plane))
