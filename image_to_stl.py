"""
image_to_stl.py
===============
Turns a photo or drawing into a printable relief (lithophane-style
plaque): the image becomes a quantized depth map, the depth map becomes a
closed mesh with a flat base and side walls, and the mesh is written as
ASCII STL next to the depth map PNG.

Edit the CONFIG block below to set the defaults, then run:
    python image_to_stl.py
or override any of them on the command line:
    python image_to_stl.py --image-path photo.jpg --no-skip-depth --detail-level 1.5

Outputs (in OUTPUT_DIR)
-----------------------
  <uid>_depth_map.png  – 8-bit grayscale, one pixel per height sample
  <uid>.stl            – ASCII STL, solid "relief_model"
"""

import argparse
import os
import sys
import uuid

from relief2stl.depth import DepthConfig, extract_depth, to_grayscale
from relief2stl.errors import Relief2StlError
from relief2stl.mesh import MeshConfig, facet_count, generate_facets
from relief2stl.preprocess import Preprocessor
from relief2stl.rembg import HTTPRemover, PassthroughRemover
from relief2stl.report import mesh_report
from relief2stl.source import open_image
from relief2stl.stl import save_stl

# ──────────────────────────────────────────────────────────────────────────────
# CONFIG  ← edit these values
# ──────────────────────────────────────────────────────────────────────────────

# Local path or http(s) URL of the input image.
IMAGE = "input.png"

# Directory that receives the depth map and the STL.
OUTPUT_DIR = "./output"

# Width of the printed model in mm.  Depth-map columns are spread evenly
# across it, so one sample covers MODEL_WIDTH / field_width mm.
MODEL_WIDTH = 50.0

# Relief height in mm reached by a depth value of 255.
MODEL_THICKNESS = 5.0

# Solid backing below the relief, in mm.
BASE_THICKNESS = 2.0

# True  = use the image's raw luma directly at full resolution.
# False = run the depth pipeline (resample, blur, tone curve, levels).
SKIP_DEPTH = True

# Bright areas become low instead of high (depth pipeline only).
INVERT_DEPTH = False

# Resolution multiplier.  1.0 processes the image at 320 px on its long
# edge, which typically keeps the STL under 100 MB.  Doubling it roughly
# quadruples the file size and processing time.
DETAIL_LEVEL = 1.0

# Number of discrete relief steps in the depth pipeline.
LEVELS = 36

# Smoothstep tone curve after blurring (compresses extremes).
TONE_CURVE = True

# Crop to the subject (alpha bbox → square → premultiplied alpha) before
# extracting depth.
PREPROCESS = False

# Background-removal service used by PREPROCESS for images without alpha.
# None = no removal (the whole image counts as subject).
REMBG_URL = None

# Re-load the written STL with trimesh and print watertight/volume stats.
REPORT = True

# ──────────────────────────────────────────────────────────────────────────────


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Convert an image into a relief STL.")
    p.add_argument("--image-path", default=IMAGE, help="local path or web URL of the input image")
    p.add_argument("--output-dir", default=OUTPUT_DIR)
    p.add_argument("--model-width", type=float, default=MODEL_WIDTH, help="model width in mm")
    p.add_argument("--model-thickness", type=float, default=MODEL_THICKNESS, help="max relief height in mm")
    p.add_argument("--base-thickness", type=float, default=BASE_THICKNESS, help="base thickness in mm")
    p.add_argument("--skip-depth", action=argparse.BooleanOptionalAction, default=SKIP_DEPTH,
                   help="use the raw grayscale image instead of the depth pipeline")
    p.add_argument("--invert-depth", action=argparse.BooleanOptionalAction, default=INVERT_DEPTH)
    p.add_argument("--detail-level", type=float, default=DETAIL_LEVEL)
    p.add_argument("--levels", type=int, default=LEVELS)
    p.add_argument("--tone-curve", action=argparse.BooleanOptionalAction, default=TONE_CURVE)
    p.add_argument("--preprocess", action=argparse.BooleanOptionalAction, default=PREPROCESS)
    p.add_argument("--rembg-url", default=REMBG_URL)
    p.add_argument("--report", action=argparse.BooleanOptionalAction, default=REPORT)
    return p.parse_args(argv)


def run(args) -> tuple:
    """
    Execute the full pipeline for parsed ``args``.

    Returns
    -------
    depth_path : str
    stl_path   : str
    """
    depth_cfg = DepthConfig(detail_level=args.detail_level, invert=args.invert_depth,
                            levels=args.levels, tone_curve=args.tone_curve)
    mesh_cfg = MeshConfig(model_width=args.model_width, model_thickness=args.model_thickness,
                          base_thickness=args.base_thickness)

    img = open_image(args.image_path)

    if args.preprocess:
        remover = HTTPRemover(args.rembg_url) if args.rembg_url else PassthroughRemover()
        img = Preprocessor(remover).preprocess(img)

    if args.skip_depth:
        print("[depth] Skipping depth pipeline – using raw grayscale")
        field = to_grayscale(img)
    else:
        field = extract_depth(img, depth_cfg)

    os.makedirs(args.output_dir, exist_ok=True)
    uid = uuid.uuid4().hex
    depth_path = os.path.join(args.output_dir, uid + "_depth_map.png")
    stl_path = os.path.join(args.output_dir, uid + ".stl")

    field.save(depth_path)
    print(f"[depth] Saved {field.width} × {field.height} depth map → {depth_path}")

    facets = generate_facets(field, mesh_cfg)
    print(f"[mesh] {field.width} × {field.height} field  |  "
          f"pixel {mesh_cfg.pixel_size(field.width):.4f} mm  |  "
          f"{facet_count(field.width, field.height):,} facets")
    save_stl(facets, stl_path)

    if args.report:
        mesh_report(stl_path)

    return depth_path, stl_path


def main(argv=None):
    args = parse_args(argv)

    print("=" * 60)
    print("  image_to_stl.py")
    print("=" * 60)
    print(f"  image           : {args.image_path}")
    print(f"  output dir      : {args.output_dir}")
    print(f"  model_width     : {args.model_width} mm")
    print(f"  model_thickness : {args.model_thickness} mm")
    print(f"  base_thickness  : {args.base_thickness} mm")
    print(f"  skip_depth      : {args.skip_depth}")
    print(f"  invert_depth    : {args.invert_depth}")
    print(f"  detail_level    : {args.detail_level}  (levels={args.levels}  tone_curve={args.tone_curve})")
    print(f"  preprocess      : {args.preprocess}  (rembg={args.rembg_url or 'none'})")
    print("=" * 60)

    try:
        depth_path, stl_path = run(args)
    except (Relief2StlError, ValueError) as e:
        sys.exit(f"[error] {e}")

    print(f"[done] depth map: {depth_path}")
    print(f"[done] stl      : {stl_path}")


if __name__ == "__main__":
    main()
