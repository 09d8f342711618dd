from __future__ import annotations

import numpy as np
from PIL import Image

from .config import FEATHER_RADIUS
from .edges import stack_blur


def to_pil_rgba(rgba: np.ndarray) -> Image.Image:
    """
    Wrap a uint8 (H,W,4) array as a PIL RGBA image.
    """
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise ValueError(f"Expected RGBA image (H,W,4), got {rgba.shape}")
    return Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8))


def feather_alpha(rgba: np.ndarray, radius: int = FEATHER_RADIUS) -> np.ndarray:
    """
    Soften hard matte boundaries by compositing the image over a blurred copy of itself.

    out_a   = src_a + dst_a * (1 - src_a)
    out_rgb = (src_rgb * src_a + dst_rgb * dst_a * (1 - src_a)) / out_a
    Pixels with out_a == 0 become transparent black.
    """
    blurred = stack_blur(rgba, radius)

    src = rgba.astype(np.float32)
    dst = blurred.astype(np.float32)
    src_a = src[..., 3:4] / 255.0
    dst_a = dst[..., 3:4] / 255.0
    out_a = src_a + dst_a * (1.0 - src_a)

    num = src[..., :3] * src_a + dst[..., :3] * dst_a * (1.0 - src_a)
    rgb = np.divide(num, out_a, out=np.zeros_like(num), where=out_a > 0)

    out = np.empty_like(src)
    out[..., :3] = rgb
    out[..., 3:4] = out_a * 255.0
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def save_rgba_png(img: Image.Image, out_path: str) -> None:
    """
    Save as lossless RGBA PNG.
    """
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    img.save(out_path, format="PNG", optimize=False)
