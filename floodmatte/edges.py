from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from .config import PRE_BLUR_RADIUS
from .contracts import FillParams


def _check_rgba(raster: np.ndarray) -> None:
    if raster.ndim != 3 or raster.shape[2] != 4:
        raise ValueError(f"Expected RGBA raster (H,W,4), got shape={raster.shape}")


def stack_blur(raster: np.ndarray, radius: float) -> np.ndarray:
    """
    Stack blur every channel of an RGBA raster. Radius < 1 returns an unchanged copy.
    """
    _check_rgba(raster)
    r = int(round(radius))
    if r < 1:
        return raster.copy()
    k = 2 * r + 1
    return cv2.stackBlur(np.ascontiguousarray(raster, dtype=np.uint8), (k, k))


def detect_edges(raster: np.ndarray, low: float, high: float) -> np.ndarray:
    """
    Canny edge magnitude of an RGBA raster, re-expressed as opaque RGBA (R=G=B=edge, A=255).
    """
    _check_rgba(raster)
    gray = cv2.cvtColor(np.ascontiguousarray(raster, dtype=np.uint8), cv2.COLOR_RGBA2GRAY)
    edges = cv2.Canny(gray, float(low), float(high))

    out = np.empty(raster.shape, dtype=np.uint8)
    out[..., 0] = edges
    out[..., 1] = edges
    out[..., 2] = edges
    out[..., 3] = 255
    return out


def build_edge_map(image: np.ndarray, params: FillParams) -> Optional[np.ndarray]:
    """
    Edge intensity raster used to stop the flood fill:
      - pre-blur (fixed radius) to suppress noise
      - grayscale + Canny at threshold / 2
      - post-blur by 2 * blur to soften the boundary band

    Returns None when blur is 0; the segmenter then reads every edge pixel as zero.
    """
    if params.blur <= 0:
        return None

    smoothed = stack_blur(image, PRE_BLUR_RADIUS)
    edges = detect_edges(smoothed, params.threshold / 2, params.threshold / 2)
    return stack_blur(edges, params.blur * 2)
