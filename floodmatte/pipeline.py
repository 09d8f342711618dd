from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Mapping, Union

import numpy as np

from .composite import feather_alpha
from .contracts import FillParams, Settings, normalize_settings
from .edges import build_edge_map
from .io import load_image_rgba, save_png
from .segment import segment_background

SettingsLike = Union[Settings, Mapping[str, Any], FillParams, None]


@dataclass(frozen=True)
class StageTimings:
    load_s: float
    edges_s: float
    segment_s: float
    save_s: float
    total_s: float

    @property
    def remove_ms(self) -> float:
        """Time spent in background removal proper (edge map + fill)."""
        return (self.edges_s + self.segment_s) * 1000.0


@dataclass(frozen=True)
class ProcessResult:
    width: int
    height: int
    timings: StageTimings


def _as_params(settings: SettingsLike) -> FillParams:
    if isinstance(settings, FillParams):
        return settings
    return normalize_settings(settings)


def remove_background(image: np.ndarray, settings: SettingsLike = None) -> np.ndarray:
    """
    Full in-memory pipeline on an RGBA uint8 (H,W,4) array. Returns a new array.
    """
    params = _as_params(settings)
    edges = build_edge_map(image, params)
    out = segment_background(image, edges, params)
    if params.feather:
        out = feather_alpha(out)
    return out


def process_image(
    image_path: str,
    out_path: str,
    settings: SettingsLike = None,
) -> ProcessResult:
    """
    Deterministic, linear pipeline:
      1) Load image as RGBA
      2) Edge map
      3) Flood fill segmentation (+ optional feathering)
      4) Save PNG
    """
    params = _as_params(settings)
    t0 = time.perf_counter()

    t_load0 = time.perf_counter()
    rgba = load_image_rgba(image_path)
    t_load1 = time.perf_counter()

    t_edge0 = time.perf_counter()
    edges = build_edge_map(rgba, params)
    t_edge1 = time.perf_counter()

    t_seg0 = time.perf_counter()
    out = segment_background(rgba, edges, params)
    if params.feather:
        out = feather_alpha(out)
    t_seg1 = time.perf_counter()

    t_save0 = time.perf_counter()
    save_png(out, out_path)
    t_save1 = time.perf_counter()

    t1 = time.perf_counter()
    height, width = rgba.shape[:2]
    return ProcessResult(
        width=width,
        height=height,
        timings=StageTimings(
            load_s=t_load1 - t_load0,
            edges_s=t_edge1 - t_edge0,
            segment_s=t_seg1 - t_seg0,
            save_s=t_save1 - t_save0,
            total_s=t1 - t0,
        ),
    )
