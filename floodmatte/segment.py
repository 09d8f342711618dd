from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .config import DEAD_END_ALPHA, EDGE_ALPHA_OFFSET, EDGE_STRENGTH_SCALE
from .contracts import FillParams
from .pixels import TRANSPARENT, Pixel, get_pixel, pixel_index, set_pixel, set_pixel_alpha


class ShapeMismatchError(ValueError):
    """Image and edge rasters do not share width and height."""


@dataclass
class FillState:
    """
    Per-run flood fill bookkeeping. Created fresh for every image.
    """

    width: int
    height: int
    visited: bytearray
    frontier: List[Tuple[int, int]] = field(default_factory=list)
    classified: int = 0
    cleared: int = 0
    partial: int = 0
    dead_ends: int = 0

    @classmethod
    def fresh(cls, width: int, height: int) -> "FillState":
        return cls(width=width, height=height, visited=bytearray(width * height))

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def push_neighbours(self, x: int, y: int) -> None:
        # up, right, down, left; popped in reverse
        self.frontier.append((x, y - 1))
        self.frontier.append((x + 1, y))
        self.frontier.append((x, y + 1))
        self.frontier.append((x - 1, y))


def _channel_close(value: int, seed: int, threshold: float) -> bool:
    return abs(value - seed) < threshold


def _edge_below(edge: Pixel, limit: float) -> bool:
    return edge.r < limit and edge.g < limit and edge.b < limit


def is_match(pixel: Pixel, edge: Pixel, seed: Pixel, params: FillParams) -> bool:
    """Color within threshold of the seed on R, G and B, and a weak edge signal."""
    return (
        _channel_close(pixel.r, seed.r, params.threshold)
        and _channel_close(pixel.g, seed.g, params.threshold)
        and _channel_close(pixel.b, seed.b, params.threshold)
        and _edge_below(edge, params.edge_limit)
    )


def edge_strength(edge: Pixel) -> float:
    return (edge.r + edge.g + edge.b) / EDGE_STRENGTH_SCALE


def transition_alpha(edge: Pixel) -> float:
    return max(0.0, 255 * edge_strength(edge) - EDGE_ALPHA_OFFSET)


def seed_frontier(state: FillState, x: int, y: int) -> None:
    state.frontier.extend(
        [
            (x, y),
            (x, state.height - 1),
            (state.width - 1, y),
            (state.width - 1, state.height - 1),
        ]
    )


def classify_pixel(
    data: bytearray,
    edge_data: Optional[bytes],
    seed: Pixel,
    params: FillParams,
    state: FillState,
    x: int,
    y: int,
) -> None:
    index = pixel_index(x, y, state.width)
    pixel = get_pixel(data, index)
    edge = get_pixel(edge_data, index)

    if not is_match(pixel, edge, seed, params):
        set_pixel_alpha(data, index, DEAD_END_ALPHA)
        state.dead_ends += 1
        return

    if _edge_below(edge, params.clear_limit):
        set_pixel(data, index, TRANSPARENT)
        state.cleared += 1
    else:
        set_pixel_alpha(data, index, transition_alpha(edge))
        state.partial += 1
    state.push_neighbours(x, y)


def flood_fill(
    data: bytearray,
    edge_data: Optional[bytes],
    params: FillParams,
    width: int,
    height: int,
) -> FillState:
    """
    Boundary-seeded flood fill over a flat RGBA buffer, modified in place.

    Seeds from the clip origin and the remaining image corners, then pops
    coordinates (LIFO) until the frontier is empty. Only matched pixels grow
    the frontier.
    """
    state = FillState.fresh(width, height)
    x0, y0 = params.clip_x, params.clip_y
    # off-image clip seeds as transparent black
    seed = get_pixel(data, pixel_index(x0, y0, width)) if state.in_bounds(x0, y0) else TRANSPARENT
    seed_frontier(state, x0, y0)

    while state.frontier:
        x, y = state.frontier.pop()
        if not state.in_bounds(x, y):
            continue
        flat = y * width + x
        if state.visited[flat]:
            continue
        state.visited[flat] = 1
        state.classified += 1
        classify_pixel(data, edge_data, seed, params, state, x, y)

    return state


def segment_background(image: np.ndarray, edges: Optional[np.ndarray], params: FillParams) -> np.ndarray:
    """
    Return a copy of `image` with the corner-connected background made transparent.

    Inputs:
      - image: uint8 (H, W, 4) RGBA
      - edges: uint8 (H, W, 4) edge intensity raster, or None when no edge map was built
    """
    if image.ndim != 3 or image.shape[2] != 4:
        raise ValueError(f"Expected RGBA image (H,W,4), got shape={image.shape}")
    height, width = image.shape[:2]
    if edges is not None and edges.shape[:2] != (height, width):
        raise ShapeMismatchError(f"Edge map shape {edges.shape[:2]} does not match image {(height, width)}")
    if edges is not None and (edges.ndim != 3 or edges.shape[2] != 4):
        raise ValueError(f"Expected RGBA edge map (H,W,4), got shape={edges.shape}")

    data = bytearray(np.ascontiguousarray(image, dtype=np.uint8).tobytes())
    edge_data = None if edges is None else np.ascontiguousarray(edges, dtype=np.uint8).tobytes()

    flood_fill(data, edge_data, params, width, height)
    return np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4).copy()
