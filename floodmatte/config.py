"""
Centralized configuration constants for the flood-fill background remover.

Ground rules:
- RGBA uint8 rasters, row-major
- One seed color per image
"""

DEFAULT_THRESHOLD = 25
DEFAULT_BLUR = 1

THRESHOLD_MAX = 100
BLUR_MAX = 20

# Pre-smoothing radius applied before Canny. The post-blur radius is 2 * blur.
PRE_BLUR_RADIUS = 2
FEATHER_RADIUS = 2

# Alpha written on pixels that stop the fill.
DEAD_END_ALPHA = 127
# Offset subtracted from the scaled edge strength on soft transition pixels.
EDGE_ALPHA_OFFSET = 127
# 3 * 255, the maximum of eR + eG + eB.
EDGE_STRENGTH_SCALE = 765

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".webp"}

DEFAULT_INPUT_DIR = "./input"
DEFAULT_OUTPUT_DIR = "./output"
PERFORMANCE_FILENAME = "performance-data.json"

ENV_THRESHOLD = "FLOODMATTE_THRESHOLD"
ENV_BLUR = "FLOODMATTE_BLUR"
