from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator, List

import numpy as np
from PIL import Image

from .composite import save_rgba_png, to_pil_rgba
from .config import IMAGE_EXTENSIONS


def load_image_rgba(path: str) -> np.ndarray:
    """
    Load an image as RGBA uint8 ndarray of shape (H, W, 4). Animated formats use the first frame.
    """
    with Image.open(path) as img:
        img.load()
        rgba = img.convert("RGBA")
    arr = np.array(rgba, dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[2] != 4:
        raise ValueError(f"Expected RGBA image array, got shape={arr.shape}")
    return arr


def save_png(rgba: np.ndarray, path: str) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    save_rgba_png(to_pil_rgba(rgba), str(p))


def write_json(path: str, data: Any) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2), encoding="utf-8")


def is_image_file(name: str) -> bool:
    return Path(name).suffix.lower() in IMAGE_EXTENSIONS


def iter_images(input_dir: Path) -> Iterator[Path]:
    """
    Image files directly under input_dir (non-recursive), sorted by name.
    """
    for p in sorted(input_dir.iterdir()):
        if p.is_file() and is_image_file(p.name):
            yield p


def list_images(input_dir: Path) -> List[Path]:
    if not input_dir.exists():
        raise FileNotFoundError(f"Input dir not found: {input_dir}")
    if not input_dir.is_dir():
        raise NotADirectoryError(f"Input path is not a directory: {input_dir}")
    return list(iter_images(input_dir))


def output_path_for(input_path: Path, output_dir: Path) -> Path:
    return output_dir / f"{input_path.stem}.png"
