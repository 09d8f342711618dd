from __future__ import annotations

import argparse
import os
import time
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from tqdm import tqdm

from floodmatte.config import (
    DEFAULT_BLUR,
    DEFAULT_INPUT_DIR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_THRESHOLD,
    ENV_BLUR,
    ENV_THRESHOLD,
    PERFORMANCE_FILENAME,
)
from floodmatte.contracts import Clip, PerformanceRecord, Settings, normalize_settings
from floodmatte.io import list_images, output_path_for, write_json
from floodmatte.pipeline import process_image


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return float(default)


def process_folder(
    input_dir: Path,
    output_dir: Path,
    report_path: Path,
    settings: Settings,
) -> List[PerformanceRecord]:
    """
    Remove backgrounds from every image directly under input_dir.

    Per-file failures are reported and skipped; only an unreadable input dir is fatal.
    """
    # Fail before creating any output when the input dir is unusable.
    images = list_images(input_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    params = normalize_settings(settings)

    records: List[PerformanceRecord] = []
    claimed: Dict[Path, str] = {}
    for img_path in tqdm(images, desc="Removing backgrounds", unit="img"):
        out_path = output_path_for(img_path, output_dir)
        if out_path in claimed:
            tqdm.write(f"Warning: {img_path.name} overwrites {out_path.name} written from {claimed[out_path]}")
        claimed[out_path] = img_path.name
        try:
            result = process_image(str(img_path), str(out_path), params)
        except Exception as e:  # noqa: BLE001 - one bad image must not stop the batch
            tqdm.write(f"Error processing {img_path.name}: {type(e).__name__}: {e}")
            continue

        records.append(
            PerformanceRecord(
                name=img_path.name,
                time=round(result.timings.remove_ms, 3),
                width=result.width,
                height=result.height,
            )
        )
        tqdm.write(f"{img_path.name}: saved {out_path} ({result.timings.remove_ms:.1f} ms)")

    write_json(str(report_path), [r.model_dump() for r in records])
    print(f"Performance data saved to {report_path}")
    return records


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Edge-aware flood fill background removal for a folder of images.")
    parser.add_argument("input", nargs="?", default=DEFAULT_INPUT_DIR, help="Input directory containing images.")
    parser.add_argument("output", nargs="?", default=DEFAULT_OUTPUT_DIR, help="Output directory for RGBA PNGs.")
    parser.add_argument(
        "--report",
        type=str,
        default=None,
        help=(
            f"Performance report path (default: <output>/{PERFORMANCE_FILENAME}, "
            "i.e. next to the PNGs rather than a single fixed location)."
        ),
    )
    parser.add_argument("--threshold", type=float, default=None, help="Color tolerance, 0-100.")
    parser.add_argument("--blur", type=float, default=None, help="Edge softness, 0-20. 0 disables the edge map.")
    parser.add_argument("--clip-x", type=int, default=0, help="Seed x coordinate.")
    parser.add_argument("--clip-y", type=int, default=0, help="Seed y coordinate.")
    parser.add_argument("--feather", action="store_true", help="Feather the matte edge after segmentation.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)

    threshold = args.threshold if args.threshold is not None else _env_float(ENV_THRESHOLD, DEFAULT_THRESHOLD)
    blur = args.blur if args.blur is not None else _env_float(ENV_BLUR, DEFAULT_BLUR)
    settings = Settings(
        threshold=threshold,
        blur=blur,
        clip=Clip(x=args.clip_x, y=args.clip_y),
        feather=args.feather,
    )

    input_dir = Path(args.input)
    output_dir = Path(args.output)
    report_path = Path(args.report) if args.report else output_dir / PERFORMANCE_FILENAME

    t0 = time.perf_counter()
    records = process_folder(input_dir, output_dir, report_path, settings)
    t1 = time.perf_counter()
    print(f"Done. {len(records)} images in {t1 - t0:.2f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
