from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
from PIL import Image


def _write_image(path: Path, fmt: str = "PNG") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    arr = np.zeros((24, 32, 3), dtype=np.uint8)
    arr[...] = (240, 240, 240)
    arr[8:16, 10:22] = (30, 60, 90)
    Image.fromarray(arr).save(str(path), format=fmt)


def test_folder_run_writes_pngs_and_report(tmp_path: Path):
    import run as run_mod

    in_dir = tmp_path / "input"
    out_dir = tmp_path / "output"
    _write_image(in_dir / "a.jpg", fmt="JPEG")
    _write_image(in_dir / "b.PNG")
    (in_dir / "notes.txt").write_text("not an image", encoding="utf-8")

    code = run_mod.main([str(in_dir), str(out_dir)])
    assert code == 0

    assert (out_dir / "a.png").exists()
    assert (out_dir / "b.png").exists()
    assert not (out_dir / "notes.png").exists()

    report = json.loads((out_dir / "performance-data.json").read_text(encoding="utf-8"))
    assert [r["name"] for r in report] == ["a.jpg", "b.PNG"]
    for r in report:
        assert set(r) == {"name", "time", "width", "height"}
        assert (r["width"], r["height"]) == (32, 24)
        assert r["time"] >= 0


def test_bad_file_is_skipped_and_batch_continues(tmp_path: Path, capsys):
    import run as run_mod

    in_dir = tmp_path / "input"
    out_dir = tmp_path / "output"
    in_dir.mkdir()
    (in_dir / "broken.png").write_bytes(b"definitely not a png")
    _write_image(in_dir / "good.png")

    report_path = tmp_path / "report.json"
    code = run_mod.main([str(in_dir), str(out_dir), "--report", str(report_path)])
    assert code == 0

    assert (out_dir / "good.png").exists()
    assert not (out_dir / "broken.png").exists()
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert [r["name"] for r in report] == ["good.png"]
    assert "Error processing broken.png" in capsys.readouterr().out


def test_missing_input_dir_is_fatal_and_creates_nothing(tmp_path: Path):
    import run as run_mod

    out_dir = tmp_path / "output"
    with pytest.raises(FileNotFoundError):
        run_mod.main([str(tmp_path / "nope"), str(out_dir)])
    assert not out_dir.exists()


def test_settings_come_from_env_and_flags(monkeypatch, tmp_path: Path):
    import run as run_mod

    seen = {}

    def _fake_process_folder(input_dir, output_dir, report_path, settings):
        seen["settings"] = settings
        seen["report_path"] = report_path
        return []

    monkeypatch.setattr(run_mod, "load_dotenv", lambda: None)
    monkeypatch.setattr(run_mod, "process_folder", _fake_process_folder)
    monkeypatch.setenv("FLOODMATTE_THRESHOLD", "40")
    monkeypatch.setenv("FLOODMATTE_BLUR", "not-a-number")

    assert run_mod.main([str(tmp_path), str(tmp_path / "out"), "--clip-x", "2", "--feather"]) == 0
    s = seen["settings"]
    assert s.threshold == 40
    assert s.blur == 1
    assert (s.clip.x, s.clip.y) == (2, 0)
    assert s.feather is True
    assert seen["report_path"] == tmp_path / "out" / "performance-data.json"

    run_mod.main([str(tmp_path), str(tmp_path / "out"), "--threshold", "150"])
    assert seen["settings"].threshold == 100


def test_stem_collision_is_reported(tmp_path: Path, capsys):
    import run as run_mod

    in_dir = tmp_path / "input"
    out_dir = tmp_path / "output"
    _write_image(in_dir / "same.jpg", fmt="JPEG")
    _write_image(in_dir / "same.png")

    assert run_mod.main([str(in_dir), str(out_dir)]) == 0
    assert (out_dir / "same.png").exists()
    assert "Warning: same.png overwrites same.png written from same.jpg" in capsys.readouterr().out


def test_report_help_mentions_output_relative_default():
    import run as run_mod

    help_text = run_mod.build_parser().format_help()
    assert "<output>/performance-data.json" in help_text
