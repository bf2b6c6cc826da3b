"""End-to-end run of scripts/analyze_pages.py in mock mode."""
import importlib.util
import json
from pathlib import Path

import numpy as np
from PIL import Image

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "analyze_pages.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("analyze_pages", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_mock_run_writes_json_and_overlays(tmp_path):
    pages_dir = tmp_path / "pages"
    pages_dir.mkdir()
    for name in ("a.png", "b.png"):
        Image.fromarray(np.full((60, 80, 3), 255, dtype=np.uint8)).save(pages_dir / name)
    (pages_dir / "notes.txt").write_text("ignored")

    custom_types = tmp_path / "types.json"
    custom_types.write_text(json.dumps([{"label": "Lab", "color": "#123456"}]))
    output = tmp_path / "out" / "rooms.json"
    vis_dir = tmp_path / "overlays"

    exit_code = _load_script().main([
        "--image-dir", str(pages_dir),
        "--classification", "commercial",
        "--custom-types", str(custom_types),
        "--mock",
        "--output", str(output),
        "--visualize",
        "--vis-dir", str(vis_dir),
    ])

    assert exit_code == 0
    data = json.loads(output.read_text())
    assert set(data["rooms"]) == {"page-1", "page-2"}
    assert data["fallback"] is True
    assert data["metadata"]["classification"] == "commercial"
    assert sorted(p.name for p in vis_dir.iterdir()) == ["a-analysis.png", "b-analysis.png"]


def test_empty_directory_fails(tmp_path):
    exit_code = _load_script().main([
        "--image-dir", str(tmp_path),
        "--mock",
        "--output", str(tmp_path / "rooms.json"),
    ])
    assert exit_code == 1
