from __future__ import annotations

from pathlib import Path
from typing import List
import json


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "tours.db"
UPLOAD_ROOT = BASE_DIR
STYLE_PRESET_PATH = Path(__file__).resolve().parent / "assets" / "report_style.json"

TIMEZONE = "Europe/London"

REPORT_TITLE = "Site Safety Tour — Report"

# mm, A4 portrait
PAGE_MARGIN = 12.0
BOTTOM_MARGIN = 14.0

LOGO_CANDIDATES: List[Path] = [
    BASE_DIR / "assets" / "img" / "mcgoff.png",
    BASE_DIR / "assets" / "img" / "logo.png",
]


def load_style_preset() -> dict:
    with STYLE_PRESET_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "tours.db"


def set_upload_root(path: Path) -> None:
    global UPLOAD_ROOT
    UPLOAD_ROOT = path


def find_logo_path() -> Path | None:
    for candidate in LOGO_CANDIDATES:
        if candidate.is_file():
            return candidate
    return None
