from __future__ import annotations

import json
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from PIL import Image
from sqlmodel import select

from safetytour import config
from safetytour.models import ReportArtifact, SafetyTour, get_session, init_db, reset_engine
from safetytour.pipeline.run import build_report, load_tour_json
from safetytour.storage import download_filename, report_path


class ReportServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        root = Path(self.temp_dir.name)
        self.saved = (config.OUT_DIR, config.DB_PATH, config.UPLOAD_ROOT)
        config.set_out_dir(root / "out")
        config.set_upload_root(root)
        reset_engine()
        init_db()
        photo_dir = root / "uploads" / "tours" / "q-1"
        photo_dir.mkdir(parents=True)
        Image.new("RGB", (200, 150), (10, 120, 200)).save(photo_dir / "a.png")
        self.root = root

    def tearDown(self) -> None:
        config.OUT_DIR, config.DB_PATH, config.UPLOAD_ROOT = self.saved
        reset_engine()
        self.temp_dir.cleanup()

    def _add_tour(self) -> int:
        responses = [
            {"code": "1.1", "question": "Perimeter in place?", "result": "Pass", "priority": "low",
             "images": ["uploads/tours/q-1/a.png", "uploads/tours/q-1/missing.png"]},
            {"code": "1.2", "question": "Walkways lit?", "result": "Fail", "priority": "High", "note": "Lamp out"},
        ]
        tour = SafetyTour(
            site="North Yard",
            area="Gate 2",
            lead_name="Sam",
            tour_date=datetime(2025, 3, 4, 9, 30),
            responses=json.dumps(responses),
        )
        with get_session() as session:
            session.add(tour)
            session.commit()
            session.refresh(tour)
        return tour.id

    def _artifacts(self) -> list:
        with get_session() as session:
            return list(session.exec(select(ReportArtifact)))

    def test_build_report_renders_and_records(self) -> None:
        tour_id = self._add_tour()
        path = build_report(tour_id)
        self.assertEqual(path, report_path(tour_id))
        self.assertTrue(path.exists())
        artifacts = self._artifacts()
        self.assertEqual(len(artifacts), 1)
        self.assertEqual(artifacts[0].path, str(Path("tours") / f"tour-{tour_id}.pdf"))

    def test_cached_report_is_reused_until_rebuild(self) -> None:
        tour_id = self._add_tour()
        first = build_report(tour_id)
        stamp = first.stat().st_mtime_ns
        build_report(tour_id)
        self.assertEqual(first.stat().st_mtime_ns, stamp)
        self.assertEqual(len(self._artifacts()), 1)
        build_report(tour_id, rebuild=True)
        self.assertEqual(len(self._artifacts()), 2)

    def test_unknown_and_invalid_ids(self) -> None:
        with self.assertRaises(LookupError):
            build_report(999)
        with self.assertRaises(ValueError):
            build_report(0)

    def test_load_tour_json(self) -> None:
        source = self.root / "tour.json"
        source.write_text(json.dumps({"site": "Depot", "responses": [{"result": "na"}]}), encoding="utf-8")
        record = load_tour_json(source)
        self.assertEqual(record.site, "Depot")
        self.assertIsNone(record.score)
        with self.assertRaises(FileNotFoundError):
            load_tour_json(self.root / "absent.json")


def test_download_filename() -> None:
    name = download_filename("Main Site!", datetime(2025, 3, 4, 9, 30))
    assert name == "SafetyTour_main-site_04-03-2025_09-30.pdf"
    assert download_filename(None, datetime(2025, 1, 2, 3, 4)) == "SafetyTour_tour_02-01-2025_03-04.pdf"


if __name__ == "__main__":
    unittest.main()
