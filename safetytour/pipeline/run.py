from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from ..models import SafetyTour, get_session, init_db
from ..storage import record_artifact, report_path
from .records import ImageRef, TourRecord
from .render_pdf import ReportRenderError, render_pdf


logger = logging.getLogger(__name__)


def load_tour(tour_id: int) -> SafetyTour:
    init_db()
    with get_session() as session:
        tour = session.get(SafetyTour, tour_id)
    if tour is None:
        raise LookupError(f"Safety tour not found: {tour_id}")
    return tour


def _unusable_images(record: TourRecord) -> List[ImageRef]:
    refs = [image for question in record.questions for image in question.images]
    refs.extend(record.photos)
    if record.signature is not None:
        refs.append(record.signature)
    return [ref for ref in refs if not ref.usable()]


def render_record(record: TourRecord, output: Path) -> Path:
    skipped = _unusable_images(record)
    if skipped:
        logger.info("Skipping %d missing or unreadable image(s) for tour %s", len(skipped), record.id)
    logger.info("Rendering report for tour %s -> %s", record.id, output)
    try:
        return render_pdf(record, output)
    except ReportRenderError:
        logger.exception("Report render failed for tour %s", record.id)
        raise


def build_report(tour_id: int, rebuild: bool = False, upload_root: Path | None = None) -> Path:
    """
    Return the PDF for a stored tour, rendering it when no cached copy exists
    or a rebuild is requested.
    """
    if tour_id <= 0:
        raise ValueError("Invalid tour ID provided")
    row = load_tour(tour_id)
    output = report_path(tour_id)
    if output.exists() and not rebuild:
        logger.info("Using cached report for tour %s", tour_id)
        return output

    record = TourRecord.from_mapping(row.model_dump(), upload_root)
    render_record(record, output)
    record_artifact(tour_id, output)
    return output


def load_tour_json(path: Path, upload_root: Path | None = None) -> TourRecord:
    if not path.exists():
        raise FileNotFoundError(f"Tour file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError("Tour file must hold a JSON object")
    return TourRecord.from_mapping(data, upload_root)
