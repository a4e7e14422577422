from __future__ import annotations

from datetime import datetime
from pathlib import Path

from slugify import slugify

from . import config
from .models import ReportArtifact, get_session


REPORT_SUBDIR = "tours"


def reports_dir(base_dir: Path | None = None) -> Path:
    root = base_dir or config.OUT_DIR
    path = root / REPORT_SUBDIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def report_path(tour_id: int, base_dir: Path | None = None) -> Path:
    return reports_dir(base_dir) / f"tour-{int(tour_id)}.pdf"


def resolve_upload(rel: str | Path, root: Path | None = None) -> Path:
    """Map a stored upload path (web-relative or absolute) to a filesystem path."""
    path = Path(str(rel))
    if path.is_absolute() and path.exists():
        return path
    base = root or config.UPLOAD_ROOT
    return base / str(rel).lstrip("/\\")


def download_filename(site: str | None, tour_date: datetime | None, now: datetime | None = None) -> str:
    stamp = (tour_date or now or datetime.now()).strftime("%d-%m-%Y_%H-%M")
    site_slug = slugify(site or "tour") or "site"
    return f"SafetyTour_{site_slug}_{stamp}.pdf"


def record_artifact(tour_id: int, path: Path) -> ReportArtifact:
    try:
        stored = str(path.relative_to(config.OUT_DIR))
    except ValueError:
        stored = str(path)
    artifact = ReportArtifact(tour_id=tour_id, path=stored)
    with get_session() as session:
        session.add(artifact)
        session.commit()
        session.refresh(artifact)
    return artifact
