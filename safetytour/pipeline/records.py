from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Optional

from PIL import Image

from ..storage import resolve_upload
from .scoring import tally_score
from .status import Priority, ResultStatus


def json_arr(value: Any) -> list:
    """Decode a JSON array column; anything else becomes an empty list."""
    if isinstance(value, list):
        return value
    if not value or not isinstance(value, (str, bytes)):
        return []
    try:
        decoded = json.loads(value)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return []
    return decoded if isinstance(decoded, list) else []


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    text = _text(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class ImageRef:
    path: Path

    def exists(self) -> bool:
        return self.path.is_file() and os.access(self.path, os.R_OK)

    def usable(self) -> bool:
        """Readable and decodable as an image; anything else is left out of the report."""
        if not self.exists():
            return False
        try:
            with Image.open(self.path) as image:
                image.verify()
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError):
            return False
        return True


def _image_refs(value: Any, upload_root: Path | None) -> List[ImageRef]:
    refs: List[ImageRef] = []
    for item in json_arr(value):
        rel = _text(item).strip()
        if rel:
            refs.append(ImageRef(resolve_upload(rel, upload_root)))
    return refs


@dataclass
class QuestionRecord:
    code: str = ""
    question: str = ""
    section: str = ""
    result: ResultStatus = ResultStatus.UNKNOWN
    priority: Priority = Priority.UNKNOWN
    result_text: str = ""
    priority_text: str = ""
    note: str = ""
    images: List[ImageRef] = field(default_factory=list)

    @property
    def result_label(self) -> str:
        return self.result_text.upper() if self.result_text else "N/A"

    @property
    def priority_label(self) -> str:
        raw = self.priority_text
        return raw[:1].upper() + raw[1:] if raw else "—"

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any], upload_root: Path | None = None) -> "QuestionRecord":
        result_text = _text(row.get("result")).strip()
        priority_text = _text(row.get("priority")).strip()
        return cls(
            code=_text(row.get("code")),
            question=_text(row.get("question")),
            section=_text(row.get("section")),
            result=ResultStatus.parse(result_text),
            priority=Priority.parse(priority_text),
            result_text=result_text,
            priority_text=priority_text,
            note=_text(row.get("note")),
            images=_image_refs(row.get("images"), upload_root),
        )


@dataclass
class TourRecord:
    id: Optional[int] = None
    site: str = ""
    area: str = ""
    lead_name: str = ""
    participants: str = ""
    tour_date: Optional[datetime] = None
    status: str = "Open"
    score: Optional[float] = None
    questions: List[QuestionRecord] = field(default_factory=list)
    photos: List[ImageRef] = field(default_factory=list)
    signature: Optional[ImageRef] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any], upload_root: Path | None = None) -> "TourRecord":
        """
        Build a record from a stored tour row or a JSON document.

        ``responses`` and ``photos`` may be JSON text or already-decoded lists.
        Fields that are missing or of the wrong type fall back to empty values.
        """
        questions = [
            QuestionRecord.from_mapping(item, upload_root)
            for item in json_arr(row.get("responses"))
            if isinstance(item, Mapping)
        ]
        signature_rel = _text(row.get("signature_path")).strip()
        tour_id = row.get("id")
        return cls(
            id=tour_id if isinstance(tour_id, int) else None,
            site=_text(row.get("site")),
            area=_text(row.get("area")),
            lead_name=_text(row.get("lead_name")),
            participants=_text(row.get("participants")),
            tour_date=_parse_datetime(row.get("tour_date")),
            status=_text(row.get("status")) or "Open",
            score=tally_score(q.result for q in questions).percent if questions else None,
            questions=questions,
            photos=_image_refs(row.get("photos"), upload_root),
            signature=ImageRef(resolve_upload(signature_rel, upload_root)) if signature_rel else None,
        )
