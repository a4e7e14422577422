from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel, create_engine, Session

from . import config


class SafetyTour(SQLModel, table=True):
    """Stored tour row; ``responses`` and ``photos`` hold JSON text."""

    __tablename__ = "safety_tours"

    id: Optional[int] = Field(default=None, primary_key=True)
    site: str = ""
    area: str = ""
    lead_name: str = ""
    participants: str = ""
    tour_date: Optional[datetime] = None
    status: str = "Open"
    responses: Optional[str] = None
    photos: Optional[str] = None
    signature_path: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ReportArtifact(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tour_id: int = Field(foreign_key="safety_tours.id", index=True)
    path: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
