"""
Competition model for persistence.

Ordered participant and match id lists are stored as JSON text so the
display order survives a reload.
"""

import json
from typing import Optional

from sqlalchemy import String, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class CompetitionRecord(Base):
    """
    A league or cup.

    Stores the competition header, its points settings and the ordered
    participant and match id lists.
    """
    __tablename__ = "competitions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    # Position within the stored collection
    seq: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="setup")

    # Points settings
    points_for_win: Mapped[int] = mapped_column(Integer, default=3)
    points_for_draw: Mapped[int] = mapped_column(Integer, default=1)
    points_for_loss: Mapped[int] = mapped_column(Integer, default=0)

    winner_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    # ISO-8601 timestamps, kept as text so the UTC offset survives SQLite
    created_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    completed_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    # Ordered id lists (JSON)
    participant_ids_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    match_ids_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<CompetitionRecord(id={self.id}, name='{self.name}', type={self.type})>"

    # JSON property helpers
    @property
    def participant_ids(self) -> list[str]:
        if self.participant_ids_json:
            return json.loads(self.participant_ids_json)
        return []

    @participant_ids.setter
    def participant_ids(self, value: list[str]) -> None:
        self.participant_ids_json = json.dumps(value)

    @property
    def match_ids(self) -> list[str]:
        if self.match_ids_json:
            return json.loads(self.match_ids_json)
        return []

    @match_ids.setter
    def match_ids(self, value: list[str]) -> None:
        self.match_ids_json = json.dumps(value)

    @classmethod
    def from_record(cls, record: dict, seq: int = 0) -> "CompetitionRecord":
        """Build a row from a stored competition dict."""
        settings = record.get("settings", {})
        row = cls(
            id=record["id"],
            seq=seq,
            name=record["name"],
            type=record["type"],
            status=record.get("status", "setup"),
            points_for_win=settings.get("points_for_win", 3),
            points_for_draw=settings.get("points_for_draw", 1),
            points_for_loss=settings.get("points_for_loss", 0),
            winner_id=record.get("winner_id"),
            created_at=record.get("created_at"),
            completed_at=record.get("completed_at"),
        )
        row.participant_ids = record.get("participant_ids", [])
        row.match_ids = record.get("match_ids", [])
        return row

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "status": self.status,
            "participant_ids": self.participant_ids,
            "match_ids": self.match_ids,
            "settings": {
                "points_for_win": self.points_for_win,
                "points_for_draw": self.points_for_draw,
                "points_for_loss": self.points_for_loss,
            },
            "winner_id": self.winner_id,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }
