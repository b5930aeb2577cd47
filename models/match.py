"""
Match model for league fixtures and knockout bracket slots.
"""

from typing import Optional

from sqlalchemy import String, Integer, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class MatchRecord(Base):
    """
    A league fixture or a knockout bracket slot.

    Knockout matches carry a bracket stage and position and point at the
    match their winner feeds into; either participant slot may be empty.
    """
    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    # Position within the stored collection
    seq: Mapped[int] = mapped_column(Integer, default=0)
    competition_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="scheduled")
    round: Mapped[int] = mapped_column(Integer, nullable=False)

    # Participants (empty until known)
    home_participant_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    away_participant_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    # Final scores
    home_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    away_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Knockout bracket
    bracket_stage: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    bracket_position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    next_match_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    is_bye: Mapped[bool] = mapped_column(Boolean, default=False)

    played_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    def __repr__(self) -> str:
        return f"<MatchRecord(id={self.id}, round={self.round}, status={self.status})>"

    @classmethod
    def from_record(cls, record: dict, seq: int = 0) -> "MatchRecord":
        return cls(
            id=record["id"],
            seq=seq,
            competition_id=record["competition_id"],
            status=record.get("status", "scheduled"),
            round=record["round"],
            home_participant_id=record.get("home_participant_id"),
            away_participant_id=record.get("away_participant_id"),
            home_score=record.get("home_score"),
            away_score=record.get("away_score"),
            bracket_stage=record.get("bracket_stage"),
            bracket_position=record.get("bracket_position"),
            next_match_id=record.get("next_match_id"),
            is_bye=record.get("is_bye", False),
            played_at=record.get("played_at"),
        )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "competition_id": self.competition_id,
            "home_participant_id": self.home_participant_id,
            "away_participant_id": self.away_participant_id,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "status": self.status,
            "round": self.round,
            "bracket_stage": self.bracket_stage,
            "bracket_position": self.bracket_position,
            "next_match_id": self.next_match_id,
            "is_bye": self.is_bye,
            "played_at": self.played_at,
        }
