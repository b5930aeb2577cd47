"""
Participant model with its aggregate match statistics.
"""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class ParticipantRecord(Base):
    """A participant entered in one competition."""
    __tablename__ = "participants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    # Position within the stored collection
    seq: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    competition_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)

    # Aggregate stats
    played: Mapped[int] = mapped_column(Integer, default=0)
    won: Mapped[int] = mapped_column(Integer, default=0)
    drawn: Mapped[int] = mapped_column(Integer, default=0)
    lost: Mapped[int] = mapped_column(Integer, default=0)
    goals_for: Mapped[int] = mapped_column(Integer, default=0)
    goals_against: Mapped[int] = mapped_column(Integer, default=0)
    points: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<ParticipantRecord(id={self.id}, name='{self.name}')>"

    @property
    def goal_difference(self) -> int:
        """Goals scored minus goals conceded."""
        return self.goals_for - self.goals_against

    @classmethod
    def from_record(cls, record: dict, seq: int = 0) -> "ParticipantRecord":
        stats = record.get("stats", {})
        return cls(
            id=record["id"],
            seq=seq,
            name=record["name"],
            competition_id=record["competition_id"],
            played=stats.get("played", 0),
            won=stats.get("won", 0),
            drawn=stats.get("drawn", 0),
            lost=stats.get("lost", 0),
            goals_for=stats.get("goals_for", 0),
            goals_against=stats.get("goals_against", 0),
            points=stats.get("points", 0),
        )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "competition_id": self.competition_id,
            "stats": {
                "played": self.played,
                "won": self.won,
                "drawn": self.drawn,
                "lost": self.lost,
                "goals_for": self.goals_for,
                "goals_against": self.goals_against,
                "goal_difference": self.goal_difference,
                "points": self.points,
            },
        }
