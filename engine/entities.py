"""
Competition entities shared by the schedulers, the result recorder and storage.

Every entity round-trips through a plain JSON-shaped dict (``to_dict`` /
``from_dict``) because the storage collaborator only ever loads and
replaces whole collections of such dicts.
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from config import COMPETITION_DEFAULTS


IdFactory = Callable[[], str]


def generate_id() -> str:
    """Collision-resistant identifier for a new entity."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class CompetitionType(enum.Enum):
    """Supported competition formats."""
    LEAGUE = "league"   # double round-robin
    CUP = "cup"         # single-elimination knockout


class CompetitionStatus(enum.Enum):
    """Competition lifecycle states."""
    SETUP = "setup"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class MatchStatus(enum.Enum):
    """Match lifecycle states."""
    SCHEDULED = "scheduled"   # both participants known, awaiting result
    PENDING = "pending"       # waiting for a feeder match to resolve
    BYE = "bye"               # sole participant advances without playing
    COMPLETED = "completed"


@dataclass(frozen=True)
class PointsConfig:
    """League points awarded per outcome."""
    points_for_win: int = COMPETITION_DEFAULTS.points_for_win
    points_for_draw: int = COMPETITION_DEFAULTS.points_for_draw
    points_for_loss: int = COMPETITION_DEFAULTS.points_for_loss

    def to_dict(self) -> dict:
        return {
            "points_for_win": self.points_for_win,
            "points_for_draw": self.points_for_draw,
            "points_for_loss": self.points_for_loss,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PointsConfig":
        return cls(
            points_for_win=data.get("points_for_win", COMPETITION_DEFAULTS.points_for_win),
            points_for_draw=data.get("points_for_draw", COMPETITION_DEFAULTS.points_for_draw),
            points_for_loss=data.get("points_for_loss", COMPETITION_DEFAULTS.points_for_loss),
        )


@dataclass
class ParticipantStats:
    """Aggregate record of a participant across completed matches."""
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    def reset(self) -> None:
        """Zero every counter."""
        self.played = self.won = self.drawn = self.lost = 0
        self.goals_for = self.goals_against = self.points = 0

    def to_dict(self) -> dict:
        return {
            "played": self.played,
            "won": self.won,
            "drawn": self.drawn,
            "lost": self.lost,
            "goals_for": self.goals_for,
            "goals_against": self.goals_against,
            "goal_difference": self.goal_difference,
            "points": self.points,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ParticipantStats":
        # goal_difference is derived, the stored copy is informational only
        return cls(
            played=data.get("played", 0),
            won=data.get("won", 0),
            drawn=data.get("drawn", 0),
            lost=data.get("lost", 0),
            goals_for=data.get("goals_for", 0),
            goals_against=data.get("goals_against", 0),
            points=data.get("points", 0),
        )


@dataclass
class Participant:
    """A player or team entered in one competition."""
    id: str
    name: str
    competition_id: str
    stats: ParticipantStats = field(default_factory=ParticipantStats)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "competition_id": self.competition_id,
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Participant":
        return cls(
            id=data["id"],
            name=data["name"],
            competition_id=data["competition_id"],
            stats=ParticipantStats.from_dict(data.get("stats", {})),
        )


@dataclass
class Match:
    """
    A fixture between two participant slots.

    Either slot may be empty: knockout placeholders start with both
    slots empty and bye matches never have an away participant.
    """
    id: str
    competition_id: str
    round: int
    home_participant_id: Optional[str] = None
    away_participant_id: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: MatchStatus = MatchStatus.SCHEDULED
    bracket_stage: Optional[str] = None
    bracket_position: Optional[int] = None
    next_match_id: Optional[str] = None
    is_bye: bool = False
    played_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == MatchStatus.COMPLETED

    def winner_id(self) -> Optional[str]:
        """Participant with the higher score, or None if unplayed or level."""
        if self.status != MatchStatus.COMPLETED:
            return None
        if self.home_score is None or self.away_score is None:
            return None
        if self.home_score > self.away_score:
            return self.home_participant_id
        if self.away_score > self.home_score:
            return self.away_participant_id
        return None

    def loser_id(self) -> Optional[str]:
        """Participant with the lower score, or None if unplayed or level."""
        if self.status != MatchStatus.COMPLETED:
            return None
        if self.home_score is None or self.away_score is None:
            return None
        if self.home_score < self.away_score:
            return self.home_participant_id
        if self.away_score < self.home_score:
            return self.away_participant_id
        return None

    def reset(self) -> None:
        """Clear the result, returning the match to its pre-result state."""
        self.home_score = None
        self.away_score = None
        self.played_at = None
        self.status = MatchStatus.BYE if self.is_bye else MatchStatus.SCHEDULED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "competition_id": self.competition_id,
            "home_participant_id": self.home_participant_id,
            "away_participant_id": self.away_participant_id,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "status": self.status.value,
            "round": self.round,
            "bracket_stage": self.bracket_stage,
            "bracket_position": self.bracket_position,
            "next_match_id": self.next_match_id,
            "is_bye": self.is_bye,
            "played_at": _to_iso(self.played_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Match":
        return cls(
            id=data["id"],
            competition_id=data["competition_id"],
            round=data["round"],
            home_participant_id=data.get("home_participant_id"),
            away_participant_id=data.get("away_participant_id"),
            home_score=data.get("home_score"),
            away_score=data.get("away_score"),
            status=MatchStatus(data.get("status", MatchStatus.SCHEDULED.value)),
            bracket_stage=data.get("bracket_stage"),
            bracket_position=data.get("bracket_position"),
            next_match_id=data.get("next_match_id"),
            is_bye=data.get("is_bye", False),
            played_at=_from_iso(data.get("played_at")),
        )


@dataclass
class Competition:
    """A league or cup with its ordered participants and match set."""
    id: str
    name: str
    type: CompetitionType
    status: CompetitionStatus = CompetitionStatus.SETUP
    participant_ids: list[str] = field(default_factory=list)
    match_ids: list[str] = field(default_factory=list)
    settings: PointsConfig = field(default_factory=PointsConfig)
    winner_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "status": self.status.value,
            "participant_ids": list(self.participant_ids),
            "match_ids": list(self.match_ids),
            "settings": self.settings.to_dict(),
            "winner_id": self.winner_id,
            "created_at": _to_iso(self.created_at),
            "completed_at": _to_iso(self.completed_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Competition":
        return cls(
            id=data["id"],
            name=data["name"],
            type=CompetitionType(data["type"]),
            status=CompetitionStatus(data.get("status", CompetitionStatus.SETUP.value)),
            participant_ids=list(data.get("participant_ids", [])),
            match_ids=list(data.get("match_ids", [])),
            settings=PointsConfig.from_dict(data.get("settings", {})),
            winner_id=data.get("winner_id"),
            created_at=_from_iso(data.get("created_at")) or utc_now(),
            completed_at=_from_iso(data.get("completed_at")),
        )
