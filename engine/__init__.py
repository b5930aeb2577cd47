"""
Matchday Competition Engine

Fixture generation, knockout brackets, result recording and standings.
This package contains no storage or GUI dependencies.
"""

from engine.entities import (
    Competition,
    CompetitionStatus,
    CompetitionType,
    Match,
    MatchStatus,
    Participant,
    ParticipantStats,
    PointsConfig,
)
from engine.exceptions import InvalidInput, InvalidOperation, MatchdayError, NotFound, StorageError
from engine.round_robin import generate_round_robin_fixtures
from engine.knockout_bracket import generate_knockout_bracket, get_bracket_rounds
from engine.standings import sort_players_by_standing

__all__ = [
    "Competition",
    "CompetitionStatus",
    "CompetitionType",
    "Match",
    "MatchStatus",
    "Participant",
    "ParticipantStats",
    "PointsConfig",
    "InvalidInput",
    "InvalidOperation",
    "MatchdayError",
    "NotFound",
    "StorageError",
    "generate_round_robin_fixtures",
    "generate_knockout_bracket",
    "get_bracket_rounds",
    "sort_players_by_standing",
]
