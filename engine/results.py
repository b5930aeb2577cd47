"""
Match Result Recorder

Validates a score line, records it on the match and keeps both
participants' aggregate stats in step. Editing an already-recorded result
first subtracts the old result's contribution (computed from the old
scores) and then adds the new one, so stats always equal the sum of the
current results.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from engine.entities import Match, MatchStatus, Participant, ParticipantStats, PointsConfig, utc_now
from engine.exceptions import InvalidInput, InvalidOperation
from models.schemas import ResultEntry


logger = logging.getLogger(__name__)


class MatchOutcome(enum.Enum):
    """Result of a match from one participant's point of view."""
    WON = "won"
    DRAWN = "drawn"
    LOST = "lost"

    @classmethod
    def classify(cls, own_score: int, opponent_score: int) -> "MatchOutcome":
        if own_score > opponent_score:
            return cls.WON
        if own_score < opponent_score:
            return cls.LOST
        return cls.DRAWN


def points_for(outcome: MatchOutcome, points: PointsConfig) -> int:
    if outcome == MatchOutcome.WON:
        return points.points_for_win
    if outcome == MatchOutcome.DRAWN:
        return points.points_for_draw
    return points.points_for_loss


class StatsLedger:
    """Applies and reverts one match's contribution to a participant's stats."""

    def __init__(self, points: PointsConfig):
        self.points = points

    def apply(self, stats: ParticipantStats, own_score: int, opponent_score: int) -> None:
        self._adjust(stats, own_score, opponent_score, sign=1)

    def revert(self, stats: ParticipantStats, own_score: int, opponent_score: int) -> None:
        """Exact inverse of :meth:`apply` for the same score line."""
        self._adjust(stats, own_score, opponent_score, sign=-1)

    def _adjust(self, stats: ParticipantStats, own_score: int, opponent_score: int, sign: int) -> None:
        outcome = MatchOutcome.classify(own_score, opponent_score)

        stats.played += sign
        stats.goals_for += sign * own_score
        stats.goals_against += sign * opponent_score
        stats.points += sign * points_for(outcome, self.points)

        if outcome == MatchOutcome.WON:
            stats.won += sign
        elif outcome == MatchOutcome.DRAWN:
            stats.drawn += sign
        else:
            stats.lost += sign


@dataclass
class RecordedResult:
    """Outcome of a successful :func:`record_result` call."""
    match: Match
    home: Participant
    away: Participant
    was_edit: bool
    previous_score: Optional[tuple[int, int]] = None


def validate_scores(home_score: Any, away_score: Any) -> ResultEntry:
    """
    Check a score line before anything is mutated.

    Raises:
        InvalidInput: either score is negative, not an integer, or missing
    """
    try:
        return ResultEntry(home_score=home_score, away_score=away_score)
    except ValidationError as exc:
        raise InvalidInput(f"Invalid score {home_score!r}-{away_score!r}: {exc.errors()[0]['msg']}") from exc


def ensure_recordable(match: Match) -> None:
    """
    Raises:
        InvalidOperation: the match is a bye or still waiting for a participant
    """
    if match.is_bye or match.status == MatchStatus.BYE:
        raise InvalidOperation(f"Cannot record a result for bye match {match.id}")
    if not match.home_participant_id or not match.away_participant_id:
        raise InvalidOperation(f"Match {match.id} is still waiting for its participants")


def record_result(
    match: Match,
    home_score: Any,
    away_score: Any,
    points: PointsConfig,
    home: Participant,
    away: Participant,
) -> RecordedResult:
    """
    Record (or re-record) a result and update both participants.

    Args:
        match: Match receiving the result; mutated in place
        home_score: Goals for the home participant
        away_score: Goals for the away participant
        points: Points awarded per outcome
        home: Home participant; stats mutated in place
        away: Away participant; stats mutated in place

    Returns:
        RecordedResult describing what changed
    """
    entry = validate_scores(home_score, away_score)
    ensure_recordable(match)
    if home.id != match.home_participant_id or away.id != match.away_participant_id:
        raise InvalidInput(f"Participants do not belong to match {match.id}")

    ledger = StatsLedger(points)
    previous = None

    if match.status == MatchStatus.COMPLETED and match.home_score is not None and match.away_score is not None:
        previous = (match.home_score, match.away_score)
        ledger.revert(home.stats, match.home_score, match.away_score)
        ledger.revert(away.stats, match.away_score, match.home_score)

    match.home_score = entry.home_score
    match.away_score = entry.away_score
    match.status = MatchStatus.COMPLETED
    match.played_at = utc_now()

    ledger.apply(home.stats, entry.home_score, entry.away_score)
    ledger.apply(away.stats, entry.away_score, entry.home_score)

    if previous:
        logger.info(
            "Edited match %s: %d-%d -> %d-%d", match.id,
            previous[0], previous[1], entry.home_score, entry.away_score,
        )
    else:
        logger.info("Recorded match %s: %d-%d", match.id, entry.home_score, entry.away_score)

    return RecordedResult(
        match=match,
        home=home,
        away=away,
        was_edit=previous is not None,
        previous_score=previous,
    )
