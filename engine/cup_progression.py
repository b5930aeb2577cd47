"""
Cup Progression

Moves knockout winners into the next round after a result is recorded,
applying the same slot and bye rules the bracket builder uses.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from engine.entities import Match, MatchStatus
from engine.exceptions import InvalidOperation, NotFound
from engine.knockout_bracket import FINAL, BracketGrid, place_in_slot, settle_match_status


logger = logging.getLogger(__name__)


@dataclass
class Advancement:
    """One participant moved into a later-round slot."""
    participant_id: str
    from_match_id: str
    to_match_id: str
    became_bye: bool


def _find_next(matches_by_id: dict[str, Match], match: Match) -> Optional[Match]:
    if not match.next_match_id:
        return None
    next_match = matches_by_id.get(match.next_match_id)
    if next_match is None:
        raise NotFound("Match", match.next_match_id)
    return next_match


def _slot_occupant(match: Match, source_position: int) -> Optional[str]:
    if source_position % 2 == 0:
        return match.home_participant_id
    return match.away_participant_id


def check_can_advance(match: Match, winner_id: Optional[str], matches: list[Match]) -> None:
    """
    Validate that placing ``winner_id`` out of ``match`` is legal.

    Called before any mutation so a rejected edit writes nothing.

    Raises:
        NotFound: ``next_match_id`` references a missing match
        InvalidOperation: a different participant already played on from
            this slot
    """
    matches_by_id = {m.id: m for m in matches}
    source = match
    next_match = _find_next(matches_by_id, match)
    # A bye passes its participant straight through
    while next_match is not None and next_match.is_bye:
        source, next_match = next_match, _find_next(matches_by_id, next_match)
    if next_match is None:
        return

    # A level score counts as a change when a winner had already moved on
    occupant = _slot_occupant(next_match, source.bracket_position or 0)
    if next_match.is_completed and occupant != winner_id:
        raise InvalidOperation(
            f"Cannot change the winner of match {match.id}: "
            f"next match {next_match.id} has already been played"
        )


def _clear_slot(match: Match, source_position: int) -> None:
    if source_position % 2 == 0:
        match.home_participant_id = None
    else:
        match.away_participant_id = None


def _withdraw_winner(match: Match, matches_by_id: dict[str, Match]) -> None:
    """
    Take back the participant this match had already sent forward.

    Used when a decided result is edited into a draw. A bye that only
    existed to carry the old winner turns back into a pending slot, and
    the chain is followed to the slot the participant finally reached.
    """
    source = match
    while True:
        next_match = _find_next(matches_by_id, source)
        if next_match is None or next_match.is_completed:
            return

        if next_match.is_bye:
            logger.debug("Withdrew %s from bye %s", next_match.home_participant_id, next_match.id)
            next_match.home_participant_id = None
            next_match.is_bye = False
            next_match.status = MatchStatus.PENDING
            source = next_match
            continue

        _clear_slot(next_match, source.bracket_position or 0)
        # The feeder is a real match, so the slot is waiting on it again
        next_match.status = MatchStatus.PENDING
        return


def advance_winner(match: Match, matches: list[Match]) -> list[Advancement]:
    """
    Advance the winner of a completed cup match.

    Args:
        match: The match whose result was just recorded
        matches: Every match of the same competition; mutated in place

    Returns:
        The advancements made, first the winner then any bye chain.
        Empty when the match has no next match or ended level; a level
        result takes back any winner this match had already sent on.
    """
    matches_by_id = {m.id: m for m in matches}
    grid = BracketGrid.from_matches(matches)

    winner_id = match.winner_id()
    if match.next_match_id and winner_id is None and match.is_completed:
        logger.warning("Match %s ended level; nobody advances", match.id)
        _withdraw_winner(match, matches_by_id)
        return []

    advancements: list[Advancement] = []
    source = match
    participant_id = winner_id

    while participant_id is not None:
        next_match = _find_next(matches_by_id, source)
        if next_match is None:
            break

        source_position = source.bracket_position or 0
        if next_match.is_completed:
            # Already resolved with this participant in place
            break

        if next_match.is_bye:
            # Lone slot of a bye is always home
            next_match.home_participant_id = participant_id
            became_bye = True
        else:
            place_in_slot(next_match, participant_id, source_position)
            became_bye = settle_match_status(grid, next_match, source.round - 1, source_position)
        advancements.append(Advancement(
            participant_id=participant_id,
            from_match_id=source.id,
            to_match_id=next_match.id,
            became_bye=became_bye,
        ))
        logger.debug(
            "Advanced %s from match %s to match %s (%s)",
            participant_id, source.id, next_match.id, next_match.status.value,
        )

        if not became_bye:
            break
        source = next_match
        participant_id = next_match.home_participant_id

    return advancements


def is_cup_finished(matches: list[Match]) -> tuple[bool, Optional[str]]:
    """Whether the Final has been played, and who won it."""
    final = next((m for m in matches if m.bracket_stage == FINAL), None)
    if final is None or final.status != MatchStatus.COMPLETED:
        return False, None
    return True, final.winner_id()
