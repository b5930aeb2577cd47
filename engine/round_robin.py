"""
Round-Robin Scheduler

Builds double round-robin league fixtures with the circle method:
position 0 stays fixed while every other position rotates one step per
round, so each unordered pair meets exactly once per leg. The second leg
mirrors the first with home and away swapped.
"""

import logging
from typing import Optional

from config import COMPETITION_DEFAULTS
from engine.entities import IdFactory, Match, MatchStatus, generate_id
from engine.exceptions import InvalidInput


logger = logging.getLogger(__name__)


def _first_leg_pairings(participant_ids: list[str]) -> list[tuple[int, str, str]]:
    """
    Pair participants for a single leg.

    Returns (round, home_id, away_id) tuples with 1-based rounds. An odd
    field gets a sentinel slot; pairings against it are skipped.
    """
    slots: list[Optional[str]] = list(participant_ids)
    if len(slots) % 2 != 0:
        slots.append(None)

    num_slots = len(slots)
    num_rounds = num_slots - 1
    pairings = []

    for round_index in range(num_rounds):
        for i in range(num_slots // 2):
            home = slots[i]
            away = slots[num_slots - 1 - i]
            if home is not None and away is not None:
                pairings.append((round_index + 1, home, away))

        # Rotate everything but the fixed first slot
        slots.insert(1, slots.pop())

    return pairings


def generate_round_robin_fixtures(
    participant_ids: list[str],
    competition_id: str,
    id_factory: IdFactory = generate_id,
) -> list[Match]:
    """
    Generate a full double round-robin for a league.

    Args:
        participant_ids: Participants in display order
        competition_id: Owning competition
        id_factory: Produces a unique id per match

    Returns:
        First-leg matches followed by the mirrored second leg, every match
        scheduled with no scores and no bracket information.
    """
    if len(participant_ids) < COMPETITION_DEFAULTS.min_participants:
        raise InvalidInput(
            f"At least {COMPETITION_DEFAULTS.min_participants} participants are required, "
            f"got {len(participant_ids)}"
        )

    num_rounds = len(participant_ids) + len(participant_ids) % 2 - 1
    first_leg = _first_leg_pairings(participant_ids)

    matches = [
        Match(
            id=id_factory(),
            competition_id=competition_id,
            round=round_number,
            home_participant_id=home_id,
            away_participant_id=away_id,
            status=MatchStatus.SCHEDULED,
        )
        for round_number, home_id, away_id in first_leg
    ]
    return_leg = [
        Match(
            id=id_factory(),
            competition_id=competition_id,
            round=round_number + num_rounds,
            home_participant_id=away_id,
            away_participant_id=home_id,
            status=MatchStatus.SCHEDULED,
        )
        for round_number, home_id, away_id in first_leg
    ]

    logger.info(
        "Generated %d league fixtures over %d rounds for competition %s",
        len(matches) + len(return_leg), num_rounds * 2, competition_id,
    )
    return matches + return_leg
