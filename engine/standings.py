"""
League standings.

Rankings are recomputed from current stats on every call.

Tiebreaker order:
1. Points (desc)
2. Goal difference (desc)
3. Goals scored (desc)
4. Name (asc)
"""

from typing import Iterable, Optional

from engine.entities import Participant


def standing_key(participant: Participant) -> tuple:
    stats = participant.stats
    return (
        -stats.points,
        -stats.goal_difference,
        -stats.goals_for,
        participant.name.casefold(),
        participant.name,
    )


def sort_players_by_standing(participants: Iterable[Participant]) -> list[Participant]:
    """Return participants in table order; the input is left untouched."""
    return sorted(participants, key=standing_key)


def determine_league_winner(participants: Iterable[Participant]) -> Optional[str]:
    """Id of the table leader, or None for an empty table."""
    table = sort_players_by_standing(participants)
    return table[0].id if table else None
