"""
Knockout Bracket Engine

Builds a single-elimination bracket for any number of participants.

The field is padded to the next power of two. Round 1 pairs slots
sequentially, so a short field produces bye matches (one participant, no
opponent) and fully empty pairs (no match at all). Later rounds start as
empty placeholders; placeholders no participant can ever reach are
pruned, and bye winners are pushed forward until they meet a slot that a
real match will eventually fill.

Matches are held in a round-major grid indexed by (round, position) so
the feeder subtree of any slot can be walked with plain integer indices:
the feeders of (r, i) are (r - 1, 2i) and (r - 1, 2i + 1).
"""

import logging
import math
import random
from collections import deque
from typing import Iterable, Optional

from config import COMPETITION_DEFAULTS
from engine.entities import IdFactory, Match, MatchStatus, generate_id
from engine.exceptions import InvalidInput


logger = logging.getLogger(__name__)


FINAL = "F"
SEMI_FINAL = "SF"
QUARTER_FINAL = "QF"

_NAMED_STAGES = {2: FINAL, 4: SEMI_FINAL, 8: QUARTER_FINAL}
_FULL_NAMES = {FINAL: "Final", SEMI_FINAL: "Semi Finals", QUARTER_FINAL: "Quarter Finals"}


def stage_name_for_slots(slots: int) -> str:
    """Short stage label for a round entered by ``slots`` participants."""
    return _NAMED_STAGES.get(slots, f"R{slots}")


def slots_for_stage(stage: str) -> int:
    """Inverse of :func:`stage_name_for_slots`."""
    for slots, name in _NAMED_STAGES.items():
        if name == stage:
            return slots
    if stage.startswith("R") and stage[1:].isdigit():
        return int(stage[1:])
    raise InvalidInput(f"Unknown bracket stage: {stage}")


def get_bracket_stage_names(num_rounds: int) -> list[str]:
    """
    Stage labels for each round, counted back from the Final.

    Example: 3 rounds -> ["QF", "SF", "F"]; 6 rounds -> ["R64", ..., "F"].
    Brackets larger than 64 slots continue the pattern (R128, R256, ...).
    """
    return [stage_name_for_slots(2 ** (num_rounds - r)) for r in range(num_rounds)]


def full_stage_name(stage: str) -> str:
    """Human-readable stage name, e.g. "QF" -> "Quarter Finals"."""
    if stage in _FULL_NAMES:
        return _FULL_NAMES[stage]
    if stage.startswith("R") and stage[1:].isdigit():
        return f"Round of {stage[1:]}"
    return stage


class BracketGrid:
    """
    Arena of bracket matches addressed by (round index, position).

    Round index 0 is the first round. A ``None`` cell is a slot with no
    match: an empty first-round pair or a pruned placeholder.
    """

    def __init__(self, rounds: list[list[Optional[Match]]]):
        self.rounds = rounds

    @classmethod
    def from_matches(cls, matches: Iterable[Match]) -> "BracketGrid":
        """Rebuild the grid from stored bracket matches of one competition."""
        bracket = [m for m in matches if m.bracket_position is not None]
        if not bracket:
            return cls([])

        num_rounds = max(m.round for m in bracket)
        rounds: list[list[Optional[Match]]] = [
            [None] * (2 ** (num_rounds - 1 - r)) for r in range(num_rounds)
        ]
        for match in bracket:
            rounds[match.round - 1][match.bracket_position] = match
        return cls(rounds)

    @property
    def num_rounds(self) -> int:
        return len(self.rounds)

    def at(self, round_index: int, position: int) -> Optional[Match]:
        if round_index < 0 or round_index >= len(self.rounds):
            return None
        if position < 0 or position >= len(self.rounds[round_index]):
            return None
        return self.rounds[round_index][position]

    def has_any_player_in_tree(self, round_index: int, position: int) -> bool:
        """True if the subtree rooted at this slot holds any participant."""
        match = self.at(round_index, position)
        if match is None:
            return False
        if match.home_participant_id or match.away_participant_id:
            return True
        if round_index == 0:
            return False
        return (
            self.has_any_player_in_tree(round_index - 1, position * 2)
            or self.has_any_player_in_tree(round_index - 1, position * 2 + 1)
        )

    def has_real_match_in_tree(self, round_index: int, position: int) -> bool:
        """
        True if the subtree rooted at this slot will produce a participant
        by actually playing a match.

        Scheduled, played and non-bye pending matches count; a bye does not
        count itself but its feeders are searched.
        """
        match = self.at(round_index, position)
        if match is None:
            return False
        if not match.is_bye and match.status in (
            MatchStatus.SCHEDULED, MatchStatus.PENDING, MatchStatus.COMPLETED
        ):
            return True
        if round_index == 0:
            return False
        return (
            self.has_real_match_in_tree(round_index - 1, position * 2)
            or self.has_real_match_in_tree(round_index - 1, position * 2 + 1)
        )

    def flatten(self) -> list[Match]:
        """Remaining matches in round-major, position order."""
        return [m for round_matches in self.rounds for m in round_matches if m is not None]


def place_in_slot(match: Match, participant_id: str, source_position: int) -> None:
    """Fill the home slot from an even feeder position, away from an odd one."""
    if source_position % 2 == 0:
        match.home_participant_id = participant_id
    else:
        match.away_participant_id = participant_id


def settle_match_status(
    grid: BracketGrid,
    match: Match,
    feeder_round: int,
    source_position: int,
) -> bool:
    """
    Recompute the status of a match after one of its slots was filled.

    ``feeder_round`` and ``source_position`` locate the feeder that just
    delivered a participant; its sibling is the other feeder.

    Returns:
        True if the match became a bye, meaning its lone participant
        should keep advancing.
    """
    if match.home_participant_id and match.away_participant_id:
        match.status = MatchStatus.SCHEDULED
        return False

    sibling_position = source_position + 1 if source_position % 2 == 0 else source_position - 1
    if grid.has_real_match_in_tree(feeder_round, sibling_position):
        match.status = MatchStatus.PENDING
        return False

    # The other side can never produce an opponent
    if not match.home_participant_id and match.away_participant_id:
        match.home_participant_id = match.away_participant_id
        match.away_participant_id = None
    match.is_bye = True
    match.status = MatchStatus.BYE
    return True


def _prune_unreachable(grid: BracketGrid) -> None:
    """Drop placeholders whose feeder subtrees hold no participant at all."""
    for r in range(1, grid.num_rounds):
        for i, match in enumerate(grid.rounds[r]):
            if match is None:
                continue
            if not (
                grid.has_any_player_in_tree(r - 1, i * 2)
                or grid.has_any_player_in_tree(r - 1, i * 2 + 1)
            ):
                grid.rounds[r][i] = None


def _link_next_matches(grid: BracketGrid) -> None:
    for r in range(grid.num_rounds - 1):
        for i, match in enumerate(grid.rounds[r]):
            if match is None:
                continue
            next_match = grid.at(r + 1, i // 2)
            if next_match is not None:
                match.next_match_id = next_match.id


def _advance_byes(grid: BracketGrid) -> None:
    """
    Push bye participants forward until each meets a slot that a real
    match will contest.

    Works through a queue of resolved byes; a target that turns into a
    bye itself is queued in turn.
    """
    queue = deque(
        (r, i)
        for r in range(grid.num_rounds)
        for i, match in enumerate(grid.rounds[r])
        if match is not None and match.is_bye and match.home_participant_id
    )

    while queue:
        r, i = queue.popleft()
        match = grid.rounds[r][i]
        target = grid.at(r + 1, i // 2)
        if target is None:
            continue

        participant_id = match.home_participant_id
        slot_taken = (
            target.home_participant_id if i % 2 == 0 else target.away_participant_id
        )
        if slot_taken:
            continue

        place_in_slot(target, participant_id, i)
        if settle_match_status(grid, target, r, i):
            logger.debug(
                "Bye carries %s into round %d position %d", participant_id, r + 2, i // 2
            )
            queue.append((r + 1, i // 2))


def generate_knockout_bracket(
    participant_ids: list[str],
    competition_id: str,
    rng: Optional[random.Random] = None,
    id_factory: IdFactory = generate_id,
) -> list[Match]:
    """
    Generate a complete knockout bracket.

    Participants are shuffled before seeding; pass a seeded ``rng`` for a
    reproducible draw.

    Args:
        participant_ids: Participants to seed
        competition_id: Owning competition
        rng: Random source for the draw (fresh system-seeded if omitted)
        id_factory: Produces a unique id per match

    Returns:
        All surviving matches, round-major and by bracket position.
    """
    if len(participant_ids) < COMPETITION_DEFAULTS.min_participants:
        raise InvalidInput(
            f"At least {COMPETITION_DEFAULTS.min_participants} participants are required, "
            f"got {len(participant_ids)}"
        )

    rng = rng or random.Random()
    seeded = list(participant_ids)
    rng.shuffle(seeded)

    total_slots = 2 ** math.ceil(math.log2(len(seeded)))
    num_rounds = int(math.log2(total_slots))
    stage_names = get_bracket_stage_names(num_rounds)

    rounds: list[list[Optional[Match]]] = []

    first_round: list[Optional[Match]] = []
    for i in range(total_slots // 2):
        home = seeded[i * 2] if i * 2 < len(seeded) else None
        away = seeded[i * 2 + 1] if i * 2 + 1 < len(seeded) else None

        if home is None and away is None:
            first_round.append(None)
            continue

        is_bye = home is None or away is None
        first_round.append(Match(
            id=id_factory(),
            competition_id=competition_id,
            round=1,
            home_participant_id=home or away,
            away_participant_id=None if is_bye else away,
            status=MatchStatus.BYE if is_bye else MatchStatus.SCHEDULED,
            bracket_stage=stage_names[0],
            bracket_position=i,
            is_bye=is_bye,
        ))
    rounds.append(first_round)

    for r in range(1, num_rounds):
        rounds.append([
            Match(
                id=id_factory(),
                competition_id=competition_id,
                round=r + 1,
                status=MatchStatus.PENDING,
                bracket_stage=stage_names[r],
                bracket_position=i,
            )
            for i in range(total_slots // 2 ** (r + 1))
        ])

    grid = BracketGrid(rounds)
    _prune_unreachable(grid)
    _link_next_matches(grid)
    _advance_byes(grid)

    matches = grid.flatten()
    logger.info(
        "Generated %d-slot knockout bracket (%d matches) for %d participants in competition %s",
        total_slots, len(matches), len(seeded), competition_id,
    )
    return matches


def _stage_order(stage: str) -> int:
    # Unrecognised labels sort after the Final
    try:
        return slots_for_stage(stage)
    except InvalidInput:
        return 0


def get_bracket_rounds(matches: Iterable[Match]) -> dict[str, list[Match]]:
    """
    Group bracket matches by stage for display.

    Stages run from the first round to the Final; matches within a stage
    are ordered by bracket position. Matches without a stage are ignored
    and stages with an unrecognised label come last.
    """
    rounds: dict[str, list[Match]] = {}
    for match in matches:
        if match.bracket_stage:
            rounds.setdefault(match.bracket_stage, []).append(match)

    return {
        stage: sorted(rounds[stage], key=lambda m: m.bracket_position or 0)
        for stage in sorted(rounds, key=_stage_order, reverse=True)
    }
