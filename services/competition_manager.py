"""
Competition Manager

Use-case layer over the competition engine. Every public operation loads
the collections it needs, computes a complete replacement in memory and
hands it to the store in one write. Validation failures raise before
anything is written.

Usage:
    store = MatchdayStore(SqlBackend())
    store.initialize()
    manager = CompetitionManager(store, event_bus=EventBus())
    cup = manager.create_competition("Office Cup", "cup")
    for name in ["Ann", "Bob", "Cat"]:
        manager.add_participant(cup.id, name)
    manager.generate_fixtures(cup.id)
    manager.record_result(match_id, 2, 1)
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from engine.cup_progression import Advancement, advance_winner, check_can_advance, is_cup_finished
from engine.entities import (
    Competition,
    CompetitionStatus,
    CompetitionType,
    IdFactory,
    Match,
    Participant,
    PointsConfig,
    generate_id,
    utc_now,
)
from engine.exceptions import InvalidInput, InvalidOperation, NotFound, StorageError
from engine.knockout_bracket import generate_knockout_bracket, get_bracket_rounds
from engine.results import MatchOutcome, ensure_recordable, record_result, validate_scores
from engine.round_robin import generate_round_robin_fixtures
from engine.standings import determine_league_winner, sort_players_by_standing
from models.schemas import CompetitionCreate, ParticipantCreate
from services.event_bus import EventBus
from services.storage import MatchdayStore


logger = logging.getLogger(__name__)


@dataclass
class CompetitionProgress:
    """How far through its fixtures a competition is."""
    completed: int
    total: int

    @property
    def percentage(self) -> float:
        return (self.completed / self.total) * 100 if self.total > 0 else 0.0


def _find(items: list, item_id: Optional[str], kind: str):
    for item in items:
        if item.id == item_id:
            return item
    raise NotFound(kind, str(item_id))


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"])
    return f"{field}: {error['msg']}" if field else error["msg"]


class CompetitionManager:
    """
    Creates competitions, generates their fixtures, records results and
    answers standings and bracket queries.
    """

    def __init__(
        self,
        store: MatchdayStore,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
        id_factory: IdFactory = generate_id,
    ):
        self.store = store
        self.event_bus = event_bus
        self.rng = rng
        self.id_factory = id_factory

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def create_competition(
        self,
        name: str,
        competition_type: str,
        settings: Optional[dict] = None,
    ) -> Competition:
        """
        Create a competition in setup status.

        Args:
            name: Display name
            competition_type: "league" or "cup"
            settings: Optional points_for_win / points_for_draw / points_for_loss
        """
        try:
            data = CompetitionCreate(name=name, type=competition_type, settings=settings or {})
        except ValidationError as exc:
            raise InvalidInput(f"Invalid competition: {_first_error(exc)}") from exc

        competition = Competition(
            id=self.id_factory(),
            name=data.name,
            type=CompetitionType(data.type),
            settings=PointsConfig(**data.settings.model_dump()),
        )

        competitions = self._load(self.store.get_competitions)
        self._write(competitions=competitions + [competition])

        logger.info("Created %s '%s' (%s)", competition.type.value, competition.name, competition.id)
        if self.event_bus:
            self.event_bus.competition_created.emit(competition.to_dict())
        return competition

    def add_participant(self, competition_id: str, name: str) -> Participant:
        """Enter a participant; only allowed before fixtures are generated."""
        try:
            data = ParticipantCreate(name=name)
        except ValidationError as exc:
            raise InvalidInput(f"Invalid participant: {_first_error(exc)}") from exc

        competitions = self._load(self.store.get_competitions)
        competition = _find(competitions, competition_id, "Competition")
        if competition.status != CompetitionStatus.SETUP:
            raise InvalidOperation(
                f"Cannot add participants to competition {competition_id} after fixtures are generated"
            )

        participant = Participant(id=self.id_factory(), name=data.name, competition_id=competition_id)
        competition.participant_ids.append(participant.id)

        participants = self._load(self.store.get_participants)
        self._write(competitions=competitions, participants=participants + [participant])

        if self.event_bus:
            self.event_bus.participant_added.emit(participant.to_dict())
        return participant

    def generate_fixtures(self, competition_id: str) -> list[Match]:
        """Build the league fixtures or cup bracket and start the competition."""
        competitions = self._load(self.store.get_competitions)
        competition = _find(competitions, competition_id, "Competition")
        if competition.status != CompetitionStatus.SETUP:
            raise InvalidOperation(f"Fixtures already generated for competition {competition_id}")

        matches = self._build_matches(competition)

        competition.match_ids = [m.id for m in matches]
        competition.status = CompetitionStatus.IN_PROGRESS

        all_matches = self._load(self.store.get_matches)
        self._write(competitions=competitions, matches=all_matches + matches)

        if self.event_bus:
            self.event_bus.fixtures_generated.emit(competition_id, len(matches))
        return matches

    def _build_matches(self, competition: Competition) -> list[Match]:
        if competition.type == CompetitionType.LEAGUE:
            return generate_round_robin_fixtures(
                competition.participant_ids, competition.id, id_factory=self.id_factory
            )
        return generate_knockout_bracket(
            competition.participant_ids, competition.id, rng=self.rng, id_factory=self.id_factory
        )

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def record_result(self, match_id: str, home_score, away_score) -> Match:
        """
        Record or edit a match result.

        Updates both participants' stats, advances a cup winner and checks
        whether the competition is finished, then writes participants,
        matches and competitions together.
        """
        entry = validate_scores(home_score, away_score)

        competitions = self._load(self.store.get_competitions)
        participants = self._load(self.store.get_participants)
        all_matches = self._load(self.store.get_matches)

        match = _find(all_matches, match_id, "Match")
        competition = _find(competitions, match.competition_id, "Competition")
        ensure_recordable(match)
        home = _find(participants, match.home_participant_id, "Participant")
        away = _find(participants, match.away_participant_id, "Participant")

        competition_matches = [m for m in all_matches if m.competition_id == competition.id]
        is_cup = competition.type == CompetitionType.CUP

        if is_cup:
            outcome = MatchOutcome.classify(entry.home_score, entry.away_score)
            new_winner = {MatchOutcome.WON: home.id, MatchOutcome.LOST: away.id}.get(outcome)
            check_can_advance(match, new_winner, competition_matches)

        result = record_result(
            match, entry.home_score, entry.away_score, competition.settings, home, away
        )

        advancements: list[Advancement] = []
        if is_cup:
            advancements = advance_winner(match, competition_matches)

        competition_participants = [p for p in participants if p.competition_id == competition.id]
        newly_completed = self._refresh_completion(
            competition, competition_matches, competition_participants
        )

        self._write(competitions=competitions, participants=participants, matches=all_matches)

        if self.event_bus:
            self.event_bus.emit_result(match.id, entry.home_score, entry.away_score, result.was_edit)
            for advancement in advancements:
                self.event_bus.emit_advancement(advancement)
            if newly_completed:
                self.event_bus.competition_completed.emit({
                    "competition_id": competition.id,
                    "winner_id": competition.winner_id,
                })
        return match

    def _refresh_completion(
        self,
        competition: Competition,
        matches: list[Match],
        participants: list[Participant],
    ) -> bool:
        """
        Mark the competition completed once its deciding matches are played.

        A result edited after completion recomputes the winner.

        Returns:
            True if the competition completed with this result
        """
        if competition.type == CompetitionType.LEAGUE:
            finished = all(m.is_completed for m in matches if not m.is_bye)
            winner_id = determine_league_winner(participants) if finished else None
        else:
            finished, winner_id = is_cup_finished(matches)

        if not finished:
            return False

        was_completed = competition.status == CompetitionStatus.COMPLETED
        competition.status = CompetitionStatus.COMPLETED
        competition.winner_id = winner_id
        if not was_completed:
            competition.completed_at = utc_now()
            logger.info("Competition %s completed; winner %s", competition.id, winner_id)
        return not was_completed

    def reset_competition(self, competition_id: str) -> Competition:
        """
        Clear every result of a competition.

        A cup gets a freshly drawn bracket; a league keeps its fixtures with
        scores cleared. All participant stats return to zero.
        """
        competitions = self._load(self.store.get_competitions)
        competition = _find(competitions, competition_id, "Competition")
        if competition.status == CompetitionStatus.SETUP:
            raise InvalidOperation(f"Competition {competition_id} has no fixtures to reset")

        all_matches = self._load(self.store.get_matches)
        participants = self._load(self.store.get_participants)

        if competition.type == CompetitionType.CUP:
            bracket = self._build_matches(competition)
            all_matches = [m for m in all_matches if m.competition_id != competition_id] + bracket
            competition.match_ids = [m.id for m in bracket]
        else:
            for match in all_matches:
                if match.competition_id == competition_id:
                    match.reset()

        for participant in participants:
            if participant.competition_id == competition_id:
                participant.stats.reset()

        competition.status = CompetitionStatus.IN_PROGRESS
        competition.winner_id = None
        competition.completed_at = None

        self._write(competitions=competitions, participants=participants, matches=all_matches)

        logger.info("Reset competition %s", competition_id)
        if self.event_bus:
            self.event_bus.competition_reset.emit(competition_id)
        return competition

    def delete_competition(self, competition_id: str) -> None:
        """Remove a competition with its participants and matches."""
        self._load(lambda: self.store.delete_competition(competition_id))
        logger.info("Deleted competition %s", competition_id)
        if self.event_bus:
            self.event_bus.competition_deleted.emit(competition_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_competition(self, competition_id: str) -> Competition:
        return self._load(lambda: self.store.get_competition(competition_id))

    def get_standings(self, competition_id: str) -> list[Participant]:
        """Participants of a competition in table order."""
        self.get_competition(competition_id)
        return sort_players_by_standing(self._load(lambda: self.store.get_participants(competition_id)))

    def get_bracket(self, competition_id: str) -> dict[str, list[Match]]:
        """Cup matches grouped by stage, first round to Final."""
        self.get_competition(competition_id)
        return get_bracket_rounds(self._load(lambda: self.store.get_matches(competition_id)))

    def get_progress(self, competition_id: str) -> CompetitionProgress:
        self.get_competition(competition_id)
        matches = self._load(lambda: self.store.get_matches(competition_id))
        return CompetitionProgress(
            completed=sum(1 for m in matches if m.is_completed),
            total=sum(1 for m in matches if not m.is_bye),
        )

    # -------------------------------------------------------------------------
    # Storage helpers
    # -------------------------------------------------------------------------

    def _load(self, loader):
        try:
            return loader()
        except StorageError as exc:
            self._report_storage_error(exc)
            raise

    def _write(self, **collections) -> None:
        try:
            self.store.save(**collections)
        except StorageError as exc:
            self._report_storage_error(exc)
            raise

    def _report_storage_error(self, exc: StorageError) -> None:
        logger.error("Storage failure: %s", exc)
        if self.event_bus:
            self.event_bus.storage_error.emit(str(exc))
