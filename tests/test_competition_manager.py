"""
Tests for the Competition Manager

End-to-end flows through storage: creating competitions, generating
fixtures, recording results, resets, and the events emitted along the way.
"""

import pytest

from engine.entities import CompetitionStatus, CompetitionType, MatchStatus
from engine.exceptions import InvalidInput, InvalidOperation, NotFound, StorageError
from engine.knockout_bracket import FINAL
from services.competition_manager import CompetitionManager
from services.storage import MatchdayStore, MemoryBackend


NAMES = ["Ann", "Bob", "Cat", "Dan", "Eve", "Fay"]


def setup_competition(manager, competition_type, names):
    competition = manager.create_competition("Test Competition", competition_type)
    for name in names:
        manager.add_participant(competition.id, name)
    manager.generate_fixtures(competition.id)
    return competition


def playable(manager, competition_id):
    return [
        m for m in manager.store.get_matches(competition_id)
        if m.status == MatchStatus.SCHEDULED
    ]


class Recorder:
    """Collects every payload emitted on a signal."""

    def __init__(self, signal):
        self.calls = []
        signal.connect(lambda *args: self.calls.append(args))


class TestSetup:
    """Tests for creating competitions and entering participants."""

    def test_create_competition(self, manager, event_bus):
        created = Recorder(event_bus.competition_created)

        competition = manager.create_competition("  Spring League  ", "league")

        stored = manager.get_competition(competition.id)
        assert stored.name == "Spring League"
        assert stored.type == CompetitionType.LEAGUE
        assert stored.status == CompetitionStatus.SETUP
        assert stored.settings.points_for_win == 3
        assert created.calls[0][0]["id"] == competition.id

    def test_custom_points(self, manager):
        competition = manager.create_competition(
            "Friendly", "league", settings={"points_for_win": 2, "points_for_draw": 1}
        )
        assert manager.get_competition(competition.id).settings.points_for_win == 2

    @pytest.mark.parametrize("name,competition_type,settings", [
        ("", "league", None),
        ("   ", "cup", None),
        ("Cup", "swiss", None),
        ("Cup", "cup", {"points_for_win": -1}),
    ])
    def test_invalid_competition_rejected(self, manager, name, competition_type, settings):
        with pytest.raises(InvalidInput):
            manager.create_competition(name, competition_type, settings=settings)
        assert manager.store.get_competitions() == []

    def test_participants_kept_in_entry_order(self, manager):
        competition = manager.create_competition("Cup", "cup")
        added = [manager.add_participant(competition.id, name) for name in NAMES[:3]]

        stored = manager.get_competition(competition.id)
        assert stored.participant_ids == [p.id for p in added]

    def test_blank_participant_name_rejected(self, manager):
        competition = manager.create_competition("Cup", "cup")
        with pytest.raises(InvalidInput):
            manager.add_participant(competition.id, " ")

    def test_add_participant_to_missing_competition(self, manager):
        with pytest.raises(NotFound):
            manager.add_participant("missing", "Ann")

    def test_add_participant_after_fixtures_rejected(self, manager):
        competition = setup_competition(manager, "league", NAMES[:3])
        with pytest.raises(InvalidOperation):
            manager.add_participant(competition.id, "Late")

    def test_generate_fixtures_starts_competition(self, manager, event_bus):
        generated = Recorder(event_bus.fixtures_generated)
        competition = setup_competition(manager, "league", NAMES[:4])

        stored = manager.get_competition(competition.id)
        assert stored.status == CompetitionStatus.IN_PROGRESS
        assert len(stored.match_ids) == 12
        assert generated.calls == [(competition.id, 12)]

    def test_generate_fixtures_twice_rejected(self, manager):
        competition = setup_competition(manager, "cup", NAMES[:4])
        with pytest.raises(InvalidOperation):
            manager.generate_fixtures(competition.id)

    def test_generate_fixtures_needs_two_participants(self, manager):
        competition = manager.create_competition("Cup", "cup")
        manager.add_participant(competition.id, "Solo")

        with pytest.raises(InvalidInput):
            manager.generate_fixtures(competition.id)
        assert manager.get_competition(competition.id).status == CompetitionStatus.SETUP


class TestLeague:
    """Tests for a league played to completion."""

    def test_full_league(self, manager, event_bus):
        completed = Recorder(event_bus.competition_completed)
        competition = setup_competition(manager, "league", NAMES[:4])

        for match in manager.store.get_matches(competition.id):
            # Earlier entrant always wins at home, draws away
            if match.home_participant_id < match.away_participant_id:
                manager.record_result(match.id, 2, 0)
            else:
                manager.record_result(match.id, 1, 1)

        stored = manager.get_competition(competition.id)
        standings = manager.get_standings(competition.id)

        assert stored.status == CompetitionStatus.COMPLETED
        assert stored.completed_at is not None
        assert stored.winner_id == standings[0].id
        assert completed.calls == [({"competition_id": competition.id, "winner_id": stored.winner_id},)]

        total_played = sum(p.stats.played for p in standings)
        assert total_played == 2 * 12
        assert manager.get_progress(competition.id).percentage == 100.0

    def test_record_result_updates_stats_and_emits(self, manager, event_bus):
        recorded = Recorder(event_bus.result_recorded)
        competition = setup_competition(manager, "league", NAMES[:2])
        match = manager.store.get_matches(competition.id)[0]

        manager.record_result(match.id, 3, 1)

        home = manager.store.get_participant(match.home_participant_id)
        away = manager.store.get_participant(match.away_participant_id)
        assert (home.stats.points, away.stats.points) == (3, 0)
        assert recorded.calls[0][0] == {
            "match_id": match.id, "home_score": 3, "away_score": 1, "was_edit": False,
        }

    def test_edit_result(self, manager, event_bus):
        recorded = Recorder(event_bus.result_recorded)
        competition = setup_competition(manager, "league", NAMES[:2])
        match = manager.store.get_matches(competition.id)[0]

        manager.record_result(match.id, 3, 1)
        manager.record_result(match.id, 0, 2)

        home = manager.store.get_participant(match.home_participant_id)
        away = manager.store.get_participant(match.away_participant_id)
        assert (home.stats.played, home.stats.lost, home.stats.points) == (1, 1, 0)
        assert (away.stats.played, away.stats.won, away.stats.points) == (1, 1, 3)
        assert recorded.calls[-1][0]["was_edit"]

    def test_edit_after_completion_recomputes_winner(self, manager, event_bus):
        completed = Recorder(event_bus.competition_completed)
        competition = setup_competition(manager, "league", NAMES[:2])
        first, second = manager.store.get_matches(competition.id)

        manager.record_result(first.id, 1, 0)
        manager.record_result(second.id, 0, 0)
        winner = manager.get_competition(competition.id).winner_id
        assert winner == first.home_participant_id

        manager.record_result(first.id, 0, 3)

        stored = manager.get_competition(competition.id)
        assert stored.status == CompetitionStatus.COMPLETED
        assert stored.winner_id == first.away_participant_id
        assert len(completed.calls) == 1

    def test_invalid_score_writes_nothing(self, manager):
        competition = setup_competition(manager, "league", NAMES[:2])
        match = manager.store.get_matches(competition.id)[0]

        with pytest.raises(InvalidInput):
            manager.record_result(match.id, 1, -2)

        assert manager.store.get_match(match.id).status == MatchStatus.SCHEDULED
        assert all(p.stats.played == 0 for p in manager.get_standings(competition.id))

    def test_unknown_match(self, manager):
        with pytest.raises(NotFound):
            manager.record_result("missing", 1, 0)

    def test_reset_league_keeps_fixtures(self, manager, event_bus):
        reset = Recorder(event_bus.competition_reset)
        competition = setup_competition(manager, "league", NAMES[:3])
        match_ids = manager.get_competition(competition.id).match_ids
        for match_id in match_ids:
            manager.record_result(match_id, 1, 0)

        manager.reset_competition(competition.id)

        stored = manager.get_competition(competition.id)
        assert stored.status == CompetitionStatus.IN_PROGRESS
        assert stored.winner_id is None
        assert stored.match_ids == match_ids
        assert all(m.status == MatchStatus.SCHEDULED for m in manager.store.get_matches(competition.id))
        assert all(p.stats.played == 0 for p in manager.get_standings(competition.id))
        assert reset.calls == [(competition.id,)]

    def test_reset_during_setup_rejected(self, manager):
        competition = manager.create_competition("League", "league")
        with pytest.raises(InvalidOperation):
            manager.reset_competition(competition.id)


class TestCup:
    """Tests for a cup played to completion."""

    def test_full_cup(self, manager, event_bus):
        advanced = Recorder(event_bus.participant_advanced)
        competition = setup_competition(manager, "cup", NAMES[:5])

        while True:
            remaining = playable(manager, competition.id)
            if not remaining:
                break
            manager.record_result(remaining[0].id, 2, 1)

        stored = manager.get_competition(competition.id)
        final = next(m for m in manager.store.get_matches(competition.id) if m.bracket_stage == FINAL)

        assert stored.status == CompetitionStatus.COMPLETED
        assert stored.winner_id == final.home_participant_id
        assert sum(1 for m in manager.store.get_matches(competition.id) if m.is_completed) == 4
        assert len(advanced.calls) >= 3
        assert manager.get_progress(competition.id).percentage == 100.0

    def test_bye_match_rejected(self, manager):
        competition = setup_competition(manager, "cup", NAMES[:3])
        bye = next(m for m in manager.store.get_matches(competition.id) if m.is_bye)

        with pytest.raises(InvalidOperation):
            manager.record_result(bye.id, 1, 0)

    def test_pending_match_rejected(self, manager):
        competition = setup_competition(manager, "cup", NAMES[:4])
        final = next(m for m in manager.store.get_matches(competition.id) if m.bracket_stage == FINAL)

        with pytest.raises(InvalidOperation):
            manager.record_result(final.id, 1, 0)

    def test_draw_advances_nobody(self, manager):
        competition = setup_competition(manager, "cup", NAMES[:4])
        match = playable(manager, competition.id)[0]

        manager.record_result(match.id, 1, 1)

        final = next(m for m in manager.store.get_matches(competition.id) if m.bracket_stage == FINAL)
        assert manager.store.get_match(match.id).is_completed
        assert final.home_participant_id is None and final.away_participant_id is None

    def test_changing_winner_after_next_round_played_rejected(self, manager):
        competition = setup_competition(manager, "cup", NAMES[:4])
        semis = playable(manager, competition.id)
        for semi in semis:
            manager.record_result(semi.id, 1, 0)
        final = playable(manager, competition.id)[0]
        manager.record_result(final.id, 1, 0)
        before = {m.id: m.to_dict() for m in manager.store.get_matches(competition.id)}

        with pytest.raises(InvalidOperation):
            manager.record_result(semis[0].id, 0, 1)

        after = {m.id: m.to_dict() for m in manager.store.get_matches(competition.id)}
        assert after == before

    def test_draw_edit_after_final_played_rejected(self, manager):
        competition = setup_competition(manager, "cup", NAMES[:4])
        semis = playable(manager, competition.id)
        for semi in semis:
            manager.record_result(semi.id, 2, 0)
        final = playable(manager, competition.id)[0]
        manager.record_result(final.id, 1, 0)
        before = {m.id: m.to_dict() for m in manager.store.get_matches(competition.id)}
        champion = manager.get_competition(competition.id).winner_id

        with pytest.raises(InvalidOperation):
            manager.record_result(semis[0].id, 0, 0)

        after = {m.id: m.to_dict() for m in manager.store.get_matches(competition.id)}
        assert after == before
        assert manager.get_competition(competition.id).winner_id == champion

    def test_draw_edit_before_final_withdraws_winner(self, manager):
        competition = setup_competition(manager, "cup", NAMES[:4])
        semis = playable(manager, competition.id)
        for semi in semis:
            manager.record_result(semi.id, 2, 0)

        manager.record_result(semis[0].id, 1, 1)

        final = next(m for m in manager.store.get_matches(competition.id) if m.bracket_stage == FINAL)
        assert final.status == MatchStatus.PENDING
        assert semis[0].home_participant_id not in (
            final.home_participant_id, final.away_participant_id,
        )

    def test_reset_cup_draws_new_bracket(self, manager):
        competition = setup_competition(manager, "cup", NAMES[:4])
        old_ids = set(manager.get_competition(competition.id).match_ids)
        manager.record_result(playable(manager, competition.id)[0].id, 3, 0)

        manager.reset_competition(competition.id)

        stored = manager.get_competition(competition.id)
        matches = manager.store.get_matches(competition.id)
        assert set(stored.match_ids).isdisjoint(old_ids)
        assert {m.id for m in matches} == set(stored.match_ids)
        assert not any(m.is_completed for m in matches)

    def test_bracket_grouped_by_stage(self, manager):
        competition = setup_competition(manager, "cup", NAMES[:6])
        assert list(manager.get_bracket(competition.id)) == ["QF", "SF", "F"]


class TestDeletionAndErrors:
    """Tests for deletion and storage failure reporting."""

    def test_delete_competition(self, manager, event_bus):
        deleted = Recorder(event_bus.competition_deleted)
        competition = setup_competition(manager, "league", NAMES[:3])

        manager.delete_competition(competition.id)

        assert manager.store.get_competitions() == []
        assert manager.store.get_participants() == []
        assert manager.store.get_matches() == []
        assert deleted.calls == [(competition.id,)]
        with pytest.raises(NotFound):
            manager.get_standings(competition.id)

    def test_storage_failure_is_reported(self, event_bus):
        class FailingBackend(MemoryBackend):
            def replace(self, collections):
                raise StorageError("disk full")

        errors = Recorder(event_bus.storage_error)
        manager = CompetitionManager(MatchdayStore(FailingBackend()), event_bus=event_bus)

        with pytest.raises(StorageError):
            manager.create_competition("Cup", "cup")
        assert errors.calls == [("disk full",)]
