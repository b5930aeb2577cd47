"""
Tests for League Standings
"""

from engine.entities import Participant, ParticipantStats
from engine.standings import determine_league_winner, sort_players_by_standing


def participant(name, points=0, goals_for=0, goals_against=0):
    return Participant(
        id=name.lower(),
        name=name,
        competition_id="c1",
        stats=ParticipantStats(points=points, goals_for=goals_for, goals_against=goals_against),
    )


class TestStandings:
    """Tests for the tiebreaker chain."""

    def test_points_first(self):
        table = sort_players_by_standing([
            participant("Ann", points=3),
            participant("Bob", points=6),
        ])
        assert [p.name for p in table] == ["Bob", "Ann"]

    def test_goal_difference_breaks_points_tie(self):
        table = sort_players_by_standing([
            participant("Ann", points=4, goals_for=5, goals_against=4),
            participant("Bob", points=4, goals_for=3, goals_against=0),
        ])
        assert [p.name for p in table] == ["Bob", "Ann"]

    def test_goals_scored_breaks_difference_tie(self):
        table = sort_players_by_standing([
            participant("Ann", points=4, goals_for=2, goals_against=1),
            participant("Bob", points=4, goals_for=5, goals_against=4),
        ])
        assert [p.name for p in table] == ["Bob", "Ann"]

    def test_name_breaks_remaining_tie(self):
        table = sort_players_by_standing([
            participant("cat"),
            participant("Bob"),
            participant("ann"),
        ])
        assert [p.name for p in table] == ["ann", "Bob", "cat"]

    def test_input_not_mutated_and_result_stable(self):
        players = [participant("Bob", points=1), participant("Ann", points=3), participant("Cat")]
        original = list(players)

        first = sort_players_by_standing(players)
        second = sort_players_by_standing(players)

        assert players == original
        assert [p.id for p in first] == [p.id for p in second]

    def test_league_winner(self):
        assert determine_league_winner([participant("Ann"), participant("Bob", points=1)]) == "bob"
        assert determine_league_winner([]) is None
