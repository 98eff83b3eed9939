"""
Tests for setup validation and preview statistics.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.exceptions import SetupError, TournamentError
from bracket.groups import calculate_group_distribution
from bracket.validation import (
    calculate_tournament_stats,
    get_bracket_options,
    normalize_player_names,
    requires_group_phase,
    validate_setup,
)


class TestBracketOptions:
    """Tests for which bracket sizes a field may choose."""

    def test_perfect_fields_have_no_options(self):
        """2, 4, 8 and 16 players play straight knock-out."""
        for count in (2, 4, 8, 16):
            assert not requires_group_phase(count)
            assert get_bracket_options(count) == []

    def test_options_below_player_count(self):
        """Only bracket sizes smaller than the field are offered."""
        assert get_bracket_options(5) == [2, 4]
        assert get_bracket_options(6) == [2, 4]
        assert get_bracket_options(9) == [2, 4, 8]
        assert get_bracket_options(17) == [2, 4, 8, 16]

    def test_too_few_players(self):
        """Below three players there is nothing to choose."""
        assert get_bracket_options(0) == []
        assert get_bracket_options(1) == []


class TestValidateSetup:
    """Tests for validate_setup."""

    def test_two_players_direct(self):
        """Two players make a direct final."""
        plan = validate_setup("Duel", ["A", "B"])
        assert plan.use_group_phase is False
        assert plan.bracket_size == 2
        assert plan.player_names == ["A", "B"]

    def test_three_players_rejected(self):
        """Three players cannot be played."""
        with pytest.raises(SetupError, match="3 players"):
            validate_setup("Cup", ["A", "B", "C"])

    def test_too_few_players_rejected(self):
        """At least two players are needed."""
        with pytest.raises(SetupError, match="At least 2"):
            validate_setup("Cup", ["A"])
        with pytest.raises(SetupError, match="At least 2"):
            validate_setup("Cup", [])

    def test_missing_name_rejected(self):
        """The tournament needs a name."""
        with pytest.raises(SetupError, match="name"):
            validate_setup("   ", ["A", "B"])
        with pytest.raises(SetupError, match="name"):
            validate_setup(None, ["A", "B"])

    def test_non_string_name_is_text(self):
        """Names that arrive as numbers are used as text."""
        plan = validate_setup(2024, ["A", "B"])
        assert plan.name == "2024"

    def test_duplicate_player_rejected(self):
        """Player names must be unique."""
        with pytest.raises(SetupError, match="already exists"):
            validate_setup("Cup", ["A", "B", " A", "C"])

    def test_names_are_trimmed(self):
        """Whitespace is stripped and blank entries dropped."""
        plan = validate_setup("  Cup ", [" A ", "", "B", "   "])
        assert plan.name == "Cup"
        assert plan.player_names == ["A", "B"]
        assert normalize_player_names([None, " x "]) == ["x"]

    def test_group_phase_defaults_to_largest_bracket(self):
        """Six players default to a bracket of four."""
        plan = validate_setup("Cup", [f"P{i}" for i in range(6)])
        assert plan.use_group_phase is True
        assert plan.bracket_size == 4
        assert plan.distribution == calculate_group_distribution(6, 4)

    def test_explicit_bracket_size(self):
        """A smaller offered bracket can be chosen."""
        plan = validate_setup("Cup", [f"P{i}" for i in range(6)], bracket_size=2)
        assert plan.bracket_size == 2
        assert plan.distribution.group_count == 2
        assert plan.distribution.advancing_per_group == 1

    def test_unavailable_bracket_size_rejected(self):
        """Bracket sizes not smaller than the field are refused."""
        with pytest.raises(SetupError, match="not available"):
            validate_setup("Cup", [f"P{i}" for i in range(6)], bracket_size=8)

    def test_no_group_layout_rejected(self):
        """A field with no group layout is refused before building."""
        with pytest.raises(SetupError, match="No group layout"):
            validate_setup("Cup", [f"P{i}" for i in range(100)])

    def test_setup_error_is_tournament_error(self):
        """Callers can catch every setup problem as a TournamentError."""
        with pytest.raises(TournamentError):
            validate_setup("Cup", ["A", "B", "C"])


class TestTournamentStats:
    """Tests for the setup preview numbers."""

    def test_perfect_bracket_stats(self):
        """Eight players: three rounds, seven matches."""
        assert calculate_tournament_stats(8, 8) == {
            'groupMatches': 0, 'koRounds': 3, 'koMatches': 7, 'totalMatches': 7, 'byes': 0
        }

    def test_group_phase_stats(self):
        """Six players in two groups of three then a bracket of four."""
        distribution = calculate_group_distribution(6, 4)
        assert calculate_tournament_stats(6, 4, distribution) == {
            'groupMatches': 6, 'koRounds': 2, 'koMatches': 3, 'totalMatches': 9, 'byes': 0
        }

    def test_byes_for_uneven_field(self):
        """Five players in a direct bracket of eight get three byes."""
        assert calculate_tournament_stats(5, 5) == {
            'groupMatches': 0, 'koRounds': 3, 'koMatches': 7, 'totalMatches': 7, 'byes': 3
        }
