"""
Shared pytest fixtures for knock-out bracket tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset (skips exhaustive sweeps)
"""
import pytest
import random
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.tournament import (
    create_tournament,
    create_tournament_with_groups,
    select_group_winner,
)


def player_id(tournament, name):
    """Look up a player's id by name."""
    return next(p.id for p in tournament.players if p.name == name)


def play_group_phase(tournament):
    """Resolve every group match in favour of player1."""
    for group in tournament.groups:
        for match in group.matches:
            tournament = select_group_winner(tournament, group.id, match.id, match.player1_id)
    return tournament


@pytest.fixture
def rng():
    """Seeded random generator for reproducible shuffles."""
    return random.Random(42)


@pytest.fixture
def two_player_tournament(rng):
    return create_tournament("Duel", ["A", "B"], rng=rng)


@pytest.fixture
def eight_player_tournament(rng):
    return create_tournament("Cup", [f"P{i}" for i in range(1, 9)], rng=rng)


@pytest.fixture
def six_player_group_tournament(rng):
    """Six players in two groups of three feeding a bracket of four."""
    return create_tournament_with_groups("Groups", [f"P{i}" for i in range(1, 7)], 4, rng=rng)


@pytest.fixture
def client():
    """Create a test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app's snapshot file at a temporary directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'TOURNAMENT_FILE', str(data_dir / "tournament.yaml"))
    return str(data_dir)
