"""
Tournament builders and the progression engine.

Every function here is pure: it returns a new Tournament and never changes
the one it was given. Mutations that cannot apply (unknown ids, a match that
is missing a player or already decided, a winner who is not in the match)
return the input object unchanged, so callers can detect a no-op with an
identity check.
"""
import logging
import random
from datetime import datetime, timezone
from typing import List, Optional

from .elimination import (
    advance_winner,
    calculate_bracket_size,
    calculate_total_rounds,
    create_empty_rounds,
    create_first_round,
    find_match,
    get_round_matches,
    is_power_of_two,
    resolve_byes,
)
from .exceptions import InvalidGroupDistribution, TournamentError
from .groups import (
    calculate_group_distribution,
    create_group_matches,
    get_group_standings,
    group_name,
    is_group_complete,
)
from .ids import generate_id
from .models import Group, Player, Tournament

logger = logging.getLogger(__name__)


def _create_players(player_names: List[str]) -> List[Player]:
    return [Player(id=generate_id(), name=name) for name in player_names]


def shuffle_players(players: List[Player], rng: Optional[random.Random] = None) -> List[Player]:
    """Fisher-Yates shuffle into a new list."""
    rng = rng or random.Random()
    shuffled = list(players)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_tournament(name: str, player_names: List[str], rng: Optional[random.Random] = None) -> Tournament:
    """
    Create a direct knock-out tournament.

    Players are shuffled and paired into the first round of the smallest
    power-of-two bracket that holds them. Empty slots become byes, which are
    cascaded through the bracket before returning.
    """
    if len(player_names) < 2:
        raise TournamentError("A knock-out tournament needs at least 2 players")

    players = _create_players(player_names)
    shuffled = shuffle_players(players, rng)

    bracket_size = calculate_bracket_size(len(players))
    total_rounds = calculate_total_rounds(bracket_size)

    matches = create_first_round([p.id for p in shuffled], bracket_size)
    matches.extend(create_empty_rounds(total_rounds, first_round=2))

    tournament = Tournament(
        id=generate_id(),
        name=name,
        players=players,
        matches=matches,
        current_round=1,
        total_rounds=total_rounds,
        bracket_size=bracket_size,
        created_at=_now(),
        has_group_phase=False,
        groups=[],
        group_phase_complete=True,
        advancing_per_group=0,
    )
    logger.debug("Created knock-out tournament %s: %d players, bracket of %d",
                 tournament.id, len(players), bracket_size)
    return resolve_byes(tournament)


def create_tournament_with_groups(name: str, player_names: List[str], bracket_size: int,
                                  rng: Optional[random.Random] = None) -> Tournament:
    """
    Create a tournament with a round-robin group phase feeding a knock-out bracket.

    Raises InvalidGroupDistribution when the players cannot be split into
    groups that fill a bracket of bracket_size.
    """
    if not is_power_of_two(bracket_size):
        raise TournamentError(f"Bracket size must be a power of two, got {bracket_size}")

    players = _create_players(player_names)
    shuffled = shuffle_players(players, rng)

    distribution = calculate_group_distribution(len(players), bracket_size)
    if not distribution:
        raise InvalidGroupDistribution(len(players), bracket_size)

    groups = []
    player_index = 0
    for g, size in enumerate(distribution.group_sizes):
        group_player_ids = [p.id for p in shuffled[player_index:player_index + size]]
        group_id = generate_id()
        groups.append(Group(
            id=group_id,
            name=group_name(g),
            player_ids=group_player_ids,
            matches=create_group_matches(group_id, group_player_ids),
        ))
        player_index += size

    total_rounds = calculate_total_rounds(bracket_size)

    tournament = Tournament(
        id=generate_id(),
        name=name,
        players=players,
        matches=create_empty_rounds(total_rounds),
        current_round=0,
        total_rounds=total_rounds,
        bracket_size=bracket_size,
        created_at=_now(),
        has_group_phase=True,
        groups=groups,
        group_phase_complete=False,
        advancing_per_group=distribution.advancing_per_group,
    )
    logger.debug("Created group tournament %s: %d groups %s, %d advance per group",
                 tournament.id, distribution.group_count, distribution.group_sizes,
                 distribution.advancing_per_group)
    return tournament


def select_winner(tournament: Tournament, match_id: str, winner_id: str) -> Tournament:
    """Record the winner of a knock-out match and move them to the next round."""
    match = find_match(tournament.matches, match_id)
    if match is None:
        logger.debug("select_winner: unknown match %s", match_id)
        return tournament
    if not match.player1_id or not match.player2_id:
        logger.debug("select_winner: match %s is not fully populated", match_id)
        return tournament
    if match.is_complete:
        logger.debug("select_winner: match %s is already decided", match_id)
        return tournament
    if not match.has_player(winner_id):
        logger.debug("select_winner: %s does not play in match %s", winner_id, match_id)
        return tournament

    updated = tournament.copy()
    match = find_match(updated.matches, match_id)
    match.winner_id = winner_id
    match.is_complete = True
    advance_winner(updated, match)

    # A winner can land next to a branch that will never produce an opponent.
    return resolve_byes(updated)


def seed_players_from_groups(tournament: Tournament) -> List[str]:
    """
    Order the group qualifiers for the first knock-out round.

    All group winners come first (in group order), then all runners-up, and
    so on, which keeps players from the same group apart in round one.
    """
    group_standings = [get_group_standings(group) for group in tournament.groups]
    seeded = []
    for rank in range(tournament.advancing_per_group):
        for standings in group_standings:
            if rank < len(standings):
                seeded.append(standings[rank].player_id)
    return seeded


def _seed_first_round(tournament: Tournament, seeded: List[str]):
    for match in get_round_matches(tournament, 1):
        index = match.position * 2
        match.player1_id = seeded[index] if index < len(seeded) else None
        match.player2_id = seeded[index + 1] if index + 1 < len(seeded) else None


def check_and_advance_group_phase(tournament: Tournament) -> Tournament:
    """Seed the knock-out bracket once every group match has been played."""
    if not tournament.has_group_phase or tournament.group_phase_complete:
        return tournament
    if not all(is_group_complete(group) for group in tournament.groups):
        return tournament

    updated = tournament.copy()
    _seed_first_round(updated, seed_players_from_groups(updated))
    updated.group_phase_complete = True
    updated.current_round = 1
    logger.debug("Group phase of %s complete, knock-out bracket seeded", updated.id)
    return updated


def select_group_winner(tournament: Tournament, group_id: str, match_id: str, winner_id: str) -> Tournament:
    """Record the winner of a group match, then seed the bracket if the group phase is over."""
    group = next((g for g in tournament.groups if g.id == group_id), None)
    if group is None:
        logger.debug("select_group_winner: unknown group %s", group_id)
        return tournament
    match = find_match(group.matches, match_id)
    if match is None:
        logger.debug("select_group_winner: unknown match %s in group %s", match_id, group_id)
        return tournament
    if match.is_complete:
        logger.debug("select_group_winner: match %s is already decided", match_id)
        return tournament
    if not match.has_player(winner_id):
        logger.debug("select_group_winner: %s does not play in match %s", winner_id, match_id)
        return tournament

    updated = tournament.copy()
    group = next(g for g in updated.groups if g.id == group_id)
    match = find_match(group.matches, match_id)
    match.winner_id = winner_id
    match.is_complete = True

    return check_and_advance_group_phase(updated)


def get_player_by_id(tournament: Tournament, player_id: Optional[str]) -> Optional[Player]:
    if not player_id:
        return None
    for player in tournament.players:
        if player.id == player_id:
            return player
    return None
