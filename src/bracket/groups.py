"""
Group phase: distribution planning, round-robin match generation and standings.
"""
import math
from itertools import combinations
from typing import List, Optional

from .ids import generate_id
from .models import Match, GroupStanding

MIN_GROUP_SIZE = 3
MAX_GROUP_SIZE = 5
FALLBACK_MIN_GROUP_SIZE = 2


class GroupDistribution:
    def __init__(self, group_count, advancing_per_group, group_sizes):
        self.group_count = group_count
        self.advancing_per_group = advancing_per_group
        self.group_sizes = group_sizes

    def to_dict(self):
        return {
            'groupCount': self.group_count,
            'advancingPerGroup': self.advancing_per_group,
            'groupSizes': list(self.group_sizes),
        }

    def __eq__(self, other):
        return isinstance(other, GroupDistribution) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"GroupDistribution(group_count={self.group_count}, "
                f"advancing_per_group={self.advancing_per_group}, group_sizes={self.group_sizes})")


def _balanced_group_sizes(player_count: int, group_count: int) -> List[int]:
    """Split players as evenly as possible; the first groups take the remainder."""
    base_size = player_count // group_count
    remainder = player_count % group_count
    return [base_size + 1 if i < remainder else base_size for i in range(group_count)]


def _try_group_count(player_count: int, bracket_size: int, group_count: int,
                     min_size_floor: int) -> Optional[GroupDistribution]:
    if bracket_size % group_count != 0:
        return None
    advancing_per_group = bracket_size // group_count
    group_sizes = _balanced_group_sizes(player_count, group_count)
    smallest = min(group_sizes)
    largest = max(group_sizes)
    if smallest >= advancing_per_group and smallest >= min_size_floor and largest <= MAX_GROUP_SIZE:
        return GroupDistribution(group_count, advancing_per_group, group_sizes)
    return None


def calculate_group_distribution(player_count: int, bracket_size: int) -> Optional[GroupDistribution]:
    """
    Plan how to split players into groups feeding a bracket of bracket_size.

    The preferred pass looks for groups of 3-5 players. If none fits, a
    second pass scans 2..player_count/2 groups and allows groups of 2.
    In both passes the group count must divide the bracket size, every group
    must hold at least as many players as advance from it, and the first
    (smallest) qualifying group count wins.

    Returns None when no layout exists.
    """
    if bracket_size >= player_count or player_count < 4:
        return None

    first = math.ceil(player_count / MAX_GROUP_SIZE)
    last = player_count // MIN_GROUP_SIZE
    for group_count in range(first, last + 1):
        distribution = _try_group_count(player_count, bracket_size, group_count, MIN_GROUP_SIZE)
        if distribution:
            return distribution

    for group_count in range(2, player_count // 2 + 1):
        distribution = _try_group_count(player_count, bracket_size, group_count, FALLBACK_MIN_GROUP_SIZE)
        if distribution:
            return distribution

    return None


def group_name(index: int) -> str:
    """Group A, Group B, ..."""
    return f"Group {chr(ord('A') + index)}"


def create_group_matches(group_id: str, player_ids: List[str]) -> List[Match]:
    """Create the full round-robin for a group, one match per pair of players."""
    matches = []
    for player1_id, player2_id in combinations(player_ids, 2):
        matches.append(Match(
            id=generate_id(),
            round=0,
            position=len(matches),
            player1_id=player1_id,
            player2_id=player2_id,
            group_id=group_id,
        ))
    return matches


def is_group_complete(group) -> bool:
    return all(match.is_complete for match in group.matches)


def get_group_standings(group) -> List[GroupStanding]:
    """
    Rank the players of a group by wins (desc), then losses (asc).

    Every member gets an entry, even with no games played. Players that tie
    on both keys keep their group order.
    """
    standings = {player_id: GroupStanding(player_id) for player_id in group.player_ids}

    for match in group.matches:
        if not (match.is_complete and match.winner_id):
            continue
        winner = standings.get(match.winner_id)
        if winner is None:
            continue
        winner.wins += 1
        winner.games_played += 1

        loser_id = match.loser_id()
        if loser_id and loser_id in standings:
            loser = standings[loser_id]
            loser.losses += 1
            loser.games_played += 1

    return sorted(standings.values(), key=lambda s: (-s.wins, s.losses))


def get_advancing_player_ids(group, count: int) -> List[str]:
    """Return the ids of the top `count` players of a group."""
    return [standing.player_id for standing in get_group_standings(group)[:count]]
