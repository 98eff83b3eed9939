"""
Single elimination bracket generation and bye resolution.

The bracket is a flat list of matches addressed by (round, position). The
winner of the match at position p in round r plays in round r + 1 at
position p // 2, in the player1 slot for even p and the player2 slot for odd p.
"""
import math
from typing import List, Optional

from .ids import generate_id
from .models import Match


def get_round_name(round_number: int, total_rounds: int) -> str:
    """Get the display name of a knock-out round."""
    rounds_from_end = total_rounds - round_number
    if rounds_from_end == 0:
        return "Final"
    elif rounds_from_end == 1:
        return "Semi-Finals"
    elif rounds_from_end == 2:
        return "Quarter-Finals"
    else:
        return f"Round {round_number}"


def is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def calculate_total_rounds(num_players: int) -> int:
    """Number of knock-out rounds needed for num_players."""
    if num_players <= 1:
        return 0
    return math.ceil(math.log2(num_players))


def calculate_bracket_size(num_players: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_players <= 0:
        return 0
    return 2 ** calculate_total_rounds(num_players)


def calculate_byes(num_players: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_players) - num_players


def matches_in_round(round_number: int, total_rounds: int) -> int:
    return 2 ** (total_rounds - round_number)


def create_empty_rounds(total_rounds: int, first_round: int = 1) -> List[Match]:
    """Create unfilled matches for rounds first_round..total_rounds."""
    matches = []
    for round_number in range(first_round, total_rounds + 1):
        for position in range(matches_in_round(round_number, total_rounds)):
            matches.append(Match(id=generate_id(), round=round_number, position=position))
    return matches


def create_first_round(player_ids: List[str], bracket_size: int) -> List[Match]:
    """
    Pair players into first round matches in the given order.

    A match that only gets one player is a bye and is completed with that
    player as winner. A match with no players is completed without a winner.
    """
    matches = []
    for position in range(bracket_size // 2):
        player1_id = player_ids[position * 2] if position * 2 < len(player_ids) else None
        player2_id = player_ids[position * 2 + 1] if position * 2 + 1 < len(player_ids) else None

        match = Match(id=generate_id(), round=1, position=position,
                      player1_id=player1_id, player2_id=player2_id)
        if player1_id and not player2_id:
            match.winner_id = player1_id
            match.is_complete = True
        elif player2_id and not player1_id:
            match.winner_id = player2_id
            match.is_complete = True
        elif not player1_id and not player2_id:
            match.is_complete = True

        matches.append(match)
    return matches


def get_round_matches(tournament, round_number: int) -> List[Match]:
    """Knock-out matches of one round, ordered by position."""
    return sorted((m for m in tournament.matches if m.round == round_number),
                  key=lambda m: m.position)


def find_match(matches: List[Match], match_id: str) -> Optional[Match]:
    for match in matches:
        if match.id == match_id:
            return match
    return None


def get_next_match(tournament, match: Match) -> Optional[Match]:
    """The match the winner of `match` plays next, or None after the final."""
    if match.round < 1 or match.round >= tournament.total_rounds:
        return None
    target_position = match.position // 2
    for candidate in tournament.matches:
        if candidate.round == match.round + 1 and candidate.position == target_position:
            return candidate
    return None


def get_final_match(tournament) -> Optional[Match]:
    for match in tournament.matches:
        if match.round == tournament.total_rounds:
            return match
    return None


def advance_winner(tournament, match: Match) -> Optional[Match]:
    """Write the winner of `match` into its slot of the next match."""
    next_match = get_next_match(tournament, match)
    if next_match is not None:
        if match.position % 2 == 0:
            next_match.player1_id = match.winner_id
        else:
            next_match.player2_id = match.winner_id
    return next_match


def update_completion(tournament):
    """Mark the tournament complete once the final has a winner. Works in place."""
    final_match = get_final_match(tournament)
    if final_match and final_match.is_complete and final_match.winner_id:
        tournament.is_complete = True
        tournament.winner_id = final_match.winner_id
    return tournament


def _resolve_pair(first: Match, second: Match, next_match: Match) -> bool:
    changed = False

    if first.is_complete and first.winner_id and not next_match.player1_id:
        next_match.player1_id = first.winner_id
        changed = True
    if second.is_complete and second.winner_id and not next_match.player2_id:
        next_match.player2_id = second.winner_id
        changed = True

    if next_match.is_complete:
        return changed

    first_empty = first.is_complete and not first.winner_id
    second_empty = second.is_complete and not second.winner_id

    if next_match.player1_id and not next_match.player2_id and second_empty:
        next_match.winner_id = next_match.player1_id
        next_match.is_complete = True
        changed = True
    elif next_match.player2_id and not next_match.player1_id and first_empty:
        next_match.winner_id = next_match.player2_id
        next_match.is_complete = True
        changed = True
    elif not next_match.player1_id and not next_match.player2_id and first_empty and second_empty:
        # Nobody will ever reach this match.
        next_match.is_complete = True
        changed = True

    return changed


def resolve_byes(tournament):
    """Cascade byes through the bracket until nothing changes. Works in place."""
    changed = True
    while changed:
        changed = False
        for round_number in range(1, tournament.total_rounds):
            current = get_round_matches(tournament, round_number)
            upcoming = get_round_matches(tournament, round_number + 1)
            for index, next_match in enumerate(upcoming):
                if _resolve_pair(current[index * 2], current[index * 2 + 1], next_match):
                    changed = True
    return update_completion(tournament)


def propagate_byes(tournament):
    """Return a copy of the tournament with all pending byes advanced."""
    return resolve_byes(tournament.copy())
